"""Graph assembly: one node per page, all kept edges, plus site metadata."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from lxml import etree

from graphgarden.config import Config
from graphgarden.errors import GraphGardenError, PageExtractionError
from graphgarden.models.graph import PROTOCOL_VERSION, Edge, Node, PublicFile, SiteMetadata
from graphgarden.services.extractor import extract_page
from graphgarden.services.normalizer import file_path_to_url
from graphgarden.services.walker import iter_pages

logger = logging.getLogger(__name__)

PUBLIC_FILE_PATH = Path(".well-known") / "graphgarden.json"


def utc_timestamp() -> str:
    """Return the current UTC time as ``YYYY-MM-DDTHH:MM:SSZ``."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def build_graph(
    pages: Iterable[Tuple[str, str]],
    base_url: str,
    site: SiteMetadata,
    friends: Sequence[str] = (),
    exclude_selectors: Sequence[str] = (),
) -> PublicFile:
    """Assemble a :class:`PublicFile` from ``(relative_path, html)`` pairs.

    *pages* must already be filtered to unique HTML files; they are processed
    in the order given.  Any failure aborts the whole build.

    Raises:
        PageExtractionError: naming the page whose extraction failed.
        PageReadError: propagated from a lazily reading *pages* iterable.
    """
    nodes: List[Node] = []
    edges: List[Edge] = []

    for path, html in pages:
        page_url = file_path_to_url(path)
        try:
            node, page_edges = extract_page(html, page_url, base_url, friends, exclude_selectors)
        except (GraphGardenError, etree.LxmlError, ValueError) as exc:
            raise PageExtractionError(path, exc) from exc
        nodes.append(node)
        edges.extend(page_edges)

    logger.info("Built graph for %s: %d nodes, %d edges", base_url, len(nodes), len(edges))

    return PublicFile(
        version=PROTOCOL_VERSION,
        generated_at=utc_timestamp(),
        base_url=base_url,
        site=site,
        friends=list(friends),
        nodes=nodes,
        edges=edges,
    )


def build_site(config: Config) -> PublicFile:
    """Walk the configured output directory and build its graph."""
    pages = iter_pages(
        Path(config.output.dir),
        include=config.parse.include,
        exclude=config.parse.exclude or (),
    )
    return build_graph(
        pages,
        base_url=config.site.base_url,
        site=config.site.metadata(),
        friends=config.friends,
        exclude_selectors=config.parse.exclude_selectors or (),
    )


def write_public_file(document: PublicFile, output_dir: Path) -> Path:
    """Write *document* to ``<output_dir>/.well-known/graphgarden.json`` and return the path."""
    destination = Path(output_dir) / PUBLIC_FILE_PATH
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(document.to_json(), encoding="utf-8")
    logger.info("Wrote %s", destination)
    return destination


def read_public_file(output_dir: Path) -> PublicFile:
    """Load the public file previously written under *output_dir*.

    Raises:
        FileNotFoundError: if the site has not been built yet.
        DocumentDecodeError: if the file on disk is malformed.
    """
    path = Path(output_dir) / PUBLIC_FILE_PATH
    return PublicFile.from_json(path.read_text(encoding="utf-8"), source=str(path))
