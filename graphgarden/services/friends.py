"""Friend synchronisation: fetch each friend's graph, skip unchanged ones, compile.

Friends are processed one after another; a failure for one friend is
recorded in its result and does not stop the others.
"""

import logging
from pathlib import Path
from typing import Dict, List, Literal, NamedTuple, Optional, Sequence

from graphgarden.errors import GraphGardenError
from graphgarden.models.cache import FetchCache
from graphgarden.models.graph import PROTOCOL_VERSION, CompiledFile, PublicFile, SiteGraph
from graphgarden.services.builder import utc_timestamp
from graphgarden.services.fetcher import fetch_document, friend_document_url
from graphgarden.services.friend_cache import check

logger = logging.getLogger(__name__)

COMPILED_FILE_PATH = Path(".well-known") / "graphgarden.compiled.json"

SyncStatus = Literal["fresh", "cached", "error"]


class FriendSyncResult(NamedTuple):
    friend: str
    url: str
    status: SyncStatus
    detail: str = ""


class SyncReport(NamedTuple):
    results: List[FriendSyncResult]
    graphs: List[SiteGraph]


def _key(base_url: str) -> str:
    return base_url.rstrip("/")


def _previous_graphs(previous: Optional[CompiledFile]) -> Dict[str, SiteGraph]:
    if previous is None:
        return {}
    return {_key(graph.base_url): graph for graph in previous.friends}


async def sync_friends(
    friends: Sequence[str],
    cache: FetchCache,
    previous: Optional[CompiledFile] = None,
) -> SyncReport:
    """Fetch every friend's document and update *cache* in place.

    Unchanged friends keep the graph recorded in *previous*; when no such
    graph exists the cached fingerprint is discarded and the fetched document
    is used instead.
    """
    known = _previous_graphs(previous)
    results: List[FriendSyncResult] = []
    graphs: List[SiteGraph] = []

    for friend in friends:
        url = friend_document_url(friend)
        try:
            text = await fetch_document(url)
            outcome = check(text, url, cache)
            if not outcome.is_fresh and _key(friend) not in known:
                logger.info("No compiled graph kept for %s, refreshing from %s", friend, url)
                cache.entries.pop(url, None)
                outcome = check(text, url, cache)
        except GraphGardenError as exc:
            logger.warning("Friend sync failed for %s: %s", friend, exc)
            results.append(FriendSyncResult(friend, url, "error", str(exc)))
            continue

        if outcome.is_fresh:
            graphs.append(SiteGraph.from_public_file(outcome.document))
            results.append(FriendSyncResult(friend, url, "fresh", outcome.document.generated_at))
        else:
            graphs.append(known[_key(friend)])
            results.append(FriendSyncResult(friend, url, "cached", cache.entries[url]))

    failed = sum(1 for r in results if r.status == "error")
    logger.info("Synced %d friends, %d failed", len(results), failed)
    return SyncReport(results=results, graphs=graphs)


def compile_graph(own: PublicFile, friend_graphs: Sequence[SiteGraph]) -> CompiledFile:
    return CompiledFile(
        version=PROTOCOL_VERSION,
        compiled_at=utc_timestamp(),
        self_graph=SiteGraph.from_public_file(own),
        friends=list(friend_graphs),
    )


def load_compiled(output_dir: Path) -> Optional[CompiledFile]:
    """Return the previously written compiled file, or None if there is none."""
    path = Path(output_dir) / COMPILED_FILE_PATH
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    return CompiledFile.from_json(text, source=str(path))


def write_compiled(compiled: CompiledFile, output_dir: Path) -> Path:
    destination = Path(output_dir) / COMPILED_FILE_PATH
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(compiled.to_json(), encoding="utf-8")
    logger.info("Wrote %s", destination)
    return destination
