"""Canonical page URLs: file-path conversion, href path normalisation, relative resolution.

A page's own URL (derived from its file path) and any href pointing at that
page must normalise to the same string, otherwise edges never meet nodes:

* ``about/index.html``   -> ``/about/``
* ``posts/hello.html``   -> ``/posts/hello``
* ``index.html``         -> ``/``
"""

from typing import List

_INDEX_SUFFIX = "/index.html"
_HTML_SUFFIX = ".html"


def normalize_path(path: str) -> str:
    """Apply the ``/index.html`` -> ``/`` and ``.html`` -> ``""`` rules to *path*.

    Idempotent: an already-normalised path is returned unchanged.
    """
    if path.endswith(_INDEX_SUFFIX):
        return path[: -len("index.html")] or "/"
    if path.endswith(_HTML_SUFFIX):
        return path[: -len(_HTML_SUFFIX)]
    return path


def file_path_to_url(path: str) -> str:
    """Convert a path relative to the output directory into the page's canonical URL."""
    return normalize_path("/" + path)


def strip_query_and_fragment(href: str) -> str:
    """Cut *href* at the first ``?`` or ``#``."""
    for i, char in enumerate(href):
        if char in "?#":
            return href[:i]
    return href


def resolve_relative(page_url: str, href: str) -> str:
    """Resolve *href* against the directory of *page_url*.

    ``..`` never climbs above the root; an empty result resolves to ``/``.
    """
    slash = page_url.rfind("/")
    directory = page_url[: slash + 1] if slash >= 0 else "/"

    segments: List[str] = [s for s in directory.split("/") if s]
    for part in href.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if segments:
                segments.pop()
            continue
        segments.append(part)

    return "/" + "/".join(segments)
