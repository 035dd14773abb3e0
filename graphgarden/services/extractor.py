"""Single-pass link extraction from one rendered HTML page.

The markup is fed to lxml's pull parser and the resulting start/end element
events are consumed once, front to back.  All mutable scan state lives in one
:class:`_ExtractionState` owned by the :func:`extract_page` call.  Exclusion
selectors are evaluated once per page against the parsed tree.
"""

import logging
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from lxml import etree
from lxml.cssselect import CSSSelector, SelectorError

from graphgarden.errors import InvalidSelectorError
from graphgarden.models.graph import Edge, Node
from graphgarden.services.classifier import classify_href

logger = logging.getLogger(__name__)


class _ExtractionState:
    """Mutable state threaded through one forward scan of a page."""

    def __init__(self) -> None:
        self.title_parts: List[str] = []
        self.title_done = False
        # Nested excluded regions must compose, so this is a counter, not a flag.
        self.excluded_depth = 0
        self.open_exclusions: Dict[etree._Element, int] = {}
        self.seen_targets: Set[str] = set()
        self.edges: List[Edge] = []


def compile_selectors(selectors: Iterable[str]) -> List[CSSSelector]:
    """Compile exclusion *selectors*, failing on the first invalid one."""
    compiled = []
    for selector in selectors:
        try:
            compiled.append(CSSSelector(selector, translator="html"))
        except SelectorError as exc:
            raise InvalidSelectorError(selector, str(exc)) from exc
    return compiled


def _read_events(html: str) -> List[Tuple[str, etree._Element]]:
    """Return ``(event, element)`` pairs for every element opened and closed in *html*."""
    parser = etree.HTMLPullParser(events=("start", "end"))
    events: List[Tuple[str, etree._Element]] = []
    if html:
        parser.feed(html)
        events.extend(parser.read_events())
    try:
        parser.close()
    except etree.LxmlError as exc:
        # Empty or hopelessly broken markup: keep whatever was scanned so far.
        logger.debug("HTML parser gave up at end of document: %s", exc)
    events.extend(parser.read_events())
    return events


def _excluded_elements(
    selectors: Sequence[CSSSelector], events: Sequence[Tuple[str, etree._Element]]
) -> List[Set[etree._Element]]:
    """Run each selector once over the parsed page and return its matches."""
    if not selectors or not events:
        return []
    root = events[0][1].getroottree().getroot()
    return [set(selector(root)) for selector in selectors]


def _on_start(
    element: etree._Element,
    state: _ExtractionState,
    excluded: Sequence[Set[etree._Element]],
    page_url: str,
    base_url: str,
    friends: Sequence[str],
) -> None:
    matched = sum(1 for matches in excluded if element in matches)
    if matched:
        state.excluded_depth += matched
        state.open_exclusions[element] = matched

    if element.tag != "a" or state.excluded_depth:
        return
    href = element.get("href")
    if href is None:
        return

    result = classify_href(href, page_url, base_url, friends)
    if not result.kept or result.target in state.seen_targets:
        return
    state.seen_targets.add(result.target)
    state.edges.append(Edge(source=page_url, target=result.target, type=result.kind))


def _on_end(element: etree._Element, state: _ExtractionState) -> None:
    if element.tag == "title" and not state.title_done:
        state.title_parts.append("".join(element.itertext()))
        state.title_done = True

    state.excluded_depth -= state.open_exclusions.pop(element, 0)


def extract_page(
    html: str,
    page_url: str,
    base_url: str,
    friends: Sequence[str],
    exclude_selectors: Sequence[str] = (),
) -> Tuple[Node, List[Edge]]:
    """Extract the page node and its outgoing edges from *html*.

    Links inside elements matching any of *exclude_selectors* are ignored.
    External links that do not belong to a friend are dropped, and repeated
    links to the same normalised target produce a single edge.

    Raises:
        InvalidSelectorError: if one of *exclude_selectors* cannot be parsed.
    """
    selectors = compile_selectors(exclude_selectors)
    state = _ExtractionState()

    events = _read_events(html)
    excluded = _excluded_elements(selectors, events)

    for event, element in events:
        if not isinstance(element.tag, str):
            continue
        if event == "start":
            _on_start(element, state, excluded, page_url, base_url, friends)
        else:
            _on_end(element, state)

    title = "".join(state.title_parts).strip() or page_url
    logger.debug("Extracted %d edges from %s", len(state.edges), page_url)
    return Node(url=page_url, title=title), state.edges
