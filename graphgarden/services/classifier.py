"""Href classification into internal, friend, or dropped links.

The checks in :func:`classify_href` run in a fixed priority order and the
first match wins:

1. empty, fragment-only, query-only and non-navigational schemes are dropped;
2. protocol-relative hrefs (``//host/...``) are treated as ``https:``;
3. absolute ``http(s)`` URLs are internal when under the site's base URL,
   friend when under a friend's base URL, dropped otherwise;
4. site-absolute paths (``/...``) are internal;
5. everything else is a relative path resolved against the current page.

Malformed hrefs never raise; anything unrecognised falls through to step 5.
"""

from typing import Iterable, Literal, NamedTuple, Optional

from graphgarden.services.normalizer import (
    normalize_path,
    resolve_relative,
    strip_query_and_fragment,
)

LinkKind = Literal["internal", "friend", "dropped"]

_DROPPED_PREFIXES = ("#", "?", "mailto:", "tel:", "javascript:", "data:")
_ABSOLUTE_PREFIXES = ("http://", "https://")


class Classification(NamedTuple):
    kind: LinkKind
    target: Optional[str] = None

    @property
    def kept(self) -> bool:
        return self.kind != "dropped"


DROPPED = Classification("dropped")


def internal(target: str) -> Classification:
    return Classification("internal", target)


def friend(target: str) -> Classification:
    return Classification("friend", target)


def _is_under(url: str, base: str) -> bool:
    """True when *url* is *base* itself or a path below it (*base* has no trailing slash)."""
    return url == base or url.startswith(base + "/")


def _classify_absolute(url: str, base_url: str, friends: Iterable[str]) -> Classification:
    clean = strip_query_and_fragment(url)

    site_base = base_url.rstrip("/")
    if clean == site_base:
        return internal("/")
    if clean.startswith(site_base + "/"):
        return internal(normalize_path(clean[len(site_base):]))

    for friend_url in friends:
        if _is_under(clean, friend_url.rstrip("/")):
            # Friend targets keep their absolute, un-normalised form.
            return friend(clean)

    return DROPPED


def classify_href(
    href: str,
    page_url: str,
    base_url: str,
    friends: Iterable[str],
) -> Classification:
    """Classify one *href* found on the page at *page_url*.

    Args:
        href:      Raw ``href`` attribute value.
        page_url:  Canonical URL of the page containing the link.
        base_url:  The site's own base URL, e.g. ``https://alice.dev/``.
        friends:   Base URLs of allow-listed peer sites.

    Returns:
        A :class:`Classification`; ``target`` is ``None`` only for dropped links.
    """
    href = href.strip()

    if not href or href.startswith(_DROPPED_PREFIXES):
        return DROPPED

    if href.startswith("//"):
        return _classify_absolute("https:" + href, base_url, friends)

    if href.startswith(_ABSOLUTE_PREFIXES):
        return _classify_absolute(href, base_url, friends)

    clean = strip_query_and_fragment(href)
    if href.startswith("/"):
        return internal(normalize_path(clean))

    return internal(normalize_path(resolve_relative(page_url, clean)))
