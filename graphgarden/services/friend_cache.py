"""Staleness check for friend documents, keyed on their ``generated_at`` fingerprint.

The remote's self-reported timestamp is trusted as-is: a remote that changes
content without bumping ``generated_at`` (or moves it backwards) is not
detected here.
"""

import logging
from typing import Literal, NamedTuple, Optional

from graphgarden.models.cache import FetchCache
from graphgarden.models.graph import PublicFile

logger = logging.getLogger(__name__)


class FetchOutcome(NamedTuple):
    status: Literal["fresh", "cached"]
    document: Optional[PublicFile] = None

    @property
    def is_fresh(self) -> bool:
        return self.status == "fresh"


CACHED = FetchOutcome("cached")


def check(remote_text: str, remote_url: str, cache: FetchCache) -> FetchOutcome:
    """Decode *remote_text* and compare its fingerprint with the cached one for *remote_url*.

    On a cache miss, or when the fingerprint differs, the new ``generated_at``
    is stored under *remote_url* and the decoded document is returned.

    Raises:
        DocumentDecodeError: if *remote_text* is not a valid document.  The
            cache is left untouched.
    """
    document = PublicFile.from_json(remote_text, source=remote_url)

    if cache.entries.get(remote_url) == document.generated_at:
        logger.debug("Cache hit for %s (%s)", remote_url, document.generated_at)
        return CACHED

    cache.entries[remote_url] = document.generated_at
    return FetchOutcome("fresh", document)
