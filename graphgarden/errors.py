"""Exception hierarchy for graph building and friend synchronisation.

Every error carries the offending path, selector or URL in its message so a
failure can be diagnosed from the message alone.
"""

from pathlib import Path
from typing import Union


class GraphGardenError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(GraphGardenError):
    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = str(path)
        super().__init__(f"invalid config {self.path}: {reason}")


class ConfigNotFoundError(ConfigError):
    def __init__(self, path: Union[str, Path]) -> None:
        GraphGardenError.__init__(self, f"config file not found: {path}")
        self.path = str(path)


class InvalidSelectorError(GraphGardenError, ValueError):
    def __init__(self, selector: str, reason: str) -> None:
        self.selector = selector
        super().__init__(f"invalid CSS selector '{selector}': {reason}")


class PageReadError(GraphGardenError):
    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = str(path)
        super().__init__(f"failed to read {self.path}: {reason}")


class PageExtractionError(GraphGardenError):
    def __init__(self, path: str, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"failed to extract links from {path}: {cause}")


class DocumentDecodeError(GraphGardenError, ValueError):
    """A JSON document (remote graph, compiled file or cache) failed to decode."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        super().__init__(f"malformed document from {source}: {reason}")


class FriendFetchError(GraphGardenError, ValueError):
    """A friend's graph document could not be fetched."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"cannot fetch {url}: {reason}")
