import logging
from pathlib import Path
from typing import Dict

from pydantic import BaseModel, Field, ValidationError

from graphgarden.errors import DocumentDecodeError

logger = logging.getLogger(__name__)


class FetchCache(BaseModel):
    """Last-seen ``generated_at`` per friend document URL.

    Persisted as ``{"entries": {"<url>": "<generated_at>"}}``.
    """

    entries: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def load(cls, path: Path) -> "FetchCache":
        """Load the cache from *path*, or return an empty cache when the file is absent."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No fetch cache at %s, starting empty", path)
            return cls()
        try:
            return cls.model_validate_json(text)
        except ValidationError as exc:
            raise DocumentDecodeError(str(path), str(exc)) from exc

    def save(self, path: Path) -> None:
        Path(path).write_text(self.model_dump_json(indent=2), encoding="utf-8")
