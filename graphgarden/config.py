"""Site configuration (``graphgarden.toml``) and runtime settings."""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from graphgarden.errors import ConfigError, ConfigNotFoundError
from graphgarden.models.graph import SiteMetadata

DEFAULT_CONFIG_PATH = Path("graphgarden.toml")
DEFAULT_CACHE_PATH = Path(".graphgarden-cache.json")


def _require_http_url(value: str) -> str:
    cleaned = value.strip()
    if not cleaned.startswith(("http://", "https://")):
        raise ValueError(f"'{value}' must be an absolute http(s) URL")
    return cleaned


class SiteConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str
    title: str
    description: Optional[str] = None
    language: Optional[str] = None

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        return _require_http_url(value)

    def metadata(self) -> SiteMetadata:
        return SiteMetadata(title=self.title, description=self.description, language=self.language)


class OutputConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    dir: str = "./dist"


class ParseConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    include: List[str] = Field(default_factory=lambda: ["**/*.html"])
    exclude: Optional[List[str]] = None
    exclude_selectors: Optional[List[str]] = Field(
        default=None,
        description="CSS selectors whose links are ignored, e.g. navigation and footers.",
    )


class Config(BaseModel):
    """Complete ``graphgarden.toml`` configuration."""

    model_config = ConfigDict(frozen=True)

    site: SiteConfig
    friends: List[str] = Field(default_factory=list)
    output: OutputConfig = Field(default_factory=OutputConfig)
    parse: ParseConfig = Field(default_factory=ParseConfig)

    @field_validator("friends")
    @classmethod
    def _check_friends(cls, value: List[str]) -> List[str]:
        return [_require_http_url(friend) for friend in value]

    @classmethod
    def from_toml(cls, text: str, source: str = "<string>") -> Config:
        try:
            return cls.model_validate(tomllib.loads(text))
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(source, f"invalid TOML: {exc}") from exc
        except ValidationError as exc:
            raise ConfigError(source, str(exc)) from exc


def load_config(path: Path) -> Config:
    """Load and validate the configuration file at *path*."""
    path = Path(path)
    if not path.exists():
        raise ConfigNotFoundError(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(path, str(exc)) from exc
    return Config.from_toml(text, source=str(path))


class Settings(BaseModel):
    """Runtime settings loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    config_path: Path = Field(default=DEFAULT_CONFIG_PATH, description="Path to graphgarden.toml")
    cache_path: Path = Field(default=DEFAULT_CACHE_PATH, description="Path to the friend fetch cache")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache runtime settings."""
    return Settings(
        config_path=os.getenv("GRAPHGARDEN_CONFIG", str(DEFAULT_CONFIG_PATH)),
        cache_path=os.getenv("GRAPHGARDEN_CACHE", str(DEFAULT_CACHE_PATH)),
    )
