from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from graphgarden.errors import DocumentDecodeError

# Version of the published document format, independent of the package version.
PROTOCOL_VERSION = "0.1.0"

EdgeType = Literal["internal", "friend"]


class Node(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    title: str


class Edge(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str
    target: str
    type: EdgeType


class SiteMetadata(BaseModel):
    """Site metadata copied through from configuration."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: Optional[str] = None
    language: Optional[str] = None


class _Document(BaseModel):
    model_config = ConfigDict(frozen=True)

    def to_json(self) -> str:
        # Absent optional metadata is omitted rather than written as null.
        return self.model_dump_json(indent=2, exclude_none=True)

    @classmethod
    def from_json(cls, text: str, source: str = "<string>"):
        """Decode *text*, raising :class:`DocumentDecodeError` naming *source* on failure."""
        try:
            return cls.model_validate_json(text)
        except ValidationError as exc:
            raise DocumentDecodeError(source, str(exc)) from exc


class PublicFile(_Document):
    """The document published as ``.well-known/graphgarden.json``."""

    version: str
    generated_at: str
    base_url: str
    site: SiteMetadata
    friends: List[str] = Field(default_factory=list)
    nodes: List[Node]
    edges: List[Edge]


class SiteGraph(BaseModel):
    """One site's graph inside a :class:`CompiledFile`."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    site: SiteMetadata
    nodes: List[Node]
    edges: List[Edge]

    @classmethod
    def from_public_file(cls, document: PublicFile) -> "SiteGraph":
        return cls(
            base_url=document.base_url,
            site=document.site,
            nodes=document.nodes,
            edges=document.edges,
        )


class CompiledFile(_Document):
    """Own graph plus the latest known graph of every friend.

    Served as ``.well-known/graphgarden.compiled.json``; the own graph is
    stored under the ``self`` key.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: str
    compiled_at: str
    self_graph: SiteGraph = Field(alias="self")
    friends: List[SiteGraph] = Field(default_factory=list)

    def to_json(self) -> str:
        return self.model_dump_json(indent=2, exclude_none=True, by_alias=True)
