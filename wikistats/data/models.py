"""Dataclasses describing the records extracted from a Wikipedia dump."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..redirects.errors import MalformedEdgeError


class RecordType(str, Enum):
    """Page type assigned by the JSON dump parser."""

    ARTICLE = "ARTICLE"
    REDIRECT = "REDIRECT"
    DISAMBIGUATION = "DISAMBIGUATION"
    CATEGORY = "CATEGORY"
    TEMPLATE = "TEMPLATE"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Optional[str]) -> "RecordType":
        if not value:
            return cls.UNKNOWN
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNKNOWN


class ChainTermination(str, Enum):
    """How a redirect chain walk stopped."""

    CANONICAL = "canonical"
    CYCLE = "cycle"
    DEPTH_LIMIT = "depth_limit"


@dataclass(frozen=True, slots=True)
class RedirectEdge:
    """One observed "source redirects to target" fact."""

    source: Optional[str]
    target: Optional[str]

    def validate(self) -> None:
        if not self.source or not str(self.source).strip():
            raise MalformedEdgeError(f"Redirect edge has an empty source: {self!r}")
        if not self.target or not str(self.target).strip():
            raise MalformedEdgeError(f"Redirect edge has an empty target: {self!r}")

    @property
    def is_valid(self) -> bool:
        try:
            self.validate()
        except MalformedEdgeError:
            return False
        return True


@dataclass(frozen=True, slots=True)
class ResolvedEdge:
    """A redirect source paired with the title at the end of its chain."""

    source: str
    canonical: str
    hops: int = 0
    termination: ChainTermination = ChainTermination.CANONICAL


@dataclass(slots=True)
class LinkSpan:
    """An internal link inside article text."""

    description: str
    start: int
    end: int
    uri: str


@dataclass(slots=True)
class SurfaceFormOccurrence:
    """A surface form spotted at a character offset of an article."""

    surface_form: str
    offset: int
    uri: str
    provenance: str = "annotation"
    spot_type: str = "real"


@dataclass(slots=True)
class ArticleText:
    """Plain text of an article with the link annotations found in it."""

    wid: int
    text: str
    occurrences: List[SurfaceFormOccurrence] = field(default_factory=list)


@dataclass(slots=True)
class SurfaceFormUri:
    """A link anchor text and the article it points to."""

    wid: int
    surface_form: str
    uri: str


@dataclass(slots=True)
class TokenType:
    """A token observed in a surface form."""

    id: int
    token: str
    count: int = 0
