"""Relationship domain models: relationship types, links and edges."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, field_validator


class RelationshipType(str, Enum):
    """Fixed set of semantic labels for links and edges."""

    RELATED_TO = "related-to"
    DEPENDS_ON = "depends-on"
    PART_OF = "part-of"
    SUPPORTS = "supports"
    CONTRADICTS = "contradicts"
    REFERENCES = "references"

    @property
    def info(self) -> "RelationshipTypeInfo":
        return RELATIONSHIP_TYPES[self]

    @property
    def label(self) -> str:
        return self.info.label


class RelationshipTypeInfo(BaseModel):
    """Display metadata for a relationship type."""

    id: RelationshipType
    label: str
    color: str
    description: str


RELATIONSHIP_TYPES: dict[RelationshipType, RelationshipTypeInfo] = {
    RelationshipType.RELATED_TO: RelationshipTypeInfo(
        id=RelationshipType.RELATED_TO,
        label="Related to",
        color="#6366f1",
        description="General connection between two ideas",
    ),
    RelationshipType.DEPENDS_ON: RelationshipTypeInfo(
        id=RelationshipType.DEPENDS_ON,
        label="Depends on",
        color="#f59e0b",
        description="The source needs the target to make sense",
    ),
    RelationshipType.PART_OF: RelationshipTypeInfo(
        id=RelationshipType.PART_OF,
        label="Part of",
        color="#10b981",
        description="The source is a component of the target",
    ),
    RelationshipType.SUPPORTS: RelationshipTypeInfo(
        id=RelationshipType.SUPPORTS,
        label="Supports",
        color="#22c55e",
        description="The source provides evidence for the target",
    ),
    RelationshipType.CONTRADICTS: RelationshipTypeInfo(
        id=RelationshipType.CONTRADICTS,
        label="Contradicts",
        color="#ef4444",
        description="The source disagrees with the target",
    ),
    RelationshipType.REFERENCES: RelationshipTypeInfo(
        id=RelationshipType.REFERENCES,
        label="References",
        color="#94a3b8",
        description="The source mentions the target",
    ),
}

DEFAULT_RELATIONSHIP_TYPE = RelationshipType.REFERENCES


def normalize_relationship_type(
    value: Any, default: RelationshipType = DEFAULT_RELATIONSHIP_TYPE
) -> RelationshipType:
    """Map an arbitrary external value onto the fixed relationship enum.

    Accepts enum members, canonical ids ("depends-on") and loose spellings
    such as "DEPENDS_ON" or "Depends on". Anything else maps to ``default``.

    Args:
        value: Value coming from storage, the API or a language model
        default: Type to use when the value is missing or unknown

    Returns:
        A member of RelationshipType
    """
    if isinstance(value, RelationshipType):
        return value
    if not isinstance(value, str):
        return default

    key = "-".join(value.strip().lower().replace("_", " ").replace("-", " ").split())
    try:
        return RelationshipType(key)
    except ValueError:
        return default


class Link(BaseModel):
    """One explicit in-text reference from a source note to a target title.

    ``target_note_id`` is None while the title does not resolve to a note.
    ``text_offset`` is a position hint in the plain-text projection of the
    source content and may drift as the content is edited.
    """

    id: str
    source_note_id: str
    target_note_id: str | None = None
    target_title: str
    text_offset: int = 0
    relationship_type: RelationshipType = DEFAULT_RELATIONSHIP_TYPE
    created: float = 0.0

    @field_validator("target_title")
    @classmethod
    def _non_empty_title(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("target_title must not be empty")
        return value

    @field_validator("relationship_type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> RelationshipType:
        return normalize_relationship_type(value)

    @property
    def exists(self) -> bool:
        return self.target_note_id is not None


EdgeOrigin = Literal["manual", "link", "ai"]


class Edge(BaseModel):
    """A typed, directed visual connection between two notes on the canvas."""

    id: str
    source: str
    target: str
    relationship_type: RelationshipType = DEFAULT_RELATIONSHIP_TYPE
    label: str = ""
    origin: EdgeOrigin = "manual"
    created: float = 0.0

    @field_validator("relationship_type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> RelationshipType:
        return normalize_relationship_type(value)

    def connects(self, a: str, b: str) -> bool:
        """Whether this edge joins the unordered pair {a, b}."""
        return {self.source, self.target} == {a, b}
