from typing import Any, List, Literal

from pydantic import BaseModel, Field, field_validator

from notegraph.domain.note import Note
from notegraph.domain.relationships import RelationshipType, normalize_relationship_type

NO_SUGGESTIONS_MESSAGE = "No suggestions"


class RankedCandidate(BaseModel):
    """A note shortlisted for the language model, with its priority score."""

    note: Note
    score: float
    shared_tags: List[str] = []


class LinkSuggestion(BaseModel):
    """A validated connection proposed by the language model"""

    source_note_id: str = Field(..., description="Note the connection starts from")
    target_note_id: str = Field(..., description="Note the connection points at")
    target_title: str = Field("", description="Title of the target note")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Model confidence in [0, 1]")
    reason: str = Field("", description="Short explanation from the model, may be empty")
    relationship_type: RelationshipType = RelationshipType.RELATED_TO
    shared_tags: List[str] = []

    @field_validator("relationship_type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> RelationshipType:
        return normalize_relationship_type(value)


class SuggestionBatch(BaseModel):
    """Result of one request to the language model"""

    mode: Literal["note", "canvas"]
    suggestions: List[LinkSuggestion] = []
    candidates_sent: int = 0
    raw_items: int = Field(0, description="Items decoded before validation")
    message: str = ""


class AutoLinkReport(BaseModel):
    """Aggregate outcome of committing suggestions as edges"""

    created: int = 0
    skipped: int = 0
    failed: int = 0
    message: str = ""
