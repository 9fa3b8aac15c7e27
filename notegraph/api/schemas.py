from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from notegraph.suggestions.schemas import LinkSuggestion


class NoteInput(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = ""
    tags: List[str] = []
    x: Optional[float] = None
    y: Optional[float] = None


class RenameInput(BaseModel):
    title: str = Field(..., min_length=1)


class LinkMentionInput(BaseModel):
    source_note_id: str
    position: int = 0


class AnalyzeInput(BaseModel):
    trigger: Literal["auto", "manual"] = "manual"


class AcceptSuggestionsInput(BaseModel):
    suggestions: List[LinkSuggestion]


class EdgeInput(BaseModel):
    source: str
    target: str
    relationship_type: Optional[str] = None
    label: str = ""


class EdgeUpdate(BaseModel):
    relationship_type: str
    label: Optional[str] = None
