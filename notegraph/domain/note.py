"""Note domain models."""

from pydantic import BaseModel


class Note(BaseModel):
    """Represents a single user-authored note.

    Attributes:
        id: Unique identifier
        title: Note title, also the text other notes use to reference it
        content: Rich-text content (HTML from the editor or plain text)
        tags: List of tag names
        created: Creation timestamp (seconds since epoch)
        modified: Last modification timestamp (seconds since epoch)
        x: Canvas x position
        y: Canvas y position
    """

    id: str
    title: str
    content: str = ""
    tags: list[str] = []
    created: float = 0.0
    modified: float = 0.0
    x: float | None = None
    y: float | None = None
