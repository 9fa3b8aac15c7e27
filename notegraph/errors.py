"""Exceptions raised by the note graph engine."""


class NoteGraphError(Exception):
    """Base class for all notegraph errors."""


class NoteNotFoundError(NoteGraphError):
    """Raised when an operation refers to a note that does not exist."""

    def __init__(self, note_id: str) -> None:
        super().__init__(f"Note {note_id} not found")
        self.note_id = note_id


class EdgeNotFoundError(NoteGraphError):
    """Raised when an operation refers to an edge that does not exist."""

    def __init__(self, edge_id: str) -> None:
        super().__init__(f"Edge {edge_id} not found")
        self.edge_id = edge_id


class MentionNotFoundError(NoteGraphError):
    """Raised when a mention to confirm is no longer present in the source note."""


class StoreError(NoteGraphError):
    """Raised when a persistence operation fails.

    A transaction that raises this has already been rolled back.
    """


class TransportError(NoteGraphError):
    """Raised when the language-model service cannot be reached or fails."""


class MalformedAIResponse(NoteGraphError):
    """Raised by a decoder stage when the model output cannot be parsed."""


class ValidationRejected(NoteGraphError):
    """Raised when a single suggested item fails validation."""


class SessionBusyError(NoteGraphError):
    """Raised when a suggestion request is started while another is in flight."""
