"""Title resolution for converting reference tokens to note IDs."""

import logging

from notegraph.stores.base import GraphStore

logger = logging.getLogger(__name__)


class TitleResolver:
    """Handles resolution of reference tokens to existing note IDs."""

    def __init__(self, store: GraphStore):
        """Initialize resolver with a store.

        Args:
            store: Graph store holding the notes that references can point at
        """
        self.store = store

    def resolve(self, title: str, note_id: str | None = None) -> str | None:
        """Resolve a single reference to a note ID.

        The note ID carried by an editor token wins if that note still exists;
        otherwise the title is matched case-insensitively.

        Args:
            title: Title written in the reference
            note_id: Note ID carried by the token, if any

        Returns:
            Resolved note ID or None if the reference is unresolved
        """
        if note_id and self.store.get_note(note_id) is not None:
            return note_id

        note = self.store.find_note_by_title(title)
        if note is not None:
            return note.id

        logger.warning(f"Could not resolve reference: {title}")
        return None
