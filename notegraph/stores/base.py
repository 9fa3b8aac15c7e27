from contextlib import AbstractContextManager
from typing import List, Protocol

from notegraph.domain.note import Note
from notegraph.domain.relationships import Edge, Link


class GraphStore(Protocol):
    def transaction(self) -> AbstractContextManager[None]:
        """Group writes so they apply atomically.

        Raises StoreError (after rolling back) if anything inside fails.
        """
        ...

    def get_note(self, note_id: str) -> Note | None:
        """Get a note by its ID."""
        ...

    def get_all_notes(self) -> List[Note]:
        """Get every note in the store."""
        ...

    def find_note_by_title(self, title: str) -> Note | None:
        """Find a note whose title matches case-insensitively."""
        ...

    def upsert_note(self, note: Note) -> None:
        """Add a new note or update an existing one."""
        ...

    def delete_note(self, note_id: str) -> None:
        """Delete a note. Links and edges are left to the caller."""
        ...

    def get_links_from(self, source_note_id: str) -> List[Link]:
        """Get all links whose source is the given note."""
        ...

    def get_links_to(self, target_note_id: str) -> List[Link]:
        """Get all resolved links pointing at the given note."""
        ...

    def get_links_by_target_title(self, title: str) -> List[Link]:
        """Get all links whose target title matches case-insensitively."""
        ...

    def add_link(self, link: Link) -> None:
        """Insert a link."""
        ...

    def update_link(self, link: Link) -> None:
        """Replace a stored link with the same ID."""
        ...

    def delete_links(self, link_ids: list[str]) -> None:
        """Delete links by ID."""
        ...

    def get_edge(self, edge_id: str) -> Edge | None:
        """Get an edge by its ID."""
        ...

    def get_edges(self) -> List[Edge]:
        """Get every edge in the store."""
        ...

    def find_edge_between(self, a: str, b: str) -> Edge | None:
        """Find an edge joining two notes in either direction."""
        ...

    def add_edge(self, edge: Edge) -> None:
        """Insert an edge."""
        ...

    def update_edge(self, edge: Edge) -> None:
        """Replace a stored edge with the same ID."""
        ...

    def delete_edges(self, edge_ids: list[str]) -> None:
        """Delete edges by ID."""
        ...

    def save(self, filepath: str | None = None) -> None:
        """Save the store to disk."""
        ...
