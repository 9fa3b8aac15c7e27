import json
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List

from notegraph.domain.note import Note
from notegraph.domain.relationships import Edge, Link
from notegraph.errors import NoteGraphError, StoreError
from notegraph.stores.base import GraphStore

logger = logging.getLogger(__name__)


class LocalGraphStore(GraphStore):
    """Local graph store that keeps notes, links and edges in a JSON file.

    All reads and writes take a re-entrant lock. Writes run inside
    ``transaction()``, which snapshots the tables and restores them if
    anything fails, so a reader never observes a half-applied change.
    """

    def __init__(self, filepath: str | Path | None = None) -> None:
        """Initialize LocalGraphStore.

        Args:
            filepath: Path to the store file. If provided and exists, will auto-load.
                     If provided and doesn't exist, it is created on the first commit.
                     If not provided, the store lives in memory only.
        """
        self._filepath = str(filepath) if filepath else None
        self._lock = threading.RLock()
        self._depth = 0

        self._notes: Dict[str, Note] = {}
        self._links: Dict[str, Link] = {}
        self._edges: Dict[str, Edge] = {}

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._notes = {note_id: Note(**note) for note_id, note in data["notes"].items()}
            self._links = {link_id: Link(**link) for link_id, link in data["links"].items()}
            self._edges = {edge_id: Edge(**edge) for edge_id, edge in data["edges"].items()}
            logger.info(
                f"Loaded {len(self._notes)} notes, {len(self._links)} links and "
                f"{len(self._edges)} edges from {self._filepath}"
            )

    @classmethod
    def from_data(
        cls,
        notes: Dict[str, Note] | None = None,
        links: Dict[str, Link] | None = None,
        edges: Dict[str, Edge] | None = None,
    ) -> "LocalGraphStore":
        """Create an in-memory LocalGraphStore from provided data (useful for testing)."""
        instance = cls(filepath=None)
        instance._notes = dict(notes or {})
        instance._links = dict(links or {})
        instance._edges = dict(edges or {})
        return instance

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Apply the enclosed writes atomically.

        Nested transactions join the outermost one. When the outermost
        transaction finishes, the store is written to disk if it has a path.
        """
        with self._lock:
            if self._depth > 0:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return

            snapshot = (dict(self._notes), dict(self._links), dict(self._edges))
            self._depth = 1
            try:
                yield
                if self._filepath:
                    self._write(self._filepath)
            except Exception as e:
                self._notes, self._links, self._edges = snapshot
                logger.error(f"Transaction rolled back: {e}")
                if isinstance(e, NoteGraphError):
                    raise
                raise StoreError(f"Store transaction failed: {e}") from e
            finally:
                self._depth = 0

    def get_note(self, note_id: str) -> Note | None:
        """Get a note by its ID."""
        with self._lock:
            return self._notes.get(note_id)

    def get_all_notes(self) -> List[Note]:
        """Get every note in the store."""
        with self._lock:
            return list(self._notes.values())

    def find_note_by_title(self, title: str) -> Note | None:
        """Find a note whose title matches case-insensitively."""
        wanted = title.strip().casefold()
        if not wanted:
            return None
        with self._lock:
            for note in self._notes.values():
                if note.title.strip().casefold() == wanted:
                    return note
        return None

    def upsert_note(self, note: Note) -> None:
        """Add a new note or update an existing one."""
        with self.transaction():
            self._notes[note.id] = note.model_copy(deep=True)

    def delete_note(self, note_id: str) -> None:
        """Delete a note. Links and edges are left to the caller."""
        with self.transaction():
            self._notes.pop(note_id, None)

    def get_links_from(self, source_note_id: str) -> List[Link]:
        """Get all links whose source is the given note."""
        with self._lock:
            return [link for link in self._links.values() if link.source_note_id == source_note_id]

    def get_links_to(self, target_note_id: str) -> List[Link]:
        """Get all resolved links pointing at the given note."""
        with self._lock:
            return [link for link in self._links.values() if link.target_note_id == target_note_id]

    def get_links_by_target_title(self, title: str) -> List[Link]:
        """Get all links whose target title matches case-insensitively."""
        wanted = title.strip().casefold()
        with self._lock:
            return [
                link
                for link in self._links.values()
                if link.target_title.strip().casefold() == wanted
            ]

    def add_link(self, link: Link) -> None:
        """Insert a link."""
        with self.transaction():
            if link.id in self._links:
                raise StoreError(f"Link {link.id} already exists")
            self._links[link.id] = link.model_copy(deep=True)

    def update_link(self, link: Link) -> None:
        """Replace a stored link with the same ID."""
        with self.transaction():
            if link.id not in self._links:
                raise StoreError(f"Link {link.id} not found")
            self._links[link.id] = link.model_copy(deep=True)

    def delete_links(self, link_ids: list[str]) -> None:
        """Delete links by ID."""
        with self.transaction():
            for link_id in link_ids:
                self._links.pop(link_id, None)

    def get_edge(self, edge_id: str) -> Edge | None:
        """Get an edge by its ID."""
        with self._lock:
            return self._edges.get(edge_id)

    def get_edges(self) -> List[Edge]:
        """Get every edge in the store."""
        with self._lock:
            return list(self._edges.values())

    def find_edge_between(self, a: str, b: str) -> Edge | None:
        """Find an edge joining two notes in either direction."""
        with self._lock:
            for edge in self._edges.values():
                if edge.connects(a, b):
                    return edge
        return None

    def add_edge(self, edge: Edge) -> None:
        """Insert an edge."""
        with self.transaction():
            if edge.id in self._edges:
                raise StoreError(f"Edge {edge.id} already exists")
            self._edges[edge.id] = edge.model_copy(deep=True)

    def update_edge(self, edge: Edge) -> None:
        """Replace a stored edge with the same ID."""
        with self.transaction():
            if edge.id not in self._edges:
                raise StoreError(f"Edge {edge.id} not found")
            self._edges[edge.id] = edge.model_copy(deep=True)

    def delete_edges(self, edge_ids: list[str]) -> None:
        """Delete edges by ID."""
        with self.transaction():
            for edge_id in edge_ids:
                self._edges.pop(edge_id, None)

    def save(self, filepath: str | None = None) -> None:
        """Save the store to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )
        with self._lock:
            self._write(str(save_path))

    def _write(self, save_path: str) -> None:
        data = {
            "notes": {note_id: note.model_dump(mode="json") for note_id, note in self._notes.items()},
            "links": {link_id: link.model_dump(mode="json") for link_id, link in self._links.items()},
            "edges": {edge_id: edge.model_dump(mode="json") for edge_id, edge in self._edges.items()},
        }
        tmp_path = f"{save_path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, save_path)
