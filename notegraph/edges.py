"""Manual canvas gestures: connecting, retyping and deleting edges."""

import logging
import time
from typing import Callable
from uuid import uuid4

from notegraph.domain.relationships import Edge, RelationshipType, normalize_relationship_type
from notegraph.errors import EdgeNotFoundError, NoteNotFoundError
from notegraph.events import ChangeEvent, ChangeNotifier
from notegraph.stores.base import GraphStore

logger = logging.getLogger(__name__)


class EdgeService:
    """Applies the user's canvas gestures to the store.

    Manual connections are not deduplicated: a user may draw a second edge
    between two notes that are already connected.
    """

    def __init__(
        self,
        *,
        store: GraphStore,
        notifier: ChangeNotifier | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.notifier = notifier or ChangeNotifier()
        self.clock = clock

    def connect(
        self,
        source: str,
        target: str,
        relationship_type: str | RelationshipType | None = None,
        label: str = "",
    ) -> Edge:
        with self.store.transaction():
            for note_id in (source, target):
                if self.store.get_note(note_id) is None:
                    raise NoteNotFoundError(note_id)
            edge = Edge(
                id=uuid4().hex,
                source=source,
                target=target,
                relationship_type=normalize_relationship_type(
                    relationship_type, default=RelationshipType.RELATED_TO
                ),
                label=label,
                origin="manual",
                created=self.clock(),
            )
            self.store.add_edge(edge)

        self.notifier.emit(ChangeEvent(name="edges-changed", note_ids=[source, target]))
        return edge

    def set_relationship_type(
        self, edge_id: str, relationship_type: str | RelationshipType, label: str | None = None
    ) -> Edge:
        """Change an edge's type; the label follows the type unless one is given."""
        with self.store.transaction():
            edge = self.store.get_edge(edge_id)
            if edge is None:
                raise EdgeNotFoundError(edge_id)
            new_type = normalize_relationship_type(relationship_type, default=edge.relationship_type)
            updated = edge.model_copy(
                update={
                    "relationship_type": new_type,
                    "label": new_type.label if label is None else label,
                }
            )
            self.store.update_edge(updated)

        self.notifier.emit(ChangeEvent(name="edges-changed", note_ids=[edge.source, edge.target]))
        return updated

    def delete(self, edge_ids: list[str]) -> int:
        """Delete edges by ID. Unknown IDs are ignored.

        Returns:
            Number of edges deleted
        """
        with self.store.transaction():
            edges = [edge for edge_id in edge_ids if (edge := self.store.get_edge(edge_id))]
            self.store.delete_edges([edge.id for edge in edges])

        if edges:
            logger.info(f"Deleted {len(edges)} edges")
            note_ids = sorted({note_id for edge in edges for note_id in (edge.source, edge.target)})
            self.notifier.emit(ChangeEvent(name="edges-changed", note_ids=note_ids))
        return len(edges)
