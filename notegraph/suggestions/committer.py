"""Commits validated suggestions as canvas edges."""

import logging
import time
from typing import Callable
from uuid import uuid4

from notegraph.domain.relationships import Edge, RelationshipType, normalize_relationship_type
from notegraph.errors import StoreError
from notegraph.events import ChangeEvent, ChangeNotifier
from notegraph.stores.base import GraphStore

from .schemas import NO_SUGGESTIONS_MESSAGE, AutoLinkReport, LinkSuggestion, SuggestionBatch

logger = logging.getLogger(__name__)

MAX_LABEL_CHARS = 60


def edge_label(suggestion: LinkSuggestion, relationship_type: RelationshipType) -> str:
    """Label an AI edge with the model's reason, or the type label when there is none."""
    reason = suggestion.reason.strip()
    if not reason:
        return relationship_type.label
    if len(reason) > MAX_LABEL_CHARS:
        return reason[: MAX_LABEL_CHARS - 3].rstrip() + "..."
    return reason


class AutoLinkCommitter:
    """Creates one edge per suggestion unless the pair is already connected.

    Each pair is committed in its own transaction, so a failed insert only
    costs that pair.
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

    def commit(self, suggestions: list[LinkSuggestion]) -> AutoLinkReport:
        """Commit suggestions as edges.

        Args:
            suggestions: Validated suggestions

        Returns:
            AutoLinkReport with created/skipped/failed counts
        """
        report = AutoLinkReport()
        touched: set[str] = set()

        for suggestion in suggestions:
            try:
                created = self._commit_one(suggestion)
            except StoreError as e:
                logger.error(
                    f"Failed to link {suggestion.source_note_id} -> "
                    f"{suggestion.target_note_id}: {e}"
                )
                report.failed += 1
                continue
            if created:
                report.created += 1
                touched.update((suggestion.source_note_id, suggestion.target_note_id))
            else:
                report.skipped += 1

        report.message = (
            f"Created {report.created} new connections" if report.created else "No new connections"
        )
        logger.info(
            f"Auto-link: {report.created} created, {report.skipped} skipped, {report.failed} failed"
        )
        if touched:
            self.notifier.emit(ChangeEvent(name="edges-changed", note_ids=sorted(touched)))
        return report

    def commit_batch(self, batch: SuggestionBatch) -> AutoLinkReport:
        """Commit a batch, reporting the neutral batch message when it is empty."""
        if not batch.suggestions:
            return AutoLinkReport(message=batch.message or NO_SUGGESTIONS_MESSAGE)
        return self.commit(batch.suggestions)

    def _commit_one(self, suggestion: LinkSuggestion) -> bool:
        source, target = suggestion.source_note_id, suggestion.target_note_id
        with self.store.transaction():
            if source == target:
                return False
            if self.store.get_note(source) is None or self.store.get_note(target) is None:
                logger.debug(f"Skipping suggestion for missing note: {source} -> {target}")
                return False
            if self.store.find_edge_between(source, target) is not None:
                return False

            relationship_type = normalize_relationship_type(
                suggestion.relationship_type, default=RelationshipType.RELATED_TO
            )
            self.store.add_edge(
                Edge(
                    id=uuid4().hex,
                    source=source,
                    target=target,
                    relationship_type=relationship_type,
                    label=edge_label(suggestion, relationship_type),
                    origin="ai",
                    created=self.clock(),
                )
            )
        return True
