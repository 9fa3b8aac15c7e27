"""Keeps stored links and mirrored edges consistent with note content."""

import logging
import time
from enum import Enum
from typing import Callable
from uuid import uuid4

from pydantic import BaseModel

from notegraph.domain.note import Note
from notegraph.domain.relationships import Edge, Link, RelationshipType
from notegraph.errors import MentionNotFoundError, NoteNotFoundError
from notegraph.events import ChangeEvent, ChangeNotifier
from notegraph.scanning import find_occurrences, scan_explicit, strip_markup
from notegraph.stores.base import GraphStore

from .resolver import TitleResolver

logger = logging.getLogger(__name__)

LinkKey = tuple[str | None, str]


class SyncState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    DIFFING = "diffing"
    COMMITTING = "committing"


class SyncReport(BaseModel):
    """Outcome of one synchronization pass."""

    note_id: str
    added: int = 0
    removed: int = 0
    kept: int = 0
    unresolved: int = 0
    edges_created: int = 0


def _link_key(target_note_id: str | None, target_title: str) -> LinkKey:
    return (target_note_id, target_title.strip().casefold())


class GraphSynchronizer:
    """Reconciles the explicit references in a note with its stored links.

    Runs once per save: Scanning -> Diffing -> Committing -> Idle. The whole
    pass happens inside one store transaction, so either every stale link is
    deleted and every new link inserted, or nothing changes.
    """

    def __init__(
        self,
        *,
        store: GraphStore,
        notifier: ChangeNotifier | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the synchronizer.

        Args:
            store: Graph store holding notes, links and edges
            notifier: Channel for change notifications after each commit
            clock: Source of timestamps (seconds since epoch)
        """
        self.store = store
        self.notifier = notifier or ChangeNotifier()
        self.clock = clock
        self.resolver = TitleResolver(store)
        self._state = SyncState.IDLE

    @property
    def state(self) -> SyncState:
        return self._state

    def save_note(self, note: Note) -> SyncReport:
        """Persist a note and synchronize its links in one transaction."""
        try:
            with self.store.transaction():
                self.store.upsert_note(note)
                report, touched = self._sync(note.id, note.content)
        finally:
            self._state = SyncState.IDLE

        self.notifier.emit(ChangeEvent(name="note-saved", note_ids=[note.id]))
        self._notify(report, touched)
        return report

    def sync_note(self, note_id: str, content: str) -> SyncReport:
        """Synchronize the links of an already stored note against ``content``."""
        try:
            with self.store.transaction():
                report, touched = self._sync(note_id, content)
        finally:
            self._state = SyncState.IDLE

        self._notify(report, touched)
        return report

    def _sync(self, note_id: str, content: str) -> tuple[SyncReport, set[str]]:
        self._state = SyncState.SCANNING
        mentions = scan_explicit(content)

        self._state = SyncState.DIFFING
        now = self.clock()
        planned: dict[LinkKey, Link] = {}
        for mention in mentions:
            target_id = self.resolver.resolve(mention.target_title, mention.target_note_id)
            key = _link_key(target_id, mention.target_title)
            if key in planned:
                continue
            planned[key] = Link(
                id=uuid4().hex,
                source_note_id=note_id,
                target_note_id=target_id,
                target_title=mention.target_title,
                text_offset=mention.start_offset,
                relationship_type=RelationshipType.REFERENCES,
                created=now,
            )

        existing: dict[LinkKey, Link] = {}
        stale: list[Link] = []
        for link in self.store.get_links_from(note_id):
            key = _link_key(link.target_note_id, link.target_title)
            if key in planned and key not in existing:
                existing[key] = link
            else:
                stale.append(link)
        new = [link for key, link in planned.items() if key not in existing]

        self._state = SyncState.COMMITTING
        report = SyncReport(note_id=note_id, kept=len(existing), removed=len(stale))
        self.store.delete_links([link.id for link in stale])
        for link in new:
            self.store.add_link(link)
            report.added += 1
            if not link.exists:
                report.unresolved += 1
            elif self._mirror_edge(link):
                report.edges_created += 1

        touched = {link.target_note_id for link in stale + new if link.target_note_id}
        logger.info(
            f"Synced links for note {note_id}: +{report.added} -{report.removed} "
            f"={report.kept} ({report.unresolved} unresolved, {report.edges_created} edges)"
        )
        return report, touched

    def _mirror_edge(self, link: Link) -> bool:
        """Create the canvas edge for a resolved link unless the pair is already connected."""
        if link.target_note_id is None or link.target_note_id == link.source_note_id:
            return False
        if self.store.find_edge_between(link.source_note_id, link.target_note_id):
            return False

        self.store.add_edge(
            Edge(
                id=uuid4().hex,
                source=link.source_note_id,
                target=link.target_note_id,
                relationship_type=link.relationship_type,
                label=f"[[{link.target_title}]]",
                origin="link",
                created=self.clock(),
            )
        )
        return True

    def _notify(self, report: SyncReport, touched: set[str]) -> None:
        if report.added or report.removed:
            self.notifier.emit(
                ChangeEvent(name="links-changed", note_ids=[report.note_id, *sorted(touched)])
            )
        if report.edges_created:
            self.notifier.emit(ChangeEvent(name="edges-changed", note_ids=[report.note_id]))

    def rename_note(self, note_id: str, new_title: str) -> int:
        """Rename a note and repoint the links that referenced its old title.

        Unresolved links already written with the new title are revalidated
        and get their mirrored edge.

        Returns:
            Number of links updated
        """
        new_title = new_title.strip()
        if not new_title:
            raise ValueError("Title must not be empty")

        updated = 0
        edges_created = 0
        sources: set[str] = set()
        with self.store.transaction():
            note = self.store.get_note(note_id)
            if note is None:
                raise NoteNotFoundError(note_id)
            old_title = note.title
            self.store.upsert_note(
                note.model_copy(update={"title": new_title, "modified": self.clock()})
            )

            candidates = {
                link.id: link
                for link in self.store.get_links_by_target_title(old_title)
                + self.store.get_links_by_target_title(new_title)
            }
            for link in candidates.values():
                if link.target_note_id not in (None, note_id):
                    continue
                was_resolved = link.exists
                repointed = link.model_copy(
                    update={"target_title": new_title, "target_note_id": note_id}
                )
                self.store.update_link(repointed)
                updated += 1
                sources.add(link.source_note_id)
                if not was_resolved and self._mirror_edge(repointed):
                    edges_created += 1

        logger.info(f"Renamed note {note_id} to {new_title!r}; {updated} links updated")
        if updated:
            self.notifier.emit(
                ChangeEvent(name="links-changed", note_ids=[note_id, *sorted(sources)])
            )
        if edges_created:
            self.notifier.emit(ChangeEvent(name="edges-changed", note_ids=[note_id]))
        return updated

    def delete_note(self, note_id: str) -> None:
        """Delete a note together with its outbound links and every edge touching it.

        Inbound links survive as unresolved references.
        """
        with self.store.transaction():
            if self.store.get_note(note_id) is None:
                raise NoteNotFoundError(note_id)

            outbound = self.store.get_links_from(note_id)
            self.store.delete_links([link.id for link in outbound])
            inbound = self.store.get_links_to(note_id)
            for link in inbound:
                self.store.update_link(link.model_copy(update={"target_note_id": None}))
            self.store.delete_edges(
                [edge.id for edge in self.store.get_edges() if note_id in (edge.source, edge.target)]
            )
            self.store.delete_note(note_id)

        logger.info(
            f"Deleted note {note_id}: {len(outbound)} outbound links removed, "
            f"{len(inbound)} inbound links marked unresolved"
        )
        affected = {link.source_note_id for link in inbound}
        affected |= {link.target_note_id for link in outbound if link.target_note_id}
        self.notifier.emit(ChangeEvent(name="note-deleted", note_ids=[note_id]))
        self.notifier.emit(ChangeEvent(name="links-changed", note_ids=sorted(affected)))
        self.notifier.emit(ChangeEvent(name="edges-changed", note_ids=[note_id]))

    def link_mention(self, *, target_note_id: str, source_note_id: str, position: int = 0) -> Link:
        """Confirm an unlinked mention of a note as a link.

        Stores the link and its mirrored edge, then asks the editor (through a
        "create-wikilink" event) to turn the mentioned text into a reference.

        Args:
            target_note_id: Note that is mentioned
            source_note_id: Note containing the mention
            position: Plain-text offset of the mention; the first occurrence at
                or after it is used

        Returns:
            The stored link (an existing one if the source already links the target)
        """
        with self.store.transaction():
            source = self.store.get_note(source_note_id)
            if source is None:
                raise NoteNotFoundError(source_note_id)
            target = self.store.get_note(target_note_id)
            if target is None:
                raise NoteNotFoundError(target_note_id)

            text = strip_markup(source.content)
            spans = [span for span in find_occurrences(text, target.title) if span[0] >= position]
            if not spans:
                raise MentionNotFoundError(
                    f"{target.title!r} not found in note {source_note_id} after {position}"
                )
            start, end = spans[0]

            for link in self.store.get_links_from(source_note_id):
                if link.target_note_id == target_note_id:
                    return link

            link = Link(
                id=uuid4().hex,
                source_note_id=source_note_id,
                target_note_id=target_note_id,
                target_title=target.title,
                text_offset=start,
                relationship_type=RelationshipType.REFERENCES,
                created=self.clock(),
            )
            self.store.add_link(link)
            edge_created = self._mirror_edge(link)

        self.notifier.emit(
            ChangeEvent(
                name="create-wikilink",
                note_ids=[source_note_id],
                payload={
                    "search_text": text[start:end],
                    "target_note_id": target_note_id,
                    "target_title": target.title,
                },
            )
        )
        self.notifier.emit(
            ChangeEvent(name="links-changed", note_ids=[source_note_id, target_note_id])
        )
        if edge_created:
            self.notifier.emit(ChangeEvent(name="edges-changed", note_ids=[source_note_id]))
        return link
