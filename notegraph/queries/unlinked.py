"""Unlinked mention finder: title occurrences in other notes that are not links yet."""

import logging

from pydantic import BaseModel

from notegraph.domain.note import Note
from notegraph.scanning import extract_context, find_occurrences, strip_markup
from notegraph.stores.base import GraphStore

logger = logging.getLogger(__name__)


class UnlinkedMention(BaseModel):
    """One literal occurrence of a note's title in another note."""

    id: str
    source_note: Note
    position: int
    context: str


def find_unlinked_mentions(
    store: GraphStore, note_id: str, title: str, context_chars: int = 60
) -> list[UnlinkedMention]:
    """Scan every other note for case-insensitive occurrences of ``title``.

    Notes that already hold a link to the note (by ID or by title) are
    skipped. Every occurrence is reported separately. This reads every note on
    each call, which is fine for a few hundred notes.

    Args:
        store: Graph store
        note_id: ID of the note being mentioned
        title: Its exact title
        context_chars: Characters of context on each side of the occurrence

    Returns:
        Unlinked mentions, most recently edited source notes first
    """
    if not title or not title.strip():
        return []

    try:
        linked_sources = {link.source_note_id for link in store.get_links_to(note_id)}
        linked_sources |= {
            link.source_note_id for link in store.get_links_by_target_title(title)
        }

        mentions = []
        for note in store.get_all_notes():
            if note.id == note_id or note.id in linked_sources:
                continue
            text = strip_markup(note.content)
            for start, end in find_occurrences(text, title.strip()):
                mentions.append(
                    UnlinkedMention(
                        id=f"{note.id}-{start}",
                        source_note=note,
                        position=start,
                        context=extract_context(text, start, end, context_chars),
                    )
                )

        mentions.sort(key=lambda m: m.source_note.modified, reverse=True)
        return mentions
    except Exception as e:
        logger.error(f"Failed to find unlinked mentions of note {note_id}: {e}")
        return []
