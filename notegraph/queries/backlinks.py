"""Backlink index: inbound links to a note with freshly computed context."""

import logging

from pydantic import BaseModel

from notegraph.domain.note import Note
from notegraph.domain.relationships import Link
from notegraph.scanning import extract_context, find_occurrences, strip_markup
from notegraph.scanning.plain_text import find_nearest_occurrence, leading_context
from notegraph.stores.base import GraphStore

logger = logging.getLogger(__name__)

# How far (in plain-text characters) a stored offset may drift before it is ignored
OFFSET_WINDOW = 200


class Backlink(BaseModel):
    """An inbound link, joined to its source note."""

    link: Link
    source_note: Note
    context: str


def link_context(content: str, title: str, offset: int, radius: int = 60) -> str:
    """Recompute the snippet around a reference to ``title``.

    Looks near the stored offset first, then at the first occurrence anywhere,
    and finally falls back to the start of the content.
    """
    text = strip_markup(content)
    span = find_nearest_occurrence(text, title, offset, OFFSET_WINDOW)
    if span is None:
        occurrences = find_occurrences(text, title)
        span = occurrences[0] if occurrences else None
    if span is None:
        return leading_context(text, radius)
    return extract_context(text, span[0], span[1], radius)


def get_backlinks(store: GraphStore, note_id: str, context_chars: int = 60) -> list[Backlink]:
    """Get all resolved links pointing at a note, most recently edited sources first.

    Links whose source note no longer exists are skipped. Errors degrade to an
    empty list since the result only backs a display panel.

    Args:
        store: Graph store
        note_id: Note whose backlinks are wanted
        context_chars: Characters of context on each side of the reference

    Returns:
        List of Backlink objects
    """
    try:
        backlinks = []
        for link in store.get_links_to(note_id):
            source = store.get_note(link.source_note_id)
            if source is None:
                continue
            backlinks.append(
                Backlink(
                    link=link,
                    source_note=source,
                    context=link_context(
                        source.content, link.target_title, link.text_offset, context_chars
                    ),
                )
            )
        backlinks.sort(key=lambda b: b.source_note.modified, reverse=True)
        return backlinks
    except Exception as e:
        logger.error(f"Failed to load backlinks for note {note_id}: {e}")
        return []
