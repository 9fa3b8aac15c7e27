"""Shortlisting of notes worth offering to the language model."""

import time

from notegraph.domain.note import Note
from notegraph.stores.base import GraphStore

from .schemas import RankedCandidate

RECENCY_WEIGHT = 2
SHARED_TAG_WEIGHT = 3
SECONDS_PER_DAY = 60 * 60 * 24


def score_candidate(
    candidate: Note, tags: list[str], now: float, recency_days: int = 7
) -> tuple[float, list[str]]:
    """Score a candidate: 2 if edited within ``recency_days`` plus 3 per shared tag.

    Returns:
        Tuple of (score, shared tags)
    """
    score = 0.0
    if (now - candidate.modified) / SECONDS_PER_DAY < recency_days:
        score += RECENCY_WEIGHT
    shared = [tag for tag in candidate.tags if tag in tags]
    score += SHARED_TAG_WEIGHT * len(shared)
    return score, shared


def rank_candidates(
    store: GraphStore,
    note: Note,
    limit: int = 20,
    recency_days: int = 7,
    now: float | None = None,
) -> list[RankedCandidate]:
    """Rank the notes that could be suggested as links from ``note``.

    Excludes the note itself and notes it already links to. The cap only
    bounds request size; deciding what is related is left to the model.

    Args:
        store: Graph store
        note: Note the suggestions are for
        limit: Maximum number of candidates
        recency_days: Window for the recency bonus
        now: Current time (seconds since epoch), defaults to time.time()

    Returns:
        Highest-scoring candidates first, ties broken by most recent edit
    """
    now = time.time() if now is None else now
    linked = {
        link.target_note_id for link in store.get_links_from(note.id) if link.target_note_id
    }

    ranked = []
    for candidate in store.get_all_notes():
        if candidate.id == note.id or candidate.id in linked:
            continue
        score, shared = score_candidate(candidate, note.tags, now, recency_days)
        ranked.append(RankedCandidate(note=candidate, score=score, shared_tags=shared))

    ranked.sort(key=lambda c: (c.score, c.note.modified), reverse=True)
    return ranked[:limit]
