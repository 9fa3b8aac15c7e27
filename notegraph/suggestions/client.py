"""Requests link suggestions from a language model and validates what comes back."""

import logging
import math
from typing import Any

from notegraph.domain.note import Note
from notegraph.domain.relationships import RelationshipType, normalize_relationship_type
from notegraph.errors import ValidationRejected
from notegraph.llms.base import TextCompletion
from notegraph.prompt import SYSTEM_PROMPT, get_canvas_prompt, get_note_prompt
from notegraph.scanning import extract_trailing_excerpt
from notegraph.stores.base import GraphStore

from .decoder import decode_suggestions
from .ranker import rank_candidates
from .schemas import NO_SUGGESTIONS_MESSAGE, LinkSuggestion, RankedCandidate, SuggestionBatch

logger = logging.getLogger(__name__)


def coerce_confidence(value: Any, default: float | None = None) -> float:
    """Turn a model-provided confidence into a float clamped to [0, 1].

    Raises:
        ValidationRejected: If the value is missing (and no default is given) or not numeric
    """
    if value is None:
        if default is None:
            raise ValidationRejected("Missing confidence")
        return default
    if isinstance(value, bool):
        raise ValidationRejected(f"Invalid confidence: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationRejected(f"Invalid confidence: {value!r}") from e
    if math.isnan(number):
        raise ValidationRejected("Confidence is NaN")
    return min(max(number, 0.0), 1.0)


def _reason(item: dict) -> str:
    reason = item.get("reason")
    if isinstance(reason, str) and reason.strip():
        return reason.strip()
    return ""


class SuggestionClient:
    """Builds prompts, calls the language model and validates its suggestions.

    The reply is untrusted: it is decoded with a staged fallback, every item
    must reference a note that was actually sent, confidences are clamped and
    items under the acceptance threshold are dropped. Transport failures are
    the only errors that reach the caller.
    """

    def __init__(
        self,
        *,
        store: GraphStore,
        llm: TextCompletion,
        threshold: float = 0.7,
        max_candidates: int = 20,
        max_suggestions: int = 3,
        recency_days: int = 7,
        excerpt_chars: int = 200,
        min_context_chars: int = 20,
    ):
        self.store = store
        self.llm = llm
        self.threshold = threshold
        self.max_candidates = max_candidates
        self.max_suggestions = max_suggestions
        self.recency_days = recency_days
        self.excerpt_chars = excerpt_chars
        self.min_context_chars = min_context_chars

    def suggest_for_note(self, note: Note, now: float | None = None) -> SuggestionBatch:
        """Suggest notes to link from the text the user is writing in ``note``.

        Args:
            note: The note being edited
            now: Current time for candidate ranking

        Returns:
            SuggestionBatch with at most ``max_suggestions`` suggestions
        """
        context = extract_trailing_excerpt(note.content, self.excerpt_chars)
        if len(context) < self.min_context_chars:
            return SuggestionBatch(mode="note", message="Not enough context to suggest links")

        candidates = rank_candidates(
            self.store, note, limit=self.max_candidates, recency_days=self.recency_days, now=now
        )
        if not candidates:
            return SuggestionBatch(mode="note", message=NO_SUGGESTIONS_MESSAGE)

        prompt = get_note_prompt(
            context=context,
            tags=note.tags,
            candidates=candidates,
            threshold=self.threshold,
            max_suggestions=self.max_suggestions,
        )
        items = decode_suggestions(self.llm.complete(prompt, system=SYSTEM_PROMPT))

        by_id = {c.note.id: c for c in candidates}
        suggestions: dict[str, LinkSuggestion] = {}
        for item in items:
            try:
                suggestion = self._validate_note_item(item, note, by_id)
            except ValidationRejected as e:
                logger.debug(f"Dropped suggestion: {e}")
                continue
            if suggestion.confidence < self.threshold:
                continue
            previous = suggestions.get(suggestion.target_note_id)
            if previous is None or suggestion.confidence > previous.confidence:
                suggestions[suggestion.target_note_id] = suggestion

        accepted = sorted(suggestions.values(), key=lambda s: s.confidence, reverse=True)
        accepted = accepted[: self.max_suggestions]
        logger.info(
            f"Note {note.id}: {len(items)} items decoded, {len(accepted)} suggestions accepted"
        )
        return SuggestionBatch(
            mode="note",
            suggestions=accepted,
            candidates_sent=len(candidates),
            raw_items=len(items),
            message="" if accepted else NO_SUGGESTIONS_MESSAGE,
        )

    def _validate_note_item(
        self, item: Any, note: Note, candidates: dict[str, RankedCandidate]
    ) -> LinkSuggestion:
        if not isinstance(item, dict):
            raise ValidationRejected(f"Item is not an object: {item!r}")
        target_id = item.get("noteId")
        if not isinstance(target_id, str) or target_id not in candidates:
            raise ValidationRejected(f"Unknown note id: {target_id!r}")

        candidate = candidates[target_id]
        return LinkSuggestion(
            source_note_id=note.id,
            target_note_id=target_id,
            target_title=candidate.note.title,
            confidence=coerce_confidence(item.get("confidence")),
            reason=_reason(item),
            relationship_type=normalize_relationship_type(
                item.get("relationshipType"), default=RelationshipType.RELATED_TO
            ),
            shared_tags=candidate.shared_tags,
        )

    def suggest_for_canvas(self, notes: list[Note] | None = None) -> SuggestionBatch:
        """Ask for pairwise relationships across every note on the canvas.

        Args:
            notes: Notes to analyze, defaults to every note in the store

        Returns:
            SuggestionBatch of validated pairs, strongest first
        """
        notes = self.store.get_all_notes() if notes is None else notes
        if len(notes) < 2:
            return SuggestionBatch(mode="canvas", message="Need at least two notes to auto-link")

        prompt = get_canvas_prompt(notes, excerpt_chars=self.excerpt_chars)
        items = decode_suggestions(self.llm.complete(prompt, system=SYSTEM_PROMPT))

        by_id = {note.id: note for note in notes}
        pairs: dict[frozenset[str], LinkSuggestion] = {}
        for item in items:
            try:
                suggestion = self._validate_canvas_item(item, by_id)
            except ValidationRejected as e:
                logger.debug(f"Dropped connection: {e}")
                continue
            if suggestion.confidence < self.threshold:
                continue
            pair = frozenset((suggestion.source_note_id, suggestion.target_note_id))
            if pair not in pairs:
                pairs[pair] = suggestion

        accepted = sorted(pairs.values(), key=lambda s: s.confidence, reverse=True)
        logger.info(
            f"Canvas: {len(notes)} notes sent, {len(items)} items decoded, "
            f"{len(accepted)} connections accepted"
        )
        return SuggestionBatch(
            mode="canvas",
            suggestions=accepted,
            candidates_sent=len(notes),
            raw_items=len(items),
            message="" if accepted else NO_SUGGESTIONS_MESSAGE,
        )

    def _validate_canvas_item(self, item: Any, notes: dict[str, Note]) -> LinkSuggestion:
        if not isinstance(item, dict):
            raise ValidationRejected(f"Item is not an object: {item!r}")
        source = item.get("source")
        target = item.get("target")
        if not isinstance(source, str) or source not in notes:
            raise ValidationRejected(f"Unknown source id: {source!r}")
        if not isinstance(target, str) or target not in notes:
            raise ValidationRejected(f"Unknown target id: {target!r}")
        if source == target:
            raise ValidationRejected(f"Self connection: {source!r}")

        shared = [tag for tag in notes[target].tags if tag in notes[source].tags]
        return LinkSuggestion(
            source_note_id=source,
            target_note_id=target,
            target_title=notes[target].title,
            confidence=coerce_confidence(item.get("confidence"), default=1.0),
            reason=_reason(item),
            relationship_type=normalize_relationship_type(
                item.get("relationshipType"), default=RelationshipType.RELATED_TO
            ),
            shared_tags=shared,
        )
