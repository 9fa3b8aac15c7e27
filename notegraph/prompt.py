from typing import List

from notegraph.domain.note import Note
from notegraph.domain.relationships import RelationshipType
from notegraph.scanning import strip_markup
from notegraph.suggestions.schemas import RankedCandidate

SYSTEM_PROMPT = (
    "You are an AI that finds semantic relationships between notes. Return only valid JSON."
)

RELATIONSHIP_CHOICES = ", ".join(t.value for t in RelationshipType)

NOTE_PROMPT_TEMPLATE = """You are an AI assistant helping a user build connections in their note-taking system.

Current context the user is writing:
"{context}"

Current note tags: {tags}

Available notes to potentially link:
{candidates}

Task: Analyze which notes (if any) are most relevant to link from the current context.

Return a JSON array of suggestions with this exact format:
[
  {{
    "noteId": "abc123",
    "noteTitle": "Note Title",
    "confidence": 0.85,
    "reason": "Brief explanation why this is relevant",
    "sharedTags": ["tag1", "tag2"],
    "relationshipType": "related-to"
  }}
]

Rules:
- Only suggest notes with confidence > {threshold}
- Maximum {max_suggestions} suggestions
- confidence must be between 0.0 and 1.0
- relationshipType must be one of: {relationship_choices}
- Reason should be < 60 characters
- Return empty array [] if no good suggestions
- Response must be valid JSON only, no markdown or explanation"""

CANVAS_PROMPT_TEMPLATE = """Analyze these notes and identify which notes are semantically related. Be selective - only suggest strong semantic connections.

Return ONLY a JSON array of connections in this format:
[{{"source": "noteId1", "target": "noteId2", "relationshipType": "supports", "confidence": 0.9, "reason": "brief reason"}}]

relationshipType must be one of: {relationship_choices}
confidence must be between 0.0 and 1.0

Notes:
{notes}"""


def format_tags(tags: List[str]) -> str:
    return ", ".join(tags) or "none"


def get_note_prompt(
    *,
    context: str,
    tags: List[str],
    candidates: List[RankedCandidate],
    threshold: float,
    max_suggestions: int,
) -> str:
    listing = "\n".join(
        f'{i}. "{c.note.title}" (ID: {c.note.id}, tags: {format_tags(c.note.tags)})'
        for i, c in enumerate(candidates, start=1)
    )
    return NOTE_PROMPT_TEMPLATE.format(
        context=context,
        tags=format_tags(tags),
        candidates=listing,
        threshold=threshold,
        max_suggestions=max_suggestions,
        relationship_choices=RELATIONSHIP_CHOICES,
    )


def get_canvas_prompt(notes: List[Note], excerpt_chars: int = 200) -> str:
    blocks = []
    for note in notes:
        excerpt = strip_markup(note.content)
        if len(excerpt) > excerpt_chars:
            excerpt = excerpt[:excerpt_chars] + "..."
        blocks.append(
            f"ID: {note.id}\nTitle: {note.title}\nTags: {format_tags(note.tags)}\nContent: {excerpt}"
        )
    return CANVAS_PROMPT_TEMPLATE.format(
        notes="\n\n".join(blocks), relationship_choices=RELATIONSHIP_CHOICES
    )
