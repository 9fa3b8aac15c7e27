"""Mention scanning: explicit references and bare-title mentions in note content."""

from typing import Literal, Mapping

from pydantic import BaseModel

from .plain_text import PlainText, find_occurrences, project_plain_text


class Mention(BaseModel):
    """One reference found in a note's plain-text projection.

    Attributes:
        matched_text: Text as it appears in the note
        start_offset: Start offset in the plain-text projection
        end_offset: End offset in the plain-text projection
        target_title: Title the mention refers to
        target_note_id: Note ID if the mention carries or implies one
        kind: "explicit" for reference tokens, "bare" for plain title occurrences
        exists: Existence flag supplied by the editor for explicit tokens
    """

    matched_text: str
    start_offset: int
    end_offset: int
    target_title: str
    target_note_id: str | None = None
    kind: Literal["explicit", "bare"] = "explicit"
    exists: bool = True


def _explicit_from(plain: PlainText) -> list[Mention]:
    return [
        Mention(
            matched_text=ref.matched_text,
            start_offset=ref.start,
            end_offset=ref.end,
            target_title=ref.target_title,
            target_note_id=ref.target_note_id,
            kind="explicit",
            exists=ref.exists,
        )
        for ref in plain.references
    ]


def scan_explicit(content: str) -> list[Mention]:
    """Enumerate the explicit reference tokens in note content, in order."""
    return _explicit_from(project_plain_text(content))


def scan_mentions(content: str, titles: Mapping[str, str]) -> list[Mention]:
    """Find explicit references and bare-title mentions of other notes.

    Bare-title mentions are case-insensitive literal occurrences of any title
    in ``titles`` that do not overlap an explicit reference token.

    Args:
        content: Raw note content
        titles: Mapping of note ID to title for every *other* note

    Returns:
        Mentions ordered by start offset
    """
    plain = project_plain_text(content)
    mentions = _explicit_from(plain)
    covered = [(m.start_offset, m.end_offset) for m in mentions]

    for note_id, title in titles.items():
        for start, end in find_occurrences(plain.text, title.strip()):
            if any(start < c_end and c_start < end for c_start, c_end in covered):
                continue
            mentions.append(
                Mention(
                    matched_text=plain.text[start:end],
                    start_offset=start,
                    end_offset=end,
                    target_title=title.strip(),
                    target_note_id=note_id,
                    kind="bare",
                )
            )

    mentions.sort(key=lambda m: (m.start_offset, m.kind != "explicit", -m.end_offset))
    return mentions
