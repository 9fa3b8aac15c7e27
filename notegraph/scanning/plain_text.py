"""Plain-text projection of rich note content and context extraction."""

import html
import re

from pydantic import BaseModel

# Editor wikilink nodes, [[Title]] / [[Title|alias]] references, and any other tag
_TOKEN_PATTERN = re.compile(
    r"(?P<node><span\b(?P<attrs>[^>]*\bdata-type\s*=\s*[\"']wikilink[\"'][^>]*)>(?P<inner>.*?)</span\s*>)"
    r"|(?P<bracket>\[\[(?P<target>[^\[\]|]+)(?:\|(?P<alias>[^\[\]]*))?\]\])"
    r"|(?P<tag><[^>]*>)",
    re.IGNORECASE | re.DOTALL,
)
_ATTR_PATTERN = re.compile(r"([\w-]+)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')")
_TAG_PATTERN = re.compile(r"<[^>]*>")


class ReferenceSpan(BaseModel):
    """An explicit reference token located in the plain-text projection."""

    target_title: str
    target_note_id: str | None = None
    exists: bool = True
    matched_text: str
    start: int
    end: int


class PlainText(BaseModel):
    """Markup-free text of a note plus the spans of its explicit references."""

    text: str
    references: list[ReferenceSpan] = []


class _PlainTextBuilder:
    """Appends text while collapsing whitespace runs and trimming both ends."""

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._length = 0
        self._pending_space = False

    def space(self) -> None:
        if self._length:
            self._pending_space = True

    def text(self, value: str) -> tuple[int, int]:
        """Append text and return its (start, end) span in the output."""
        start = None
        for char in value:
            if char.isspace():
                self.space()
                continue
            if self._pending_space:
                self._parts.append(" ")
                self._length += 1
                self._pending_space = False
            if start is None:
                start = self._length
            self._parts.append(char)
            self._length += 1
        if start is None:
            start = self._length
        return start, self._length

    def build(self) -> str:
        return "".join(self._parts)


def _parse_attrs(raw: str) -> dict[str, str]:
    return {
        name.lower(): html.unescape(double or single)
        for name, double, single in _ATTR_PATTERN.findall(raw)
    }


def project_plain_text(content: str) -> PlainText:
    """Strip markup from note content and locate its explicit references.

    Every tag becomes a space, entities are unescaped, whitespace runs collapse
    to a single space and the result is trimmed. Editor wikilink nodes project
    to their visible text; bracket references keep their literal ``[[...]]``.

    Args:
        content: Raw note content (HTML or plain text)

    Returns:
        PlainText with the projected text and reference spans in its coordinates
    """
    builder = _PlainTextBuilder()
    references: list[ReferenceSpan] = []
    position = 0

    for match in _TOKEN_PATTERN.finditer(content):
        builder.text(html.unescape(content[position : match.start()]))
        position = match.end()

        if match.group("tag"):
            builder.space()
            continue

        if match.group("node"):
            attrs = _parse_attrs(match.group("attrs"))
            inner = html.unescape(_TAG_PATTERN.sub(" ", match.group("inner")))
            title = (attrs.get("data-title") or inner).strip()
            builder.space()
            start, end = builder.text(inner)
            builder.space()
            if not title:
                continue
            references.append(
                ReferenceSpan(
                    target_title=title,
                    target_note_id=attrs.get("data-note-id") or None,
                    exists="wikilink-broken" not in attrs.get("class", ""),
                    matched_text=" ".join(inner.split()),
                    start=start,
                    end=end,
                )
            )
            continue

        literal = html.unescape(match.group("bracket"))
        title = html.unescape(match.group("target")).strip()
        start, end = builder.text(literal)
        if title:
            references.append(
                ReferenceSpan(
                    target_title=title,
                    matched_text=" ".join(literal.split()),
                    start=start,
                    end=end,
                )
            )

    builder.text(html.unescape(content[position:]))
    return PlainText(text=builder.build(), references=references)


def strip_markup(content: str) -> str:
    """Return only the plain-text projection of the content."""
    return project_plain_text(content).text


def find_occurrences(text: str, needle: str) -> list[tuple[int, int]]:
    """Find all non-overlapping case-insensitive occurrences of a literal string.

    Returns:
        List of (start, end) offsets in ``text``
    """
    if not needle.strip():
        return []
    return [m.span() for m in re.finditer(re.escape(needle), text, re.IGNORECASE)]


def find_nearest_occurrence(
    text: str, needle: str, offset: int, window: int
) -> tuple[int, int] | None:
    """Find the occurrence of ``needle`` closest to ``offset`` within ``window`` chars."""
    best = None
    for start, end in find_occurrences(text, needle):
        distance = abs(start - offset)
        if distance <= window and (best is None or distance < abs(best[0] - offset)):
            best = (start, end)
    return best


def extract_context(text: str, start: int, end: int, radius: int = 60) -> str:
    """Extract surrounding plain text for the span ``text[start:end]``.

    Ellipses are added only on the side where the radius cut the text short.
    """
    lo = max(0, start - radius)
    hi = min(len(text), end + radius)
    snippet = text[lo:hi].strip()
    if lo > 0:
        snippet = "..." + snippet
    if hi < len(text):
        snippet = snippet + "..."
    return snippet


def leading_context(text: str, radius: int = 60) -> str:
    """Context used when nothing can be located: the start of the text."""
    if len(text) <= radius * 2:
        return text
    return text[: radius * 2].rstrip() + "..."


def extract_trailing_excerpt(content: str, max_chars: int = 200) -> str:
    """Take the last sentence of the note's plain text, capped at ``max_chars``."""
    text = strip_markup(content)
    last = re.split(r"\.\s", text)[-1]
    return last[-max_chars:].strip()
