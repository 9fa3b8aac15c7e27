"""Scanning of note content for references and context."""

from notegraph.scanning.mentions import Mention, scan_explicit, scan_mentions
from notegraph.scanning.plain_text import (
    PlainText,
    extract_context,
    extract_trailing_excerpt,
    find_occurrences,
    project_plain_text,
    strip_markup,
)

__all__ = [
    "Mention",
    "PlainText",
    "extract_context",
    "extract_trailing_excerpt",
    "find_occurrences",
    "project_plain_text",
    "scan_explicit",
    "scan_mentions",
    "strip_markup",
]
