"""Decoding of untrusted language-model output into a list of raw items.

Three stages, tried in order:

1. ``parse_direct``: the whole reply (minus markdown code fences) is a JSON array.
2. ``parse_bracketed``: the first balanced ``[...]`` substring that parses as an array.
3. Give up: the reply counts as zero suggestions.

``decode_suggestions`` never raises.
"""

import json
import logging
import re
from typing import Any, Iterator

from notegraph.errors import MalformedAIResponse

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")

# Replies are bounded by the completion token limit; anything far larger is garbage.
MAX_REPLY_CHARS = 100_000
MAX_BRACKETED_CANDIDATES = 50


def strip_code_fences(text: str) -> str:
    return _CODE_FENCE.sub("", text.strip()).strip()


def _loads(text: str) -> Any:
    # Deeply nested input makes the json module raise RecursionError
    try:
        return json.loads(text)
    except (ValueError, RecursionError) as e:
        raise MalformedAIResponse(f"Reply is not valid JSON: {type(e).__name__}") from e


def parse_direct(text: str) -> list[Any]:
    """Stage 1: parse the reply as a JSON array."""
    data = _loads(strip_code_fences(text))
    if not isinstance(data, list):
        raise MalformedAIResponse(f"Reply is a JSON {type(data).__name__}, not an array")
    return data


def iter_bracketed(text: str) -> Iterator[str]:
    """Yield balanced ``[...]`` substrings in order of their opening bracket.

    Single pass over the text with a stack of open brackets. Quotes only
    count as JSON string delimiters inside a bracket, so stray quotes in
    surrounding prose are harmless. Brackets inside string literals are ignored.
    """
    spans: list[tuple[int, int]] = []
    opened: list[int] = []
    in_string = False
    escaped = False
    for index, current in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif current == "\\":
                escaped = True
            elif current == '"':
                in_string = False
            continue
        if current == '"' and opened:
            in_string = True
        elif current == "[":
            opened.append(index)
        elif current == "]" and opened:
            spans.append((opened.pop(), index))
    for start, end in sorted(spans):
        yield text[start : end + 1]


def parse_bracketed(text: str) -> list[Any]:
    """Stage 2: parse the first balanced bracketed substring that is a JSON array."""
    for attempt, candidate in enumerate(iter_bracketed(text)):
        if attempt >= MAX_BRACKETED_CANDIDATES:
            break
        try:
            data = _loads(candidate)
        except MalformedAIResponse:
            continue
        if isinstance(data, list):
            return data
    raise MalformedAIResponse("No JSON array found in reply")


def decode_suggestions(text: str) -> list[Any]:
    """Decode a model reply into raw items, falling back stage by stage.

    Args:
        text: Raw reply from the language model

    Returns:
        Decoded items (not yet validated); empty if nothing could be parsed
    """
    if len(text) > MAX_REPLY_CHARS:
        logger.warning(f"Treating model reply as no suggestions: {len(text)} characters is too long")
        return []

    try:
        return parse_direct(text)
    except MalformedAIResponse as e:
        logger.debug(f"Direct parse failed: {e}")

    try:
        items = parse_bracketed(text)
        logger.info("Recovered suggestions from bracketed substring")
        return items
    except MalformedAIResponse as e:
        logger.warning(f"Treating model reply as no suggestions: {e}")
        return []
