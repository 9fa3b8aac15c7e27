import time

import pytest

from notegraph.errors import MalformedAIResponse
from notegraph.suggestions.decoder import (
    MAX_REPLY_CHARS,
    decode_suggestions,
    iter_bracketed,
    parse_bracketed,
    parse_direct,
)


def test_parse_direct_plain_array() -> None:
    assert parse_direct('[{"noteId": "a", "confidence": 0.9}]') == [
        {"noteId": "a", "confidence": 0.9}
    ]


def test_parse_direct_strips_code_fences() -> None:
    assert parse_direct('```json\n[{"noteId": "a"}]\n```') == [{"noteId": "a"}]


@pytest.mark.parametrize("reply", ["not json", '{"noteId": "a"}', '"[]"', ""])
def test_parse_direct_rejects_non_arrays(reply: str) -> None:
    with pytest.raises(MalformedAIResponse):
        parse_direct(reply)


def test_iter_bracketed_ignores_brackets_in_strings() -> None:
    text = 'Here: [{"reason": "uses ] and [ inside"}] done'

    assert list(iter_bracketed(text))[0] == '[{"reason": "uses ] and [ inside"}]'


def test_parse_bracketed_finds_array_in_prose() -> None:
    reply = 'Sure! Based on the notes [see below] I found:\n[{"noteId": "a"}]\nHope it helps.'

    assert parse_bracketed(reply) == [{"noteId": "a"}]


def test_parse_bracketed_without_array_raises() -> None:
    with pytest.raises(MalformedAIResponse):
        parse_bracketed("Sure! Here are some ideas: [not, json")


def test_decode_falls_back_through_the_stages() -> None:
    assert decode_suggestions('[{"noteId": "a"}]') == [{"noteId": "a"}]
    assert decode_suggestions('Result: [{"noteId": "a"}]') == [{"noteId": "a"}]


def test_decode_prose_yields_nothing() -> None:
    assert decode_suggestions("Sure! Here are some ideas: not json") == []


def test_parse_direct_rejects_deep_nesting() -> None:
    with pytest.raises(MalformedAIResponse):
        parse_direct("[" * 5000 + "]" * 5000)


def test_iter_bracketed_skips_unclosed_prefix() -> None:
    text = 'Ideas [first "quoted" part, then [{"noteId": "a"}]'

    assert list(iter_bracketed(text)) == ['[{"noteId": "a"}]']


def test_iter_bracketed_ignores_quotes_in_prose() -> None:
    text = 'He said "maybe: [{"noteId": "a"}]'

    assert list(iter_bracketed(text)) == ['[{"noteId": "a"}]']


@pytest.mark.parametrize(
    "reply",
    [
        "[" * 5000 + "]" * 5000,
        "Sure! " + "[" * 5000 + "]" * 5000,
        "[" * 100_000 + "]" * 100_000,
    ],
)
def test_decode_deeply_nested_reply_yields_nothing(reply: str) -> None:
    assert decode_suggestions(reply) == []


def test_decode_unbalanced_reply_is_fast() -> None:
    started = time.perf_counter()

    assert decode_suggestions("Sure! " + "[" * 20_000) == []
    assert time.perf_counter() - started < 2


def test_decode_oversized_reply_yields_nothing() -> None:
    item = '{"noteId": "a", "confidence": 0.9},'
    reply = "[" + item * (MAX_REPLY_CHARS // len(item) + 1) + '{"noteId": "b"}]'

    assert decode_suggestions(reply) == []
