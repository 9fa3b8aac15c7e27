from notegraph.scanning import (
    extract_context,
    extract_trailing_excerpt,
    find_occurrences,
    project_plain_text,
    strip_markup,
)
from notegraph.scanning.plain_text import find_nearest_occurrence, leading_context


def test_strip_markup_collapses_whitespace_and_unescapes_entities():
    content = "<h1>Title</h1>\n<p>Fish &amp; chips   are  <b>great</b></p>"
    assert strip_markup(content) == "Title Fish & chips are great"


def test_plain_text_is_left_alone():
    assert strip_markup("Just some text") == "Just some text"


def test_bracket_reference_keeps_literal_text_and_span():
    plain = project_plain_text("<p>See [[Whales]] today</p>")

    assert plain.text == "See [[Whales]] today"
    assert len(plain.references) == 1
    ref = plain.references[0]
    assert ref.target_title == "Whales"
    assert plain.text[ref.start : ref.end] == "[[Whales]]"


def test_bracket_reference_with_alias_targets_the_title():
    plain = project_plain_text("Read [[Whales|the big ones]] first")

    ref = plain.references[0]
    assert ref.target_title == "Whales"
    assert ref.matched_text == "[[Whales|the big ones]]"


def test_editor_wikilink_node_projects_to_its_text():
    content = (
        '<p>About <span data-type="wikilink" data-note-id="whales" data-title="Whales" '
        'class="wikilink wikilink-exists">Whales</span> and more</p>'
    )
    plain = project_plain_text(content)

    assert plain.text == "About Whales and more"
    ref = plain.references[0]
    assert ref.target_note_id == "whales"
    assert ref.exists is True
    assert plain.text[ref.start : ref.end] == "Whales"


def test_broken_editor_wikilink_is_marked_missing():
    content = (
        '<span data-type="wikilink" data-note-id="" data-title="Krill" '
        'class="wikilink wikilink-broken">Krill</span>'
    )
    ref = project_plain_text(content).references[0]

    assert ref.target_title == "Krill"
    assert ref.target_note_id is None
    assert ref.exists is False


def test_find_occurrences_is_case_insensitive_and_literal():
    text = "C++ is not c++ nor C+"
    assert find_occurrences(text, "c++") == [(0, 3), (11, 14)]
    assert find_occurrences(text, "  ") == []


def test_find_nearest_occurrence_respects_window():
    text = "whale " * 100
    assert find_nearest_occurrence(text, "whale", 300, 10) == (300, 305)
    assert find_nearest_occurrence("a whale", "whale", 500, 10) is None


def test_context_contains_both_sides_with_ellipses_when_truncated():
    text = (
        "Last summer I spent several weeks on the research vessel studying [[Whale]] "
        "behavior in cold water near the arctic circle with a team of biologists."
    )
    start = text.index("[[Whale]]")
    context = extract_context(text, start, start + len("[[Whale]]"), radius=30)

    assert "studying [[Whale]] behavior" in context
    assert context.startswith("...")
    assert context.endswith("...")


def test_context_has_no_ellipses_when_radius_covers_text():
    text = "studying [[Whale]] behavior in cold water"
    start = text.index("[[Whale]]")
    context = extract_context(text, start, start + len("[[Whale]]"), radius=60)

    assert context == text


def test_context_ellipsis_only_on_truncated_side():
    text = "[[Whale]] " + "x" * 100
    context = extract_context(text, 0, len("[[Whale]]"), radius=20)

    assert not context.startswith("...")
    assert context.endswith("...")


def test_leading_context():
    assert leading_context("short", radius=60) == "short"
    assert leading_context("y" * 200, radius=10) == "y" * 20 + "..."


def test_trailing_excerpt_is_last_sentence():
    content = "<p>Whales migrate. They follow krill across the southern ocean</p>"
    assert extract_trailing_excerpt(content) == "They follow krill across the southern ocean"


def test_trailing_excerpt_is_capped():
    excerpt = extract_trailing_excerpt("a" * 500, max_chars=200)
    assert len(excerpt) == 200
