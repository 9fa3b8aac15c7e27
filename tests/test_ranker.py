from notegraph.domain.note import Note
from notegraph.domain.relationships import Link
from notegraph.stores.local_db import LocalGraphStore
from notegraph.suggestions.ranker import rank_candidates, score_candidate
from tests.conftest import DAY, NOW


def test_score_candidate() -> None:
    recent = Note(id="a", title="A", tags=["x", "y"], modified=NOW - DAY)
    old = Note(id="b", title="B", tags=["z"], modified=NOW - 30 * DAY)

    assert score_candidate(recent, ["x", "y"], NOW) == (8.0, ["x", "y"])
    assert score_candidate(old, ["x"], NOW) == (0.0, [])


def test_shared_tags_rank_first_among_equally_recent_notes() -> None:
    current = Note(id="current", title="Current", tags=["marine", "mammal"], modified=NOW)
    plain = Note(id="plain", title="Plain", tags=[], modified=NOW - DAY)
    tagged = Note(id="tagged", title="Tagged", tags=["marine", "mammal"], modified=NOW - DAY)
    store = LocalGraphStore.from_data(
        notes={note.id: note for note in (current, plain, tagged)}
    )

    ranked = rank_candidates(store, current, now=NOW)

    assert [c.note.id for c in ranked] == ["tagged", "plain"]
    assert ranked[0].score == 8.0
    assert ranked[0].shared_tags == ["marine", "mammal"]


def test_ties_broken_by_recency(store: LocalGraphStore) -> None:
    current = Note(id="current", title="Current", modified=NOW)

    ranked = rank_candidates(store, current, now=NOW)

    assert [c.note.id for c in ranked] == ["whales", "oceans", "rocks"]


def test_excludes_self_and_already_linked_notes(store: LocalGraphStore, test_notes) -> None:
    store.add_link(
        Link(id="l1", source_note_id="oceans", target_note_id="whales", target_title="Whales")
    )

    ranked = rank_candidates(store, test_notes["oceans"], now=NOW)

    assert [c.note.id for c in ranked] == ["rocks"]


def test_limit_caps_the_shortlist(store: LocalGraphStore) -> None:
    current = Note(id="current", title="Current")

    assert len(rank_candidates(store, current, limit=2, now=NOW)) == 2
