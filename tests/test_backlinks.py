from notegraph.domain.note import Note
from notegraph.domain.relationships import Link
from notegraph.queries import get_backlinks
from notegraph.queries.backlinks import link_context
from notegraph.stores.local_db import LocalGraphStore
from notegraph.sync import GraphSynchronizer
from tests.conftest import NOW


def test_backlinks_sorted_by_most_recent_source(
    store: LocalGraphStore, test_notes: dict[str, Note]
) -> None:
    synchronizer = GraphSynchronizer(store=store, clock=lambda: NOW)
    synchronizer.save_note(
        test_notes["oceans"].model_copy(
            update={"content": "Oceans hold [[Rocks]] on the sea floor", "modified": NOW - 10}
        )
    )
    synchronizer.save_note(
        test_notes["whales"].model_copy(
            update={"content": "Whales scratch on [[Rocks]] sometimes", "modified": NOW}
        )
    )

    backlinks = get_backlinks(store, "rocks")

    assert [b.source_note.id for b in backlinks] == ["whales", "oceans"]
    assert backlinks[0].context == "Whales scratch on [[Rocks]] sometimes"


def test_unresolved_links_are_not_backlinks(store: LocalGraphStore) -> None:
    store.add_link(Link(id="l1", source_note_id="oceans", target_title="Rocks"))

    assert get_backlinks(store, "rocks") == []


def test_backlinks_skip_missing_source(store: LocalGraphStore) -> None:
    store.add_link(
        Link(id="l1", source_note_id="gone", target_note_id="rocks", target_title="Rocks")
    )

    assert get_backlinks(store, "rocks") == []


def test_backlinks_degrade_to_empty_on_store_failure(store: LocalGraphStore, monkeypatch) -> None:
    def broken(note_id: str):
        raise RuntimeError("store offline")

    monkeypatch.setattr(store, "get_links_to", broken)

    assert get_backlinks(store, "rocks") == []


def test_link_context_prefers_occurrence_near_offset() -> None:
    content = "[[Rocks]] first. " + "filler " * 60 + "later [[Rocks]] here"
    second = content.rindex("[[Rocks]]")

    context = link_context(content, "Rocks", second, radius=10)

    assert "later [[Rocks]] here" in context
    assert context.startswith("...")


def test_link_context_falls_back_to_first_occurrence_then_start() -> None:
    content = "Mentions [[Rocks]] once"

    assert link_context(content, "Rocks", 5000, radius=60) == content
    assert link_context("No reference at all", "Rocks", 0) == "No reference at all"
