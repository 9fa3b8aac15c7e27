import json
from pathlib import Path

import pytest

from notegraph.domain.note import Note
from notegraph.domain.relationships import Edge, Link
from notegraph.errors import NoteNotFoundError, StoreError
from notegraph.stores.local_db import LocalGraphStore


@pytest.fixture
def link() -> Link:
    return Link(id="l1", source_note_id="oceans", target_note_id="whales", target_title="Whales")


@pytest.fixture
def edge() -> Edge:
    return Edge(id="e1", source="oceans", target="whales")


def test_find_note_by_title_is_case_insensitive(store: LocalGraphStore) -> None:
    assert store.find_note_by_title("  whales ").id == "whales"
    assert store.find_note_by_title("Krill") is None
    assert store.find_note_by_title("") is None


def test_link_lookups(store: LocalGraphStore, link: Link) -> None:
    store.add_link(link)
    store.add_link(Link(id="l2", source_note_id="rocks", target_title="Krill"))

    assert [found.id for found in store.get_links_from("oceans")] == ["l1"]
    assert [found.id for found in store.get_links_to("whales")] == ["l1"]
    assert [found.id for found in store.get_links_by_target_title("krill")] == ["l2"]


def test_duplicate_insert_is_rejected(store: LocalGraphStore, link: Link) -> None:
    store.add_link(link)
    with pytest.raises(StoreError):
        store.add_link(link)


def test_update_missing_edge_is_rejected(store: LocalGraphStore, edge: Edge) -> None:
    with pytest.raises(StoreError):
        store.update_edge(edge)


def test_find_edge_between_either_direction(store: LocalGraphStore, edge: Edge) -> None:
    store.add_edge(edge)

    assert store.find_edge_between("whales", "oceans").id == "e1"
    assert store.find_edge_between("whales", "rocks") is None


def test_stored_objects_are_copies(store: LocalGraphStore, link: Link) -> None:
    store.add_link(link)
    link.target_title = "Changed"

    assert store.get_links_from("oceans")[0].target_title == "Whales"


def test_transaction_rolls_back_on_failure(store: LocalGraphStore, link: Link, edge: Edge) -> None:
    with pytest.raises(StoreError):
        with store.transaction():
            store.add_link(link)
            store.add_edge(edge)
            raise RuntimeError("boom")

    assert store.get_links_from("oceans") == []
    assert store.get_edges() == []


def test_transaction_reraises_domain_errors_unchanged(store: LocalGraphStore, link: Link) -> None:
    with pytest.raises(NoteNotFoundError):
        with store.transaction():
            store.add_link(link)
            raise NoteNotFoundError("missing")

    assert store.get_links_from("oceans") == []


def test_nested_transactions_commit_together(store: LocalGraphStore, link: Link, edge: Edge) -> None:
    with pytest.raises(StoreError):
        with store.transaction():
            with store.transaction():
                store.add_link(link)
            store.add_edge(edge)
            store.add_edge(edge)

    assert store.get_links_from("oceans") == []
    assert store.get_edges() == []


def test_commit_writes_file_and_reloads(temp_dir: Path, test_notes: dict[str, Note], link: Link) -> None:
    path = temp_dir / "graph.json"
    store = LocalGraphStore(path)
    for note in test_notes.values():
        store.upsert_note(note)
    store.add_link(link)

    data = json.loads(path.read_text())
    assert set(data) == {"notes", "links", "edges"}
    assert set(data["notes"]) == {"oceans", "whales", "rocks"}

    reloaded = LocalGraphStore(path)
    assert reloaded.get_note("whales") == test_notes["whales"]
    assert reloaded.get_links_to("whales")[0].id == "l1"


def test_failed_transaction_is_not_written(temp_dir: Path, link: Link) -> None:
    path = temp_dir / "graph.json"
    store = LocalGraphStore(path)
    store.upsert_note(Note(id="oceans", title="Oceans"))

    with pytest.raises(StoreError):
        with store.transaction():
            store.add_link(link)
            raise RuntimeError("boom")

    assert json.loads(path.read_text())["links"] == {}


def test_save_without_path_raises() -> None:
    with pytest.raises(ValueError):
        LocalGraphStore().save()
