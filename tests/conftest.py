import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from notegraph.api import create_app
from notegraph.domain.note import Note
from notegraph.events import ChangeEvent, ChangeNotifier
from notegraph.stores.local_db import LocalGraphStore
from tests.fakes import FakeTextCompletion

NOW = 1_700_000_000.0
DAY = 60 * 60 * 24


@pytest.fixture
def test_notes() -> dict[str, Note]:
    return {
        "oceans": Note(
            id="oceans",
            title="Oceans",
            content="<p>Oceans cover most of the planet and are home to whales.</p>",
            tags=["marine"],
            created=NOW - 3 * DAY,
            modified=NOW - 2 * DAY,
        ),
        "whales": Note(
            id="whales",
            title="Whales",
            content="<p>Whales are large marine mammals that live in every ocean.</p>",
            tags=["marine", "mammal"],
            created=NOW - 3 * DAY,
            modified=NOW - DAY,
        ),
        "rocks": Note(
            id="rocks",
            title="Rocks",
            content="<p>Igneous rocks form when magma cools.</p>",
            tags=["geology"],
            created=NOW - 30 * DAY,
            modified=NOW - 20 * DAY,
        ),
    }


@pytest.fixture
def store(test_notes: dict[str, Note]) -> LocalGraphStore:
    return LocalGraphStore.from_data(notes=test_notes)


@pytest.fixture
def notifier() -> ChangeNotifier:
    return ChangeNotifier()


@pytest.fixture
def events(notifier: ChangeNotifier) -> list[ChangeEvent]:
    """Every event emitted through the notifier fixture, in order."""
    received: list[ChangeEvent] = []
    for name in ("note-saved", "note-deleted", "links-changed", "edges-changed", "create-wikilink"):
        notifier.subscribe(name, received.append)
    return received


@pytest.fixture
def fake_llm() -> FakeTextCompletion:
    return FakeTextCompletion(
        responses=['[{"source": "oceans", "target": "whales", "confidence": 0.9}]']
    )


@pytest.fixture(autouse=True)
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Override settings for testing."""
    monkeypatch.setattr("notegraph.config.settings.auth_username", "admin")
    monkeypatch.setattr("notegraph.config.settings.auth_password", "password")


@pytest.fixture
def test_client(store: LocalGraphStore, fake_llm: FakeTextCompletion) -> TestClient:
    """Create test client with an in-memory store and a fake language model."""
    app = create_app(store=store, llm=fake_llm)
    return TestClient(app)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)
