from tests.fakes.failing_store import FailingGraphStore
from tests.fakes.fake_llm import FakeTextCompletion

__all__ = ["FailingGraphStore", "FakeTextCompletion"]
