"""Shared fixtures. Tracing export is switched off before the package loads."""
import os

os.environ.setdefault("OTEL_ENABLED", "false")

import pytest  # noqa: E402

from feed_ranker.config import EngineConfig  # noqa: E402
from tests.fakes import FakeContentCatalog, FakeInteractionStore  # noqa: E402
from tests.helpers import make_item  # noqa: E402


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def scenario_interactions() -> FakeInteractionStore:
    """V liked A and B; X and Y each liked A and C."""
    store = FakeInteractionStore()
    store.like("V", "A")
    store.like("V", "B")
    store.like("X", "A")
    store.like("X", "C")
    store.like("Y", "A")
    store.like("Y", "C")
    return store


@pytest.fixture
def scenario_catalog(scenario_interactions: FakeInteractionStore) -> FakeContentCatalog:
    """D is 30 minutes old and heavily liked; E is old with no engagement."""
    items = [
        make_item("A", author_id="P", likes=3, text="sunset photography over the harbour"),
        make_item("B", author_id="Q", likes=2, text="street photography in tokyo"),
        make_item("C", author_id="R", likes=2, text="morning coffee ritual"),
        make_item("D", author_id="S", age_hours=0.5, likes=100, text="breaking news today"),
        make_item("E", author_id="T", text="quiet day"),
    ]
    return FakeContentCatalog(items, scenario_interactions)
