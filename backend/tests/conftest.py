"""Pytest configuration and shared fixtures."""

import random
from datetime import UTC, date, datetime, timedelta

import pytest

from mindgraph.learning_engine.constants import ItemType
from mindgraph.learning_engine.contracts import (
    EngineSnapshot,
    GraphNode,
    GraphSettings,
    GraphSnapshot,
    RevisionItem,
)
from tests.helpers.factories import make_edge, make_item

TODAY = date(2026, 3, 10)
NOW = datetime(2026, 3, 10, 9, 30, tzinfo=UTC)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so jittered schedules are reproducible."""
    return random.Random(1234)


@pytest.fixture
def graph_settings() -> GraphSettings:
    """Balanced preset with jitter off."""
    return GraphSettings.from_preset("balanced", jitter_enabled=False)


@pytest.fixture
def sample_items() -> list[RevisionItem]:
    """One overdue, two due today (problem + learning), one future, one completed."""
    return [
        make_item(1, TODAY - timedelta(days=2)),
        make_item(2, TODAY),
        make_item(3, TODAY, item_type=ItemType.LEARNING),
        make_item(4, TODAY + timedelta(days=3)),
        make_item(5, TODAY - timedelta(days=1), is_completed=True),
    ]


@pytest.fixture
def chain_graph() -> GraphSnapshot:
    """A - B - C chain, all at strength 0.5, full-weight edges."""
    return GraphSnapshot(
        nodes=[
            GraphNode(id="A", title="Arrays"),
            GraphNode(id="B", title="Hashing"),
            GraphNode(id="C", title="Hash Maps"),
        ],
        edges=[
            make_edge("e1", "A", "B"),
            make_edge("e2", "B", "C"),
        ],
    )


@pytest.fixture
def engine_snapshot(sample_items, chain_graph, graph_settings) -> EngineSnapshot:
    return EngineSnapshot(items=sample_items, graph=chain_graph, settings=graph_settings)
