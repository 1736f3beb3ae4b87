"""Revision scheduling, lifecycle and aggregation."""

from mindgraph.learning_engine.revision.aggregator import (
    build_agenda,
    build_calendar,
    build_queue,
    compute_stats,
)
from mindgraph.learning_engine.revision.lifecycle import (
    complete_revision,
    create_revision_item,
    revision_state,
)
from mindgraph.learning_engine.revision.scheduler import schedule_review

__all__ = [
    "build_agenda",
    "build_calendar",
    "build_queue",
    "complete_revision",
    "compute_stats",
    "create_revision_item",
    "revision_state",
    "schedule_review",
]
