"""
Learning Engine Module.

Spaced-repetition scheduling for tracked artifacts and knowledge-graph nodes:
- Strength normalization and mastery tiers
- Interval scheduling and revision item lifecycle
- Review propagation across the knowledge graph
- Agenda, calendar, queue and dashboard aggregation

All functions are pure over in-memory snapshots; persistence belongs to the caller.
"""

from mindgraph.learning_engine.constants import (
    ItemType,
    NodeStatus,
    NodeType,
    Preset,
    RelationshipType,
    RevisionState,
    SubjectKind,
)
from mindgraph.learning_engine.contracts import (
    EngineSnapshot,
    GraphEdge,
    GraphNode,
    GraphSettings,
    GraphSnapshot,
    RevisionItem,
)
from mindgraph.learning_engine.service import bulk_complete, submit_review

__all__ = [
    # Constants
    "ItemType",
    "NodeStatus",
    "NodeType",
    "Preset",
    "RelationshipType",
    "RevisionState",
    "SubjectKind",
    # Contracts
    "EngineSnapshot",
    "GraphEdge",
    "GraphNode",
    "GraphSettings",
    "GraphSnapshot",
    "RevisionItem",
    # Service
    "bulk_complete",
    "submit_review",
]
