"""Typed contracts for learning engine inputs/outputs.

Records are immutable; engine functions return updated copies. Field names are
snake_case in Python and camelCase on the JSON boundary.
"""

from datetime import date, datetime, tzinfo
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from mindgraph.core.config import default_graph_settings
from mindgraph.core.errors import ConfigurationError, ErrorResponse
from mindgraph.learning_engine.config import (
    DEFAULT_HORIZON_DAYS,
    DEFAULT_PRESET,
    DEFAULT_PROPAGATION_DEPTH,
    DEFAULT_STRENGTH,
    DEFAULT_WEAK_THRESHOLD,
    MIN_SUCCESS_INTERVAL_DAYS,
    PRESETS,
    get_preset_defaults,
)
from mindgraph.learning_engine.constants import (
    ItemType,
    MasteryTier,
    NodeStatus,
    NodeType,
    Preset,
    RelationshipType,
    SubjectKind,
)
from mindgraph.learning_engine.mastery.normalizer import normalize_strength

Identifier = int | str


class EngineModel(BaseModel):
    """Base for all engine records."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_json_dict(self) -> dict[str, Any]:
        """Dump with camelCase keys and JSON-compatible values."""
        return self.model_dump(by_alias=True, mode="json")


def id_sort_key(value: Identifier) -> tuple[int, Any]:
    """Deterministic ordering for mixed int/str identifiers."""
    if isinstance(value, int):
        return (0, value)
    return (1, str(value))


def local_date(value: date | datetime, tz: tzinfo | None = None) -> date:
    """
    Reduce a due date/timestamp to a calendar day.

    Aware datetimes are converted to ``tz`` first; naive datetimes and plain
    dates are taken as already local.
    """
    if isinstance(value, datetime):
        if tz is not None and value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


# ============================================================================
# Settings
# ============================================================================


class GraphSettings(EngineModel):
    """Per-graph scheduler configuration."""

    preset: Preset = Preset(DEFAULT_PRESET.value)
    s_max: float
    g_factor: float
    propagation_depth: int = DEFAULT_PROPAGATION_DEPTH.value
    horizon_days: int = DEFAULT_HORIZON_DAYS.value
    weak_threshold: float = DEFAULT_WEAK_THRESHOLD.value
    jitter_enabled: bool = True

    @model_validator(mode="before")
    @classmethod
    def apply_preset_defaults(cls, data: Any) -> Any:
        """Fill s_max/g_factor from the preset unless explicitly given."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        preset = data.get("preset", DEFAULT_PRESET.value)
        preset_name = preset.value if isinstance(preset, Preset) else str(preset)
        if preset_name in PRESETS.value:
            defaults = get_preset_defaults(preset_name)
            for field, alias in (("s_max", "sMax"), ("g_factor", "gFactor")):
                if data.get(field) is None and data.get(alias) is None:
                    data[field] = defaults[field]
        return data

    @classmethod
    def from_preset(cls, preset: Preset | str = DEFAULT_PRESET.value, **overrides: Any) -> "GraphSettings":
        """Build settings from a preset; keyword overrides always win."""
        return cls(preset=preset, **overrides)

    def with_preset(self, preset: Preset | str) -> "GraphSettings":
        """Switch preset, resetting s_max/g_factor to the preset's defaults."""
        preset = Preset(preset)
        return self.model_copy(update={"preset": preset, **get_preset_defaults(preset.value)})

    def ensure_valid(self) -> "GraphSettings":
        """
        Check settings against their valid domain.

        Raises:
            ConfigurationError: On the first invalid value found
        """
        problems = []
        if not self.s_max >= MIN_SUCCESS_INTERVAL_DAYS.value:
            problems.append(
                f"s_max must be >= {MIN_SUCCESS_INTERVAL_DAYS.value} days, got {self.s_max}"
            )
        if not self.g_factor > 0:
            problems.append(f"g_factor must be > 0, got {self.g_factor}")
        if self.propagation_depth < 0:
            problems.append(f"propagation_depth must be >= 0, got {self.propagation_depth}")
        if self.horizon_days < 0:
            problems.append(f"horizon_days must be >= 0, got {self.horizon_days}")
        if not (0.0 <= self.weak_threshold <= 1.0):
            problems.append(f"weak_threshold must be in [0, 1], got {self.weak_threshold}")
        if problems:
            raise ConfigurationError("; ".join(problems), details={"problems": problems})
        return self


# ============================================================================
# Tracked Data
# ============================================================================


class TrackedArtifact(EngineModel):
    """A solved problem or learning resource."""

    id: Identifier
    title: str
    item_type: ItemType
    category: str | None = None
    created_at: datetime | None = None


class RevisionItem(EngineModel):
    """Schedulable wrapper around a tracked artifact."""

    id: Identifier
    item_type: ItemType
    ref_id: Identifier
    title: str | None = None
    revision_cycle: int = 0
    next_revision_date: date | datetime
    is_completed: bool = False
    last_rating: int | None = None
    stability: float | None = None
    last_completed_at: datetime | None = None


class GraphNode(EngineModel):
    """A concept/skill/topic/resource in the knowledge graph."""

    id: Identifier
    title: str = ""
    type: NodeType = NodeType.CONCEPT
    strength: float = DEFAULT_STRENGTH.value
    last_visited: datetime | None = None
    due_date: date | datetime | None = None
    stability: float | None = None
    review_count: int = 0
    artifact_count: int = 0
    status: NodeStatus | None = None
    predicted_weak_date: date | datetime | None = None

    @field_validator("strength", mode="before")
    @classmethod
    def normalize_incoming_strength(cls, value: Any) -> Any:
        """Canonicalize legacy percentages at the boundary."""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return normalize_strength(value)
        return value


class GraphEdge(EngineModel):
    """Relationship between two nodes (multigraph: duplicates allowed)."""

    id: Identifier
    source_node_id: Identifier
    target_node_id: Identifier
    relationship_type: RelationshipType = RelationshipType.RELATED
    weight: float = Field(default=1.0, ge=0.0, le=1.0)

    @property
    def is_self_loop(self) -> bool:
        return self.source_node_id == self.target_node_id


class GraphSnapshot(EngineModel):
    """Nodes and edges of one graph."""

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)

    def node_map(self) -> dict[Identifier, GraphNode]:
        return {node.id: node for node in self.nodes}

    def get_node(self, node_id: Identifier) -> GraphNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


class Review(EngineModel):
    """Immutable review event."""

    id: str
    subject_id: Identifier
    subject_kind: SubjectKind
    reviewed_at: datetime
    rating: int
    prev_stability: float | None = None
    next_stability: float
    next_due: date


# ============================================================================
# Algorithm Outputs
# ============================================================================


class StrengthClassification(EngineModel):
    """Display tier for a strength value."""

    tier: MasteryTier
    display: str
    color_semantic: str
    show_numeric: bool
    description: str


class ScheduleResult(EngineModel):
    """Interval scheduler output."""

    next_cycle: int
    next_stability: float
    interval_days: int
    next_due_date: date


class PropagationDelta(EngineModel):
    """Strength change for one node after a review."""

    node_id: Identifier
    strength_delta: float
    hops: int


class AgendaDay(EngineModel):
    """Due items bucketed under one calendar day."""

    day: date = Field(alias="date")
    items: list[RevisionItem] = Field(default_factory=list)
    total_items: int = 0


class QueueEntry(EngineModel):
    """A node ranked in the revision queue."""

    node: GraphNode
    priority: float


class RevisionStats(EngineModel):
    """Summary counters for the revision dashboard."""

    total_revisions: int = 0
    completed_revisions: int = 0
    upcoming_revisions: int = 0
    overdue_revisions: int = 0
    current_streak: int = 0


class CompletionResult(EngineModel):
    """Rescheduled item plus the review that caused it."""

    item: RevisionItem
    review: Review


# ============================================================================
# Service Boundary
# ============================================================================


class EngineSnapshot(EngineModel):
    """In-memory snapshot fetched by the caller for one user/graph."""

    items: list[RevisionItem] = Field(default_factory=list)
    graph: GraphSnapshot = Field(default_factory=GraphSnapshot)
    settings: GraphSettings = Field(default_factory=default_graph_settings)


class ReviewSubmission(EngineModel):
    """Review posted for an item or node."""

    subject_id: Identifier
    subject_kind: SubjectKind
    rating: int | None = None


class ReviewOutcome(EngineModel):
    """Everything a review changed; the caller persists it."""

    subject_id: Identifier
    subject_kind: SubjectKind
    review: Review
    item: RevisionItem | None = None
    node: GraphNode | None = None
    node_updates: list[PropagationDelta] = Field(default_factory=list)
    snapshot: EngineSnapshot


class CompletionRequest(EngineModel):
    """One entry of a bulk completion."""

    item_id: Identifier
    rating: int | None = None


class BulkCompletionRequest(EngineModel):
    """Bulk completion payload: {completions: [{itemId, rating}]}."""

    completions: list[CompletionRequest] = Field(default_factory=list)


class BulkCompletionResult(EngineModel):
    """Per-item outcome of a bulk completion."""

    item_id: Identifier
    ok: bool
    new_due_date: date | None = None
    error: ErrorResponse | None = None


class BulkCompletionReport(EngineModel):
    """Bulk completion results plus the updated item list."""

    results: list[BulkCompletionResult] = Field(default_factory=list)
    items: list[RevisionItem] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)
