"""Revision queue priority for graph nodes."""

import hashlib
import logging
import math
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable

from mindgraph.learning_engine.config import (
    FORGETTING_CURVE_FACTOR,
    MAX_PREDICTION_DAYS,
    STALE_AFTER_DAYS,
    get_priority_weights,
)
from mindgraph.learning_engine.constants import NodeStatus
from mindgraph.learning_engine.contracts import GraphNode, GraphSettings, Identifier, local_date
from mindgraph.learning_engine.mastery.normalizer import normalize_strength

logger = logging.getLogger(__name__)

PriorityFn = Callable[[GraphNode], float]


def retrievability(elapsed_days: float, stability: float) -> float:
    """Hyperbolic retention decay R(t) = 1 / (1 + t / (k * S)); halves at t = k * S."""
    if elapsed_days <= 0:
        return 1.0
    return 1.0 / (1.0 + elapsed_days / (FORGETTING_CURVE_FACTOR.value * stability))


def predict_weak_date(
    node: GraphNode,
    weak_threshold: float,
    tz: tzinfo | None = None,
) -> date | None:
    """
    Predict the first day a node's strength decays below the weak threshold.

    Decayed strength is ``strength * R(t)`` measured from the last visit.
    An explicit ``predicted_weak_date`` on the node wins.

    Args:
        node: Graph node
        weak_threshold: Strength cutoff for "weak"
        tz: User timezone

    Returns:
        Predicted day, or None when the node has no stability/visit history
        or can never become weak
    """
    if node.predicted_weak_date is not None:
        return local_date(node.predicted_weak_date, tz)
    if node.stability is None or node.stability <= 0 or node.last_visited is None:
        return None

    anchor = local_date(node.last_visited, tz)
    strength = normalize_strength(node.strength)
    if strength <= weak_threshold:
        return anchor
    if weak_threshold <= 0:
        return None

    # strength / (1 + t/(9S)) < w  <=>  t > 9S (strength/w - 1)
    days = FORGETTING_CURVE_FACTOR.value * node.stability * (strength / weak_threshold - 1.0)
    days = min(math.floor(days) + 1, MAX_PREDICTION_DAYS.value)
    return anchor + timedelta(days=days)


def is_node_due(node: GraphNode, today: date, tz: tzinfo | None = None) -> bool:
    if node.due_date is None:
        return False
    return local_date(node.due_date, tz) <= today


def is_node_predicted_weak(
    node: GraphNode,
    today: date,
    settings: GraphSettings,
    tz: tzinfo | None = None,
) -> bool:
    weak_date = predict_weak_date(node, settings.weak_threshold, tz)
    if weak_date is None:
        return False
    return weak_date <= today + timedelta(days=settings.horizon_days)


def node_status(node: GraphNode, today: date, tz: tzinfo | None = None) -> NodeStatus:
    """
    Node metric status; an externally computed status wins.

    Derived status: due if the due date has been reached, stale if the node
    has not been visited for STALE_AFTER_DAYS, otherwise ok.
    """
    if node.status is not None:
        return node.status
    if is_node_due(node, today, tz):
        return NodeStatus.DUE
    if node.last_visited is not None:
        idle_days = (today - local_date(node.last_visited, tz)).days
        if idle_days > STALE_AFTER_DAYS.value:
            return NodeStatus.STALE
    return NodeStatus.OK


def node_priority(
    node: GraphNode,
    now: datetime,
    settings: GraphSettings,
    tz: tzinfo | None = None,
) -> float:
    """
    Compute revision priority for a node. Higher = more urgent.

    priority = 100*is_due + 50*is_predicted_weak + 30*(1 - strength) + status_bonus
    with status_bonus 20 for due, 10 for stale.

    Args:
        node: Graph node
        now: Reference time
        settings: Graph settings (horizon_days, weak_threshold)
        tz: User timezone

    Returns:
        Priority score
    """
    weights = get_priority_weights()
    today = local_date(now, tz)

    priority = 0.0
    if is_node_due(node, today, tz):
        priority += weights["is_due"]
    if is_node_predicted_weak(node, today, settings, tz):
        priority += weights["is_predicted_weak"]
    priority += (1.0 - normalize_strength(node.strength)) * weights["strength_inverse"]

    status = node_status(node, today, tz)
    if status is NodeStatus.DUE:
        priority += weights["status_due"]
    elif status is NodeStatus.STALE:
        priority += weights["status_stale"]

    return round(priority, 4)


def priority_input_hash(node: GraphNode, today: date, settings: GraphSettings) -> str:
    """Hash of every input that can change a node's priority."""
    components = [
        node.model_dump_json(),
        today.isoformat(),
        str(settings.horizon_days),
        str(settings.weak_threshold),
    ]
    combined = "|".join(components)
    return hashlib.sha256(combined.encode()).hexdigest()[:16]


class PriorityCache:
    """
    Explicit priority memo for large queues.

    Entries are keyed by node id and validated against a hash of the inputs,
    so a changed node, day or setting recomputes instead of serving stale data.
    """

    def __init__(self):
        self._entries: dict[Identifier, tuple[str, float]] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get_or_compute(
        self,
        node: GraphNode,
        now: datetime,
        settings: GraphSettings,
        tz: tzinfo | None = None,
    ) -> float:
        today = local_date(now, tz)
        key_hash = priority_input_hash(node, today, settings)
        cached = self._entries.get(node.id)
        if cached is not None and cached[0] == key_hash:
            self.hits += 1
            return cached[1]

        self.misses += 1
        priority = node_priority(node, now, settings, tz)
        self._entries[node.id] = (key_hash, priority)
        return priority

    def invalidate(self, node_id: Identifier) -> None:
        self._entries.pop(node_id, None)

    def clear(self) -> None:
        self._entries.clear()
