"""Strength classification into display tiers."""

from mindgraph.learning_engine.config import (
    DEFAULT_STRENGTH,
    TIER_GOOD_MAX,
    TIER_IN_PROGRESS_MAX,
    TIER_NEEDS_WORK_MAX,
)
from mindgraph.learning_engine.constants import MasteryTier
from mindgraph.learning_engine.contracts import GraphNode, StrengthClassification
from mindgraph.learning_engine.mastery.normalizer import format_strength, normalize_strength


def has_node_been_studied(node: GraphNode, review_count: int | None = None) -> bool:
    """
    Determine whether a node has any study history.

    A fresh node defaults to 0.5 strength, which on its own cannot be told
    apart from genuine half-mastery.

    Args:
        node: Graph node
        review_count: Review count from the review log, if the caller has it

    Returns:
        True if the node has linked artifacts, reviews, a non-default strength,
        or has been visited
    """
    if node.artifact_count > 0:
        return True
    reviews = node.review_count if review_count is None else review_count
    if reviews > 0:
        return True
    if node.strength != DEFAULT_STRENGTH.value:
        return True
    return node.last_visited is not None


def classify_strength(strength: float, has_been_studied: bool = False) -> StrengthClassification:
    """
    Map a strength value and study flag to a display tier.

    Rules are evaluated in order; the first match wins:
    1. Not studied and strength == 0.5 -> NOT_STUDIED (numeric hidden)
    2. Studied and < 0.3 -> NEEDS_WORK
    3. Studied and < 0.6 -> IN_PROGRESS
    4. Studied and < 0.8 -> GOOD
    5. Studied and >= 0.8 -> MASTERED
    6. Otherwise -> RAW percentage

    Args:
        strength: Raw or normalized strength
        has_been_studied: Whether the node has study history

    Returns:
        StrengthClassification
    """
    normalized = normalize_strength(strength)
    percent = format_strength(normalized)

    if not has_been_studied and normalized == DEFAULT_STRENGTH.value:
        return StrengthClassification(
            tier=MasteryTier.NOT_STUDIED,
            display="Not Studied",
            color_semantic="neutral",
            show_numeric=False,
            description="This concept hasn't been reviewed yet",
        )

    if has_been_studied and normalized < TIER_NEEDS_WORK_MAX.value:
        return StrengthClassification(
            tier=MasteryTier.NEEDS_WORK,
            display="Needs Work",
            color_semantic="danger",
            show_numeric=True,
            description=f"{percent} mastery - needs more practice",
        )

    if has_been_studied and normalized < TIER_IN_PROGRESS_MAX.value:
        return StrengthClassification(
            tier=MasteryTier.IN_PROGRESS,
            display="In Progress",
            color_semantic="warning",
            show_numeric=True,
            description=f"{percent} mastery - making progress",
        )

    if has_been_studied and normalized < TIER_GOOD_MAX.value:
        return StrengthClassification(
            tier=MasteryTier.GOOD,
            display="Good",
            color_semantic="info",
            show_numeric=True,
            description=f"{percent} mastery - well understood",
        )

    if has_been_studied:
        return StrengthClassification(
            tier=MasteryTier.MASTERED,
            display="Mastered",
            color_semantic="success",
            show_numeric=True,
            description=f"{percent} mastery - excellent understanding",
        )

    return StrengthClassification(
        tier=MasteryTier.RAW,
        display=percent,
        color_semantic="default",
        show_numeric=True,
        description=f"{percent} mastery",
    )


def classify_node(node: GraphNode, review_count: int | None = None) -> StrengthClassification:
    """Classify a node using its own study history."""
    return classify_strength(node.strength, has_node_been_studied(node, review_count))


def format_strength_smart(strength: float, node: GraphNode | None = None) -> str:
    """
    Tier label with percentage when a node is given, plain percentage otherwise.

    Examples: 'Not Studied', 'Good (72%)', '50%'.
    """
    if node is None:
        return format_strength(strength)
    classification = classify_strength(strength, has_node_been_studied(node))
    if classification.show_numeric and classification.tier is not MasteryTier.RAW:
        return f"{classification.display} ({format_strength(strength)})"
    return classification.display
