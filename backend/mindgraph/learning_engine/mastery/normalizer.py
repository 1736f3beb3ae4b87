"""
Strength normalization - canonical [0, 1] mastery scale.

Strength arrives in three shapes: 0..1 fractions, legacy 0..100 percentages,
and the 1..5 mastery rating scale. Internal logic only ever sees 0..1;
conversion happens here, at ingestion and egress.
"""

import math

from mindgraph.learning_engine.config import (
    LEGACY_PERCENT_DIVISOR,
    MASTERY_SCALE_MAX,
    MASTERY_SCALE_MIN,
)
from mindgraph.learning_engine.constants import StrengthScale


def clamp_strength(value: float) -> float:
    """Clamp a value to [0, 1]; NaN maps to 0."""
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


def normalize_strength(raw: float) -> float:
    """
    Normalize a raw strength value to the 0..1 range.

    Values above 1 are legacy percentages and are divided by 100; everything is
    then clamped. Never raises, and normalize(normalize(x)) == normalize(x).

    Args:
        raw: Raw strength (0..1 or legacy 0..100)

    Returns:
        Normalized strength in [0, 1]
    """
    raw = float(raw)
    if math.isnan(raw):
        return 0.0
    if raw > 1:
        return clamp_strength(raw / LEGACY_PERCENT_DIVISOR.value)
    return clamp_strength(raw)


def from_mastery_scale(value: float) -> float:
    """Map a 1..5 mastery value onto 0..1."""
    lo, hi = MASTERY_SCALE_MIN.value, MASTERY_SCALE_MAX.value
    return clamp_strength((float(value) - lo) / (hi - lo))


def to_mastery_scale(strength: float) -> float:
    """Map a 0..1 strength onto the 1..5 mastery scale."""
    lo, hi = MASTERY_SCALE_MIN.value, MASTERY_SCALE_MAX.value
    return lo + normalize_strength(strength) * (hi - lo)


def ingest_strength(raw: float, scale: StrengthScale | str = StrengthScale.UNIT) -> float:
    """
    Convert an external strength representation to the canonical scale.

    Args:
        raw: Value as stored by the source
        scale: Which representation ``raw`` uses

    Returns:
        Strength in [0, 1]
    """
    scale = StrengthScale(scale)
    if scale is StrengthScale.MASTERY_5:
        return from_mastery_scale(raw)
    if scale is StrengthScale.PERCENT:
        return clamp_strength(float(raw) / LEGACY_PERCENT_DIVISOR.value)
    return normalize_strength(raw)


def _whole_percent(value: float) -> int:
    # Half up: 0.125 shows as 13%, not banker's 12%
    return math.floor(value * 100 + 0.5)


def format_strength(raw: float) -> str:
    """Format strength as a whole percentage, e.g. '65%'."""
    return f"{_whole_percent(normalize_strength(raw))}%"


def format_strength_detailed(raw: float) -> dict:
    """Percentage string plus the normalized 0..1 value."""
    normalized = normalize_strength(raw)
    return {"percent": f"{_whole_percent(normalized)}%", "value01": normalized}
