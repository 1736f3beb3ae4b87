"""Strength normalization and mastery tier classification."""

from mindgraph.learning_engine.mastery.normalizer import (
    clamp_strength,
    format_strength,
    ingest_strength,
    normalize_strength,
)

__all__ = [
    "clamp_strength",
    "format_strength",
    "ingest_strength",
    "normalize_strength",
]
