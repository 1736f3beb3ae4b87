"""
Learning Engine Configuration - Central Constants Registry.

All constants used by the scheduling, classification and propagation algorithms
MUST be defined here with proper provenance. No magic numbers in algorithm code.

Each constant includes:
- value: The actual constant value
- source: Where the value comes from (product setting, heuristic, paper)
- notes: Rationale and context
- validated: Whether the value has been validated against its source
"""

import math
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SourcedValue:
    """
    A constant value with documented provenance.

    All learning algorithm constants must use this type to enforce documentation.
    """

    value: Any
    source: str
    notes: str = ""
    validated: bool = False

    def __post_init__(self):
        if not self.source or self.source.strip() == "":
            raise ValueError(f"SourcedValue must have non-empty source. Got: {self.source}")


# =============================================================================
# Presets & Graph Settings Defaults
# =============================================================================

PRESETS = SourcedValue(
    value={
        "gentle": {"s_max": 240.0, "g_factor": 1.1},
        "balanced": {"s_max": 180.0, "g_factor": 1.0},
        "intensive": {"s_max": 120.0, "g_factor": 0.9},
    },
    source="MindGraph settings panel presets (gentle/balanced/intensive)",
    notes="Presets only seed s_max/g_factor; explicit overrides always win.",
    validated=True,
)

DEFAULT_PRESET = SourcedValue(
    value="balanced",
    source="MindGraph settings panel default",
    validated=True,
)

DEFAULT_PROPAGATION_DEPTH = SourcedValue(
    value=2,
    source="MindGraph settings panel default",
    notes="Hop limit for review influence on neighbouring nodes.",
    validated=True,
)

DEFAULT_HORIZON_DAYS = SourcedValue(
    value=14,
    source="MindGraph settings panel default + revision queue request (horizonDays=14)",
    validated=True,
)

DEFAULT_WEAK_THRESHOLD = SourcedValue(
    value=0.4,
    source="MindGraph settings panel default",
    notes="Strength below which a node is considered weak.",
    validated=True,
)

# =============================================================================
# Strength Scale
# =============================================================================

DEFAULT_STRENGTH = SourcedValue(
    value=0.5,
    source="Node creation default strength",
    notes="A fresh node sits at 0.5, which the classifier must not read as half-mastered.",
    validated=True,
)

LEGACY_PERCENT_DIVISOR = SourcedValue(
    value=100.0,
    source="Legacy strength rows stored as 0-100 percentages",
    validated=True,
)

MASTERY_SCALE_MIN = SourcedValue(value=1.0, source="1-5 mastery rating scale", validated=True)
MASTERY_SCALE_MAX = SourcedValue(value=5.0, source="1-5 mastery rating scale", validated=True)

# Classifier tier upper bounds (exclusive), evaluated in order
TIER_NEEDS_WORK_MAX = SourcedValue(value=0.3, source="Strength display tiers", validated=True)
TIER_IN_PROGRESS_MAX = SourcedValue(value=0.6, source="Strength display tiers", validated=True)
TIER_GOOD_MAX = SourcedValue(value=0.8, source="Strength display tiers", validated=True)

# =============================================================================
# Interval Scheduler
# =============================================================================

SEED_STABILITY_DAYS = SourcedValue(
    value={1: 1.0, 2: 1.0, 3: 2.0, 4: 3.0, 5: 5.0},
    source="Heuristic first-review stabilities, shaped after FSRS initial stabilities (S0 per rating)",
    notes="First-ever review derives stability from the rating alone. "
    "FSRS-6 defaults (0.41, 1.18, 3.13, 15.5 for 4 grades) are flattened for a 5-point scale.",
    validated=False,
)

RATING_GAIN = SourcedValue(
    value={3: 1.0, 4: 1.5, 5: 2.0},
    source="Heuristic growth gains for successful recall",
    notes="next_stability = stability * (1 + g_factor * gain). "
    "Rating 3 keeps pace (doubling at g=1), 4-5 accelerate.",
    validated=False,
)

HARD_FAIL_SHRINK = SourcedValue(
    value=0.5,
    source="Heuristic lapse penalty for rating 2",
    notes="Rating 2 halves stability; rating 1 resets it to the rating-1 seed.",
    validated=False,
)

MIN_STABILITY_DAYS = SourcedValue(
    value=1.0,
    source="Scheduler floor: reviews are scheduled in whole days",
    validated=True,
)

FAILED_INTERVAL_DAYS = SourcedValue(
    value=1,
    source="Failed recall goes back to near-term review (next day)",
    validated=True,
)

MIN_SUCCESS_INTERVAL_DAYS = SourcedValue(
    value=2,
    source="Successful recall must be scheduled strictly later than a failed one",
    notes="Keeps ratings 1-2 strictly sooner than 4-5 whenever s_max >= 2.",
    validated=True,
)

JITTER_FRACTION = SourcedValue(
    value=0.10,
    source="Due-date clustering mitigation: +/-10% uniform jitter",
    notes="Applied to successful intervals only; failed reviews stay at the next day.",
    validated=True,
)

FIRST_REVISION_DELAY_DAYS = SourcedValue(
    value=1,
    source="New revision items are first due the day after they are created",
    validated=False,
)

# =============================================================================
# Graph Propagation
# =============================================================================

RATING_DELTA_STEP = SourcedValue(
    value=0.1,
    source="Heuristic: strength change per rating point away from neutral (3)",
    notes="rating_delta = (rating - 3) * step, so 5 -> +0.2 and 1 -> -0.2.",
    validated=False,
)

NEUTRAL_RATING = SourcedValue(value=3, source="Midpoint of the 1-5 rating scale", validated=True)

PROPAGATION_DECAY = SourcedValue(
    value=0.5,
    source="Geometric attenuation: influence halves per hop",
    notes="decay(d) = PROPAGATION_DECAY ** d for hop distance d >= 1.",
    validated=False,
)

# =============================================================================
# Revision Queue Priority
# =============================================================================

PRIORITY_WEIGHTS = SourcedValue(
    value={
        "is_due": 100.0,
        "is_predicted_weak": 50.0,
        "strength_inverse": 30.0,
        "status_due": 20.0,
        "status_stale": 10.0,
    },
    source="MindGraph revision queue ordering (getNodePriority)",
    validated=True,
)

STALE_AFTER_DAYS = SourcedValue(
    value=30,
    source="Heuristic: a node unvisited for a month is stale",
    notes="Used only when the node carries no externally computed status.",
    validated=False,
)

FORGETTING_CURVE_FACTOR = SourcedValue(
    value=9.0,
    source="Engine heuristic: hyperbolic retention decay R(t) = 1 / (1 + t / (k * S)) with k = 9",
    notes="Retention halves after k * stability days. Used to predict the day a node "
    "decays below the weak threshold; not fitted to review data.",
    validated=False,
)

MAX_PREDICTION_DAYS = SourcedValue(
    value=3650,
    source="Sanity cap: predictions beyond ten years are not meaningful",
    validated=False,
)


# =============================================================================
# Validation Functions
# =============================================================================


def validate_all_constants():
    """
    Validate all constants at import time.

    Raises:
        ValueError: If any constant fails validation
    """
    errors = []

    for name, preset in PRESETS.value.items():
        if preset["s_max"] < MIN_SUCCESS_INTERVAL_DAYS.value or preset["g_factor"] <= 0:
            errors.append(f"Preset {name} must have s_max >= {MIN_SUCCESS_INTERVAL_DAYS.value} and positive g_factor")

    if DEFAULT_PRESET.value not in PRESETS.value:
        errors.append(f"DEFAULT_PRESET {DEFAULT_PRESET.value} is not a known preset")

    if sorted(SEED_STABILITY_DAYS.value) != [1, 2, 3, 4, 5]:
        errors.append("SEED_STABILITY_DAYS must define ratings 1..5")

    if sorted(RATING_GAIN.value) != [3, 4, 5]:
        errors.append("RATING_GAIN must define ratings 3..5")

    gains = [RATING_GAIN.value[r] for r in (3, 4, 5)]
    if gains != sorted(gains):
        errors.append("RATING_GAIN must be non-decreasing in rating")

    if not (0 < HARD_FAIL_SHRINK.value < 1):
        errors.append(f"HARD_FAIL_SHRINK must be in (0, 1), got {HARD_FAIL_SHRINK.value}")

    if FAILED_INTERVAL_DAYS.value >= MIN_SUCCESS_INTERVAL_DAYS.value:
        errors.append("FAILED_INTERVAL_DAYS must be < MIN_SUCCESS_INTERVAL_DAYS")

    if not (0 <= JITTER_FRACTION.value < 1):
        errors.append(f"JITTER_FRACTION must be in [0, 1), got {JITTER_FRACTION.value}")

    if not (0 < PROPAGATION_DECAY.value < 1):
        errors.append(f"PROPAGATION_DECAY must be in (0, 1), got {PROPAGATION_DECAY.value}")

    if not (
        0 < TIER_NEEDS_WORK_MAX.value < TIER_IN_PROGRESS_MAX.value < TIER_GOOD_MAX.value <= 1
    ):
        errors.append("Strength tier bounds must be increasing within (0, 1]")

    if not math.isfinite(FORGETTING_CURVE_FACTOR.value) or FORGETTING_CURVE_FACTOR.value <= 0:
        errors.append("FORGETTING_CURVE_FACTOR must be positive")

    if errors:
        raise ValueError("Constant validation failed:\n" + "\n".join(f"  - {e}" for e in errors))


# Validate on import
validate_all_constants()


# =============================================================================
# Convenience Accessors
# =============================================================================


def get_preset_defaults(preset: str) -> dict:
    """Get s_max/g_factor defaults for a preset name."""
    return dict(PRESETS.value[preset])


def get_priority_weights() -> dict:
    """Get revision queue priority weights as a dict."""
    return dict(PRIORITY_WEIGHTS.value)
