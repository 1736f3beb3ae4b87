"""
Interval scheduler - next review date from a 1-5 rating.

Model:
- First review: stability seeded from the rating alone.
- Ratings 1-2 (failed): stability reset (1) or halved (2); review again tomorrow.
- Ratings 3-5: stability *= 1 + g_factor * gain[rating]; 3 keeps pace, 4-5 accelerate.
- Intervals never exceed s_max days; optional +/-10% jitter on successful intervals.
"""

import logging
import math
import random
from datetime import date, timedelta

from mindgraph.core.errors import InvalidCycle, require_rating
from mindgraph.learning_engine.config import (
    FAILED_INTERVAL_DAYS,
    HARD_FAIL_SHRINK,
    JITTER_FRACTION,
    MIN_STABILITY_DAYS,
    MIN_SUCCESS_INTERVAL_DAYS,
    RATING_GAIN,
    SEED_STABILITY_DAYS,
)
from mindgraph.learning_engine.contracts import GraphSettings, ScheduleResult

logger = logging.getLogger(__name__)

_system_rng = random.SystemRandom()


def is_failed_rating(rating: int) -> bool:
    """Ratings 1-2 are treated as failed recall."""
    return rating <= 2


def seed_stability(rating: int) -> float:
    """Stability for a first-ever review, from the rating alone."""
    return float(SEED_STABILITY_DAYS.value[rating])


def growth_factor(rating: int, g_factor: float) -> float:
    """Multiplicative stability growth for a successful review."""
    return 1.0 + g_factor * RATING_GAIN.value[rating]


def reconstruct_stability(current_cycle: int, g_factor: float) -> float:
    """
    Estimate stability for an item that has cycles but no stored stability.

    Compounds rating-3 growth once per completed cycle starting from the
    rating-3 seed.
    """
    return seed_stability(3) * growth_factor(3, g_factor) ** max(0, current_cycle - 1)


def next_stability(
    rating: int,
    current_cycle: int,
    current_stability: float | None,
    settings: GraphSettings,
) -> float:
    """
    Compute the post-review stability (days), capped at s_max.

    Args:
        rating: Validated 1-5 rating
        current_cycle: Completed cycles before this review
        current_stability: Stored stability, None if never computed
        settings: Graph settings

    Returns:
        New stability in days
    """
    if current_stability is not None and (not math.isfinite(current_stability) or current_stability <= 0):
        logger.warning(f"Ignoring invalid stored stability {current_stability}")
        current_stability = None

    if current_stability is None:
        if current_cycle == 0:
            return min(seed_stability(rating), settings.s_max)
        current_stability = reconstruct_stability(current_cycle, settings.g_factor)

    if rating == 1:
        stability = seed_stability(1)
    elif rating == 2:
        stability = max(MIN_STABILITY_DAYS.value, current_stability * HARD_FAIL_SHRINK.value)
    else:
        stability = current_stability * growth_factor(rating, settings.g_factor)

    return min(max(stability, MIN_STABILITY_DAYS.value), settings.s_max)


def compute_interval_days(
    rating: int,
    stability: float,
    settings: GraphSettings,
    rng: random.Random | None = None,
) -> int:
    """
    Turn a stability into a whole-day interval.

    Failed ratings always come back after FAILED_INTERVAL_DAYS. Successful
    ratings are jittered (if enabled), then clamped to
    [MIN_SUCCESS_INTERVAL_DAYS, floor(s_max)]; settings guarantee
    s_max >= MIN_SUCCESS_INTERVAL_DAYS.
    """
    cap = math.floor(settings.s_max)

    if is_failed_rating(rating):
        return FAILED_INTERVAL_DAYS.value

    interval = stability
    if settings.jitter_enabled:
        source = rng or _system_rng
        spread = JITTER_FRACTION.value
        interval *= source.uniform(1.0 - spread, 1.0 + spread)

    days = max(MIN_SUCCESS_INTERVAL_DAYS.value, round(interval))
    return min(days, cap)


def schedule_review(
    rating: int,
    current_cycle: int,
    current_stability: float | None,
    settings: GraphSettings,
    today: date,
    rng: random.Random | None = None,
) -> ScheduleResult:
    """
    Compute the next review for an item or node.

    Args:
        rating: Review rating 1..5
        current_cycle: Completed revision cycles so far (0 for first review)
        current_stability: Stored stability in days, None if never reviewed
        settings: Graph settings (preset / s_max / g_factor / jitter)
        today: Calendar day of the review
        rng: Random source for jitter; an unseeded one is used if omitted

    Returns:
        ScheduleResult with next_cycle, next_stability, interval_days, next_due_date

    Raises:
        InvalidRating: Rating missing or outside 1..5
        InvalidCycle: Negative cycle counter
        ConfigurationError: Invalid settings
    """
    rating = require_rating(rating)
    settings.ensure_valid()
    if current_cycle < 0:
        raise InvalidCycle(
            f"Revision cycle must be >= 0, got {current_cycle}",
            details={"current_cycle": current_cycle},
        )

    stability = next_stability(rating, current_cycle, current_stability, settings)
    interval_days = compute_interval_days(rating, stability, settings, rng)

    return ScheduleResult(
        next_cycle=current_cycle + 1,
        next_stability=round(stability, 4),
        interval_days=interval_days,
        next_due_date=today + timedelta(days=interval_days),
    )


def preview_schedule(
    current_cycle: int,
    current_stability: float | None,
    settings: GraphSettings,
    today: date,
) -> dict[int, ScheduleResult]:
    """
    Schedule outcome for every rating, without jitter.

    Used to show "next review in N days" next to each rating button.
    """
    unjittered = settings.model_copy(update={"jitter_enabled": False})
    return {
        rating: schedule_review(rating, current_cycle, current_stability, unjittered, today)
        for rating in range(1, 6)
    }


def describe_due(due: date, today: date) -> str:
    """Relative description of a due date."""
    diff_days = (due - today).days
    if diff_days < 0:
        return "Overdue"
    if diff_days == 0:
        return "Due today"
    if diff_days == 1:
        return "Due tomorrow"
    return f"Due in {diff_days} days"
