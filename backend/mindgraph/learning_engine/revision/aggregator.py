"""Revision aggregation: agenda, calendar, priority queue and dashboard stats."""

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable

from mindgraph.core.errors import InvalidDateRange
from mindgraph.learning_engine.constants import ItemType
from mindgraph.learning_engine.contracts import (
    AgendaDay,
    GraphNode,
    GraphSettings,
    QueueEntry,
    Review,
    RevisionItem,
    RevisionStats,
    id_sort_key,
    local_date,
)
from mindgraph.learning_engine.revision.priority import (
    PriorityCache,
    PriorityFn,
    is_node_due,
    is_node_predicted_weak,
    node_priority,
)

logger = logging.getLogger(__name__)


def _require_range(start: date, end: date) -> None:
    if end < start:
        raise InvalidDateRange(
            f"End date {end} is before start date {start}",
            details={"from": start.isoformat(), "to": end.isoformat()},
        )


def _bucket_pending(
    items: Iterable[RevisionItem],
    start: date,
    end: date,
    tz: tzinfo | None,
) -> dict[date, list[RevisionItem]]:
    buckets: dict[date, list[RevisionItem]] = defaultdict(list)
    for item in items:
        if item.is_completed:
            continue
        day = local_date(item.next_revision_date, tz)
        if start <= day <= end:
            buckets[day].append(item)
    return buckets


def build_agenda(
    items: Iterable[RevisionItem],
    start: date,
    end: date,
    tz: tzinfo | None = None,
    include_empty: bool = False,
) -> list[AgendaDay]:
    """
    Bucket pending revision items by due day.

    Args:
        items: Revision items
        start: First day (inclusive)
        end: Last day (inclusive)
        tz: User timezone used to turn due timestamps into days
        include_empty: Emit days with no items as empty entries

    Returns:
        AgendaDay list in ascending date order

    Raises:
        InvalidDateRange: If end < start
    """
    _require_range(start, end)
    buckets = _bucket_pending(items, start, end, tz)

    if include_empty:
        days = [start + timedelta(days=offset) for offset in range((end - start).days + 1)]
    else:
        days = sorted(buckets)

    agenda = []
    for day in days:
        day_items = sorted(buckets.get(day, []), key=lambda i: id_sort_key(i.id))
        agenda.append(AgendaDay(day=day, items=day_items, total_items=len(day_items)))
    return agenda


def items_for_date(
    items: Iterable[RevisionItem],
    day: date,
    tz: tzinfo | None = None,
) -> list[RevisionItem]:
    """Pending items due exactly on ``day``."""
    return [
        item
        for item in items
        if not item.is_completed and local_date(item.next_revision_date, tz) == day
    ]


def build_calendar(
    items: Iterable[RevisionItem],
    start: date,
    end: date,
    tz: tzinfo | None = None,
) -> dict[str, dict[str, int]]:
    """
    Per-day pending counts split by item type, for the calendar view.

    Returns:
        {"2026-01-21": {"problem": 2, "learning": 1}, ...} for non-empty days

    Raises:
        InvalidDateRange: If end < start
    """
    _require_range(start, end)
    calendar: dict[str, dict[str, int]] = {}
    for day, day_items in sorted(_bucket_pending(items, start, end, tz).items()):
        counts = {item_type.value: 0 for item_type in ItemType}
        for item in day_items:
            counts[item.item_type.value] += 1
        calendar[day.isoformat()] = counts
    return calendar


def build_queue(
    nodes: Iterable[GraphNode],
    priority_fn: PriorityFn | None = None,
    *,
    now: datetime,
    settings: GraphSettings,
    tz: tzinfo | None = None,
    limit: int | None = None,
    within_horizon: bool = False,
    cache: PriorityCache | None = None,
) -> list[QueueEntry]:
    """
    Rank nodes for revision, most urgent first.

    Ordering is total: priority descending, then node id ascending.

    Args:
        nodes: Graph nodes to rank
        priority_fn: Custom scoring; defaults to node_priority
        now: Reference time
        settings: Graph settings (horizon_days, weak_threshold)
        tz: User timezone
        limit: Maximum number of entries to return
        within_horizon: Keep only nodes due or predicted weak within horizon_days
        cache: Optional PriorityCache used with the default scoring

    Returns:
        Ordered QueueEntry list
    """
    settings.ensure_valid()
    today = local_date(now, tz)

    score = priority_fn
    if score is None and cache is not None:
        score = lambda node: cache.get_or_compute(node, now, settings, tz)  # noqa: E731
    elif score is None:
        score = lambda node: node_priority(node, now, settings, tz)  # noqa: E731

    horizon_end = today + timedelta(days=settings.horizon_days)
    entries = []
    for node in nodes:
        if within_horizon:
            due_soon = node.due_date is not None and local_date(node.due_date, tz) <= horizon_end
            if not (due_soon or is_node_due(node, today, tz) or is_node_predicted_weak(node, today, settings, tz)):
                continue
        entries.append(QueueEntry(node=node, priority=score(node)))

    entries.sort(key=lambda e: (-e.priority, id_sort_key(e.node.id)))
    if limit is not None:
        entries = entries[: max(0, limit)]

    logger.debug(f"Revision queue built: {len(entries)} entries (horizon {settings.horizon_days}d)")
    return entries


def completion_days(
    items: Iterable[RevisionItem],
    reviews: Iterable[Review] = (),
    tz: tzinfo | None = None,
) -> set[date]:
    """Calendar days with at least one completion."""
    days = {local_date(item.last_completed_at, tz) for item in items if item.last_completed_at is not None}
    days.update(local_date(review.reviewed_at, tz) for review in reviews)
    return days


def compute_current_streak(days_with_completion: set[date], today: date) -> int:
    """Consecutive days with a completion, walking back from today."""
    streak = 0
    day = today
    while day in days_with_completion:
        streak += 1
        day -= timedelta(days=1)
    return streak


def compute_stats(
    items: Iterable[RevisionItem],
    today: date,
    reviews: Iterable[Review] = (),
    tz: tzinfo | None = None,
) -> RevisionStats:
    """
    Dashboard counters.

    - overdue: incomplete items due strictly before today
    - upcoming: incomplete items due today or later
    - current_streak: consecutive completion days ending today

    Args:
        items: Revision items
        today: Reference day
        reviews: Review log used for the streak, in addition to item completions
        tz: User timezone

    Returns:
        RevisionStats
    """
    items = list(items)

    completed = 0
    upcoming = 0
    overdue = 0
    for item in items:
        if item.is_completed:
            completed += 1
        elif local_date(item.next_revision_date, tz) < today:
            overdue += 1
        else:
            upcoming += 1

    streak = compute_current_streak(completion_days(items, reviews, tz), today)

    return RevisionStats(
        total_revisions=len(items),
        completed_revisions=completed,
        upcoming_revisions=upcoming,
        overdue_revisions=overdue,
        current_streak=streak,
    )
