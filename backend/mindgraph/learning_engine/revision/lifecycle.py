"""
Revision item lifecycle.

    SCHEDULED --(date reached)--> DUE --(rating 1-5)--> COMPLETED --> SCHEDULED ...

COMPLETED is a transition, not a resting state: completing an item always
reschedules it. Items only leave the cycle when their artifact is deleted.
"""

import logging
import random
import uuid
from datetime import date, datetime, timedelta, tzinfo

from mindgraph.core.errors import require_rating
from mindgraph.learning_engine.config import FIRST_REVISION_DELAY_DAYS
from mindgraph.learning_engine.constants import RevisionState, SubjectKind
from mindgraph.learning_engine.contracts import (
    CompletionResult,
    GraphSettings,
    Identifier,
    Review,
    RevisionItem,
    TrackedArtifact,
    local_date,
)
from mindgraph.learning_engine.revision.scheduler import schedule_review

logger = logging.getLogger(__name__)


def revision_state(item: RevisionItem, today: date, tz: tzinfo | None = None) -> RevisionState:
    """
    Derive the lifecycle state of an item.

    Args:
        item: Revision item
        today: Reference day
        tz: User timezone for datetime due dates

    Returns:
        COMPLETED if flagged complete, DUE if the date has been reached,
        otherwise SCHEDULED
    """
    if item.is_completed:
        return RevisionState.COMPLETED
    if local_date(item.next_revision_date, tz) <= today:
        return RevisionState.DUE
    return RevisionState.SCHEDULED


def create_revision_item(
    artifact: TrackedArtifact,
    *,
    today: date,
    item_id: Identifier | None = None,
) -> RevisionItem:
    """
    Wrap an artifact in a new revision item, first due the next day.

    Args:
        artifact: Problem or learning resource being marked for revision
        today: Day the item is created
        item_id: Id to use; a random UUID string if omitted

    Returns:
        New RevisionItem at cycle 0
    """
    return RevisionItem(
        id=item_id if item_id is not None else str(uuid.uuid4()),
        item_type=artifact.item_type,
        ref_id=artifact.id,
        title=artifact.title,
        revision_cycle=0,
        next_revision_date=today + timedelta(days=FIRST_REVISION_DELAY_DAYS.value),
        is_completed=False,
    )


def complete_revision(
    item: RevisionItem,
    rating: int | None,
    settings: GraphSettings,
    *,
    now: datetime,
    tz: tzinfo | None = None,
    rng: random.Random | None = None,
) -> CompletionResult:
    """
    Complete a revision and immediately reschedule it.

    Args:
        item: Item being completed
        rating: Performance rating 1..5
        settings: Graph settings for the scheduler
        now: Completion timestamp
        tz: User timezone; decides which calendar day "today" is
        rng: Random source for jitter

    Returns:
        CompletionResult with the rescheduled item and the review record

    Raises:
        InvalidRating: Rating missing or outside 1..5 (item is left as is)
    """
    rating = require_rating(rating)
    today = local_date(now, tz)

    result = schedule_review(
        rating,
        item.revision_cycle,
        item.stability,
        settings,
        today,
        rng,
    )

    updated = item.model_copy(
        update={
            "revision_cycle": result.next_cycle,
            "next_revision_date": result.next_due_date,
            "stability": result.next_stability,
            "last_rating": rating,
            "is_completed": False,
            "last_completed_at": now,
        }
    )

    review = Review(
        id=str(uuid.uuid4()),
        subject_id=item.id,
        subject_kind=SubjectKind.ITEM,
        reviewed_at=now,
        rating=rating,
        prev_stability=item.stability,
        next_stability=result.next_stability,
        next_due=result.next_due_date,
    )

    logger.info(
        f"Revision item {item.id} completed with rating {rating}: "
        f"cycle {result.next_cycle}, next due {result.next_due_date} (+{result.interval_days}d)"
    )

    return CompletionResult(item=updated, review=review)
