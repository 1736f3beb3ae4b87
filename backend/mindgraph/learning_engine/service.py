"""Review service - orchestrates scheduling, lifecycle and propagation.

Callers fetch a snapshot (items, graph, settings) for one user, pass it in,
and persist whatever comes back. Nothing here performs I/O.
"""

import logging
import random
import uuid
from datetime import datetime, tzinfo
from typing import Iterable

from mindgraph.core.config import user_timezone
from mindgraph.core.errors import SchedulingError, UnknownSubject, require_rating, to_error_response
from mindgraph.learning_engine.constants import SubjectKind
from mindgraph.learning_engine.contracts import (
    BulkCompletionReport,
    BulkCompletionRequest,
    BulkCompletionResult,
    EngineSnapshot,
    GraphNode,
    GraphSettings,
    Review,
    ReviewOutcome,
    ReviewSubmission,
    RevisionItem,
    local_date,
)
from mindgraph.learning_engine.graph_revision.propagation import (
    apply_propagation,
    propagate_review,
    rating_to_delta,
)
from mindgraph.learning_engine.revision.lifecycle import complete_revision
from mindgraph.learning_engine.revision.scheduler import schedule_review

logger = logging.getLogger(__name__)


def _find_item(items: Iterable[RevisionItem], item_id) -> RevisionItem:
    for item in items:
        if item.id == item_id:
            return item
    raise UnknownSubject(
        f"Revision item {item_id} not found",
        details={"subject_id": item_id, "subject_kind": SubjectKind.ITEM.value},
    )


def _replace_item(items: list[RevisionItem], updated: RevisionItem) -> list[RevisionItem]:
    return [updated if item.id == updated.id else item for item in items]


def _review_item(
    submission: ReviewSubmission,
    rating: int,
    snapshot: EngineSnapshot,
    now: datetime,
    tz: tzinfo | None,
    rng: random.Random | None,
) -> ReviewOutcome:
    item = _find_item(snapshot.items, submission.subject_id)
    completion = complete_revision(item, rating, snapshot.settings, now=now, tz=tz, rng=rng)
    new_snapshot = snapshot.model_copy(update={"items": _replace_item(list(snapshot.items), completion.item)})
    return ReviewOutcome(
        subject_id=item.id,
        subject_kind=SubjectKind.ITEM,
        review=completion.review,
        item=completion.item,
        snapshot=new_snapshot,
    )


def _review_node(
    submission: ReviewSubmission,
    rating: int,
    snapshot: EngineSnapshot,
    now: datetime,
    tz: tzinfo | None,
    rng: random.Random | None,
) -> ReviewOutcome:
    graph = snapshot.graph
    settings = snapshot.settings
    node = graph.get_node(submission.subject_id)
    if node is None:
        raise UnknownSubject(
            f"Graph node {submission.subject_id} not found",
            details={"subject_id": submission.subject_id, "subject_kind": SubjectKind.NODE.value},
        )

    delta = rating_to_delta(rating)
    result = schedule_review(
        rating,
        node.review_count,
        node.stability,
        settings,
        local_date(now, tz),
        rng,
    )

    # Propagation credits the reviewed node itself at hop 0
    deltas = propagate_review(node.id, delta, graph, settings.propagation_depth)
    propagated = apply_propagation(graph, deltas)

    reviewed = propagated.get_node(node.id)
    updated_node: GraphNode = reviewed.model_copy(
        update={
            "stability": result.next_stability,
            "due_date": result.next_due_date,
            "review_count": node.review_count + 1,
            "last_visited": now,
            # Derived metrics are stale after a review
            "status": None,
            "predicted_weak_date": None,
        }
    )
    nodes = [updated_node if n.id == node.id else n for n in propagated.nodes]
    new_graph = propagated.model_copy(update={"nodes": nodes})

    review = Review(
        id=str(uuid.uuid4()),
        subject_id=node.id,
        subject_kind=SubjectKind.NODE,
        reviewed_at=now,
        rating=rating,
        prev_stability=node.stability,
        next_stability=result.next_stability,
        next_due=result.next_due_date,
    )

    logger.info(
        f"Node {node.id} reviewed with rating {rating}: strength {node.strength:.2f} -> "
        f"{updated_node.strength:.2f}, next due {result.next_due_date}, "
        f"{len(deltas) - 1} neighbours updated"
    )

    return ReviewOutcome(
        subject_id=node.id,
        subject_kind=SubjectKind.NODE,
        review=review,
        node=updated_node,
        node_updates=deltas,
        snapshot=snapshot.model_copy(update={"graph": new_graph}),
    )


def submit_review(
    submission: ReviewSubmission,
    snapshot: EngineSnapshot,
    *,
    now: datetime,
    tz: tzinfo | None = None,
    rng: random.Random | None = None,
) -> ReviewOutcome:
    """
    Apply one review event to a snapshot.

    Item subjects are completed and rescheduled. Node subjects have their own
    strength, stability and due date updated, and the strength change is
    propagated to neighbours up to ``settings.propagation_depth`` hops.

    Args:
        submission: Subject id, kind and 1-5 rating
        snapshot: Current items, graph and settings
        now: Review timestamp
        tz: User timezone; decides which calendar day the review falls on.
            Defaults to USER_TZ
        rng: Random source for interval jitter

    Returns:
        ReviewOutcome with the review record and the updated snapshot

    Raises:
        InvalidRating: Rating missing or outside 1..5
        UnknownSubject: Subject id not present in the snapshot
        ConfigurationError: Invalid graph settings
    """
    if tz is None:
        tz = user_timezone()
    try:
        rating = require_rating(submission.rating)
        if submission.subject_kind == SubjectKind.ITEM:
            return _review_item(submission, rating, snapshot, now, tz, rng)
        return _review_node(submission, rating, snapshot, now, tz, rng)
    except SchedulingError as e:
        logger.warning(
            f"Review rejected for {submission.subject_kind.value} {submission.subject_id}: "
            f"{e.code} {e.message}"
        )
        raise


def bulk_complete(
    request: BulkCompletionRequest,
    items: Iterable[RevisionItem],
    settings: GraphSettings,
    *,
    now: datetime,
    tz: tzinfo | None = None,
    rng: random.Random | None = None,
) -> BulkCompletionReport:
    """
    Complete several revision items at once.

    Each completion is independent: a failure (unknown id, bad rating) is
    reported in its result entry and does not stop the others. Completions are
    applied in request order, so a repeated id is completed twice.

    Args:
        request: {completions: [{item_id, rating}]}
        items: Current revision items
        settings: Graph settings for the scheduler
        now: Completion timestamp
        tz: User timezone, defaults to USER_TZ
        rng: Random source for interval jitter

    Returns:
        BulkCompletionReport with per-item results and the updated item list
    """
    if tz is None:
        tz = user_timezone()
    current = list(items)
    results = []

    for completion in request.completions:
        try:
            item = _find_item(current, completion.item_id)
            outcome = complete_revision(item, completion.rating, settings, now=now, tz=tz, rng=rng)
        except SchedulingError as e:
            logger.warning(f"Bulk completion failed for item {completion.item_id}: {e.code} {e.message}")
            results.append(
                BulkCompletionResult(item_id=completion.item_id, ok=False, error=to_error_response(e))
            )
            continue

        current = _replace_item(current, outcome.item)
        results.append(
            BulkCompletionResult(
                item_id=completion.item_id,
                ok=True,
                new_due_date=local_date(outcome.item.next_revision_date, tz),
            )
        )

    report = BulkCompletionReport(results=results, items=current)
    logger.info(f"Bulk completion: {report.succeeded} succeeded, {report.failed} failed")
    return report
