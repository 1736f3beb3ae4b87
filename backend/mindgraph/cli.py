#!/usr/bin/env python3
"""
Command-line access to the revision engine over a JSON snapshot file.

The snapshot file holds one EngineSnapshot in its camelCase JSON form:
{"items": [...], "graph": {"nodes": [...], "edges": [...]}, "settings": {...}}.

Usage:
    mindgraph agenda <snapshot.json> --start YYYY-MM-DD --end YYYY-MM-DD [--include-empty]
    mindgraph stats <snapshot.json> [--today YYYY-MM-DD]
    mindgraph review <snapshot.json> --kind item|node --subject-id <id> --rating 1-5 [options]

Examples:
    # Revisions due over the next week
    mindgraph agenda snapshot.json --start 2026-03-10 --end 2026-03-16

    # Rate node 42 as "good" and save the updated snapshot
    mindgraph review snapshot.json --kind node --subject-id 42 --rating 4 \
        --output snapshot.json
"""

import argparse
import json
import logging
import sys
from datetime import date, datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from mindgraph.core.config import user_timezone
from mindgraph.core.errors import SchedulingError, to_error_response
from mindgraph.core.logging import setup_logging
from mindgraph.learning_engine.constants import SubjectKind
from mindgraph.learning_engine.contracts import EngineSnapshot, ReviewSubmission, local_date
from mindgraph.learning_engine.revision.aggregator import build_agenda, compute_stats
from mindgraph.learning_engine.service import submit_review

logger = logging.getLogger(__name__)


def parse_identifier(raw: str) -> int | str:
    """Digit-only ids are integers, as in exported snapshots; anything else is a string id."""
    return int(raw) if raw.isdigit() else raw


def load_snapshot(path: str) -> EngineSnapshot:
    return EngineSnapshot.model_validate_json(Path(path).read_text(encoding="utf-8"))


def _emit(payload) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def run_agenda(args: argparse.Namespace, snapshot: EngineSnapshot) -> int:
    try:
        start = date.fromisoformat(args.start)
        end = date.fromisoformat(args.end)
    except ValueError:
        logger.error(f"Invalid date range: {args.start} to {args.end}")
        return 1

    days = build_agenda(snapshot.items, start, end, tz=user_timezone(), include_empty=args.include_empty)
    _emit([day.to_json_dict() for day in days])
    return 0


def run_stats(args: argparse.Namespace, snapshot: EngineSnapshot) -> int:
    tz = user_timezone()
    if args.today:
        try:
            today = date.fromisoformat(args.today)
        except ValueError:
            logger.error(f"Invalid today format: {args.today}")
            return 1
    else:
        today = local_date(datetime.now(timezone.utc), tz)
    _emit(compute_stats(snapshot.items, today, tz=tz).to_json_dict())
    return 0


def run_review(args: argparse.Namespace, snapshot: EngineSnapshot) -> int:
    if args.now:
        try:
            now = datetime.fromisoformat(args.now)
        except ValueError:
            logger.error(f"Invalid now format: {args.now}")
            return 1
    else:
        now = datetime.now(timezone.utc)

    submission = ReviewSubmission(
        subject_id=parse_identifier(args.subject_id),
        subject_kind=SubjectKind(args.kind),
        rating=args.rating,
    )
    outcome = submit_review(submission, snapshot, now=now)

    if args.output:
        Path(args.output).write_text(
            json.dumps(outcome.snapshot.to_json_dict(), indent=2), encoding="utf-8"
        )
        logger.info(f"Updated snapshot written to {args.output}")

    _emit(
        {
            "review": outcome.review.to_json_dict(),
            "nodeUpdates": [delta.to_json_dict() for delta in outcome.node_updates],
        }
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mindgraph",
        description="Inspect and update a revision snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Override LOG_LEVEL for this run (e.g. DEBUG, WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    agenda = subparsers.add_parser("agenda", help="Pending revisions grouped by due day")
    agenda.add_argument("snapshot", help="Path to the snapshot JSON file")
    agenda.add_argument("--start", required=True, help="First day (ISO format: YYYY-MM-DD)")
    agenda.add_argument("--end", required=True, help="Last day (ISO format: YYYY-MM-DD)")
    agenda.add_argument(
        "--include-empty",
        action="store_true",
        help="List days with no revisions as well",
    )
    agenda.set_defaults(handler=run_agenda)

    stats = subparsers.add_parser("stats", help="Dashboard counters and streak")
    stats.add_argument("snapshot", help="Path to the snapshot JSON file")
    stats.add_argument("--today", help="Reference day (default: today in USER_TZ)")
    stats.set_defaults(handler=run_stats)

    review = subparsers.add_parser("review", help="Apply one review to an item or node")
    review.add_argument("snapshot", help="Path to the snapshot JSON file")
    review.add_argument(
        "--kind",
        required=True,
        choices=[kind.value for kind in SubjectKind],
        help="Whether the subject is a revision item or a graph node",
    )
    review.add_argument("--subject-id", required=True, help="Item or node id")
    review.add_argument("--rating", type=int, required=True, help="Rating from 1 (forgot) to 5 (perfect)")
    review.add_argument("--now", help="Review timestamp (ISO format, default: current time)")
    review.add_argument("--output", help="Write the updated snapshot to this path")
    review.set_defaults(handler=run_review)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    # stdout carries the JSON result
    setup_logging(args.log_level, stream=sys.stderr)

    try:
        snapshot = load_snapshot(args.snapshot)
    except (OSError, ValidationError) as e:
        logger.error(f"Could not load snapshot {args.snapshot}: {e}")
        return 1

    try:
        return args.handler(args, snapshot)
    except SchedulingError as e:
        logger.error(f"{args.command} failed: {e.code} {e.message}")
        _emit(to_error_response(e).model_dump())
        return 1


if __name__ == "__main__":
    sys.exit(main())
