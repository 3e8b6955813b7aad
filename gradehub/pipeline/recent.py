"""Recency aggregator: every real submission inside the lookback window."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import List

from gradehub.canvas.client import CanvasClient
from gradehub.canvas.models import Assignment
from gradehub.core.config import HubConfig
from gradehub.core.errors import CanvasError
from gradehub.core.run_log import RunEvent, RunLogger

from .common import (
    Sleeper,
    fetch_assignments,
    is_real_submission,
    pause,
    record_skip,
    resolve_course_names,
    speed_grader_url,
)
from .records import RecentSubmissionRecord

OPERATION = "recent"
LOGGER = logging.getLogger("gradehub.pipeline.recent")


def aggregate(
    config: HubConfig,
    client: CanvasClient,
    *,
    now: datetime | None = None,
    sleep: Sleeper = time.sleep,
    run_log: RunLogger | None = None,
) -> List[RecentSubmissionRecord]:
    """
    Collect recent submissions across every configured course.

    A failure on one course or assignment is logged and skipped; the run only
    aborts for errors outside the Canvas error taxonomy. A naive ``now`` is
    taken to be UTC.

    Returns
    -------
    list of RecentSubmissionRecord
        Newest first across all courses and assignments.
    """

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    cutoff = now - config.lookback_window
    course_names = resolve_course_names(client, config.course_ids, operation=OPERATION, run_log=run_log)

    records: List[RecentSubmissionRecord] = []
    for course_id in config.course_ids:
        assignments = fetch_assignments(client, course_id, operation=OPERATION, run_log=run_log)
        for assignment in assignments:
            records.extend(
                _assignment_records(
                    config,
                    client,
                    course_id,
                    course_names[course_id],
                    assignment,
                    cutoff,
                    run_log=run_log,
                )
            )
            pause(config.assignment_delay, sleep)
        pause(config.course_delay, sleep)

    records.sort(key=lambda record: record.submitted_at, reverse=True)
    LOGGER.info("Found %s submission(s) in the last %s hours", len(records), config.lookback_hours)
    if run_log is not None:
        run_log.log(
            RunEvent.finished(
                OPERATION,
                "Recent submissions aggregated",
                courses=len(config.course_ids),
                records=len(records),
                lookback_hours=config.lookback_hours,
                ungraded_only=config.ungraded_only,
            )
        )
    return records


def _assignment_records(
    config: HubConfig,
    client: CanvasClient,
    course_id: str,
    course_name: str,
    assignment: Assignment,
    cutoff: datetime,
    *,
    run_log: RunLogger | None,
) -> List[RecentSubmissionRecord]:
    try:
        submissions = client.list_submissions(course_id, assignment.id, include_user=True)
    except CanvasError as exc:
        record_skip(
            run_log,
            OPERATION,
            f"Skipping assignment {assignment.id} in course {course_id}",
            error=exc,
            course_id=course_id,
            assignment_id=assignment.id,
        )
        return []

    out: List[RecentSubmissionRecord] = []
    for submission in submissions:
        if not is_real_submission(submission):
            continue
        if submission.submitted_at < cutoff:
            continue
        if config.ungraded_only and submission.is_graded:
            continue
        student_id = submission.student_id
        out.append(
            RecentSubmissionRecord(
                student_name=submission.student_name,
                course_name=course_name,
                assignment_name=assignment.name,
                submitted_at=submission.submitted_at,
                late=submission.late,
                graded=submission.is_graded,
                deep_link_url=speed_grader_url(config, course_id, assignment.id, student_id),
                course_id=course_id,
                assignment_id=assignment.id,
                student_id=student_id,
            )
        )
    return out


__all__ = ["aggregate"]
