"""
Missing-submission resolver.

For each selected course the newest assignments are compared against the
student roster; anyone without a real submission is reported. Runs touch one
endpoint per assignment, so the resolver pauses at a time-budget checkpoint
between courses and lets the caller continue or cancel.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Sequence, Set, Union

from gradehub.canvas.client import CanvasClient
from gradehub.canvas.models import Assignment, Student
from gradehub.core.config import HubConfig
from gradehub.core.errors import CanvasError
from gradehub.core.run_log import RunEvent, RunLogger

from .common import (
    Sleeper,
    fetch_assignments,
    is_real_submission,
    latest_assignments,
    pause,
    record_skip,
    resolve_course_name,
    speed_grader_url,
)
from .records import AssignmentGroup, CourseMissingReport, MissingEntry, MissingReport

OPERATION = "missing"
ALL = "ALL"
LOGGER = logging.getLogger("gradehub.pipeline.missing")

AssignmentLimit = Union[int, str]
# Called with (courses processed, courses total); returning False cancels.
Checkpoint = Callable[[int, int], bool]


def parse_assignment_limit(value: AssignmentLimit) -> AssignmentLimit:
    """Accept a positive integer or ``ALL`` (any case)."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid assignment range: {value!r}")
    if isinstance(value, int):
        limit = value
    else:
        text = str(value).strip()
        if text.upper() == ALL:
            return ALL
        try:
            limit = int(text)
        except ValueError as exc:
            raise ValueError(f"Invalid assignment range: {value!r} (use a positive number or ALL)") from exc
    if limit < 1:
        raise ValueError(f"Invalid assignment range: {value!r} (use a positive number or ALL)")
    return limit


def parse_course_selection(value: str | None) -> str:
    text = (value or ALL).strip()
    if not text:
        raise ValueError("Course selection must be ALL or a course id")
    return ALL if text.upper() == ALL else text


def selected_courses(config: HubConfig, course_selection: str) -> List[str]:
    if course_selection == ALL:
        return list(config.course_ids)
    return [course_selection]


def resolve(
    config: HubConfig,
    client: CanvasClient,
    course_selection: str = ALL,
    assignment_limit: AssignmentLimit = ALL,
    *,
    checkpoint: Checkpoint | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Sleeper = time.sleep,
    run_log: RunLogger | None = None,
) -> MissingReport:
    """
    Compute missing submissions course by course.

    Parameters
    ----------
    course_selection:
        ``ALL`` for every configured course, or a single course id.
    assignment_limit:
        Keep only the N newest assignments per course, or ``ALL``.
    checkpoint:
        Asked whether to continue once ``missing_time_budget`` seconds have
        elapsed and courses remain. Each "continue" starts a new budget window.
        Cancelling keeps the courses already resolved.
    """

    course_selection = parse_course_selection(course_selection)
    assignment_limit = parse_assignment_limit(assignment_limit)
    courses = selected_courses(config, course_selection)
    report = MissingReport(total_courses=len(courses))

    window_start = clock()
    for index, course_id in enumerate(courses):
        LOGGER.info("Processing course %s (%s of %s)", course_id, index + 1, len(courses))
        report.courses.append(
            _resolve_course(config, client, course_id, assignment_limit, sleep=sleep, run_log=run_log)
        )
        processed = index + 1
        if processed >= len(courses):
            break
        if clock() - window_start <= config.missing_time_budget:
            continue
        if checkpoint is not None and not checkpoint(processed, len(courses)):
            report.cancelled = True
            LOGGER.info("Missing submissions cancelled after %s of %s courses", processed, len(courses))
            break
        window_start = clock()

    if run_log is not None:
        run_log.log(
            RunEvent.finished(
                OPERATION,
                "Missing submissions cancelled" if report.cancelled else "Missing submissions complete",
                course_selection=course_selection,
                assignment_limit=assignment_limit,
                courses_processed=len(report.courses),
                courses_total=report.total_courses,
                missing=len(report.entries),
            )
        )
    return report


def missing_students(roster: Sequence[Student], submitted_ids: Set[str]) -> List[Student]:
    """Roster order preserved; ``missing`` and ``submitted_ids`` never overlap."""
    return [student for student in roster if student.id not in submitted_ids]


def _resolve_course(
    config: HubConfig,
    client: CanvasClient,
    course_id: str,
    assignment_limit: AssignmentLimit,
    *,
    sleep: Sleeper,
    run_log: RunLogger | None,
) -> CourseMissingReport:
    course_name = resolve_course_name(client, course_id, operation=OPERATION, run_log=run_log)

    try:
        roster = client.list_students(course_id)
    except CanvasError as exc:
        record_skip(run_log, OPERATION, f"Failed to fetch roster for course {course_id}", error=exc, course_id=course_id)
        return CourseMissingReport(course_id=course_id, course_name=course_name, error=str(exc))

    assignments = latest_assignments(
        fetch_assignments(client, course_id, operation=OPERATION, run_log=run_log),
        assignment_limit,
    )

    groups: List[AssignmentGroup] = []
    for assignment in assignments:
        group = _resolve_assignment(config, client, course_id, course_name, assignment, roster, run_log=run_log)
        if group is not None:
            groups.append(group)
        pause(config.assignment_delay, sleep)
    pause(config.course_delay, sleep)

    return CourseMissingReport(course_id=course_id, course_name=course_name, groups=groups)


def _resolve_assignment(
    config: HubConfig,
    client: CanvasClient,
    course_id: str,
    course_name: str,
    assignment: Assignment,
    roster: Sequence[Student],
    *,
    run_log: RunLogger | None,
) -> AssignmentGroup | None:
    try:
        submissions = client.list_submissions(course_id, assignment.id, include_user=False)
    except CanvasError as exc:
        record_skip(
            run_log,
            OPERATION,
            f"Skipping assignment {assignment.id} in course {course_id}",
            error=exc,
            course_id=course_id,
            assignment_id=assignment.id,
        )
        return None

    submitted_ids = {
        submission.student_id
        for submission in submissions
        if is_real_submission(submission) and submission.student_id is not None
    }
    missing = [
        MissingEntry(
            student_id=student.id,
            student_name=student.name,
            assignment_id=assignment.id,
            assignment_name=assignment.name,
            course_id=course_id,
            course_name=course_name,
            assignment_created_at=assignment.created_at,
            deep_link_url=speed_grader_url(config, course_id, assignment.id, student.id),
        )
        for student in missing_students(roster, submitted_ids)
    ]
    return AssignmentGroup(assignment=assignment, missing=missing, submitted_ids=submitted_ids)


__all__ = [
    "ALL",
    "missing_students",
    "parse_assignment_limit",
    "parse_course_selection",
    "resolve",
    "selected_courses",
]
