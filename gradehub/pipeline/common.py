"""Helpers shared by the recent-submission and missing-submission pipelines."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Sequence

from gradehub.canvas.client import CanvasClient
from gradehub.canvas.models import Assignment, Course, Submission
from gradehub.core.config import HubConfig
from gradehub.core.errors import CanvasError
from gradehub.core.run_log import RunEvent, RunLogger

LOGGER = logging.getLogger("gradehub.pipeline")

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)

Sleeper = Callable[[float], None]


def is_real_submission(submission: Submission) -> bool:
    """Timestamp present and state other than ``unsubmitted``."""
    return submission.is_real


def speed_grader_url(config: HubConfig, course_id: str, assignment_id: str, student_id: Any) -> str:
    return (
        f"https://{config.base_host}/courses/{course_id}/gradebook/speed_grader"
        f"?assignment_id={assignment_id}&student_id={student_id}"
    )


def fallback_course_name(course_id: str) -> str:
    return f"Course {course_id}"


def course_display_name(course_id: str, course: Course | None) -> str:
    """Name from the payload, or ``Course {id}`` when Canvas gave none."""
    if course is not None and course.name:
        return course.name
    return fallback_course_name(course_id)


def resolve_course_name(
    client: CanvasClient,
    course_id: str,
    *,
    operation: str,
    run_log: RunLogger | None = None,
) -> str:
    try:
        course = client.get_course(course_id)
    except CanvasError as exc:
        record_skip(
            run_log,
            operation,
            f"Course name unavailable for {course_id}; using fallback",
            error=exc,
            course_id=course_id,
        )
        return fallback_course_name(course_id)
    return course_display_name(course_id, course)


def resolve_course_names(
    client: CanvasClient,
    course_ids: Iterable[str],
    *,
    operation: str,
    run_log: RunLogger | None = None,
) -> Dict[str, str]:
    """Look up each distinct course once, in first-seen order."""
    names: Dict[str, str] = {}
    for course_id in course_ids:
        if course_id not in names:
            names[course_id] = resolve_course_name(client, course_id, operation=operation, run_log=run_log)
    return names


def fetch_assignments(
    client: CanvasClient,
    course_id: str,
    *,
    operation: str,
    run_log: RunLogger | None = None,
) -> List[Assignment]:
    """Assignment list for a course; a failed fetch counts as no assignments."""
    try:
        return client.list_assignments(course_id)
    except CanvasError as exc:
        record_skip(
            run_log,
            operation,
            f"Failed to fetch assignments for course {course_id}",
            error=exc,
            course_id=course_id,
        )
        return []


def assignment_sort_key(assignment: Assignment) -> datetime:
    return assignment.created_at or _EARLIEST


def latest_assignments(assignments: Sequence[Assignment], limit: int | str = "ALL") -> List[Assignment]:
    """Newest-created first; undated assignments last, ties in upstream order."""
    ordered = sorted(assignments, key=assignment_sort_key, reverse=True)
    if limit == "ALL":
        return ordered
    return ordered[: int(limit)]


def pause(seconds: float, sleep: Sleeper) -> None:
    if seconds > 0:
        sleep(seconds)


def record_skip(
    run_log: RunLogger | None,
    operation: str,
    message: str,
    *,
    error: Exception,
    course_id: str | None = None,
    assignment_id: str | None = None,
) -> None:
    LOGGER.warning("%s: %s", message, error)
    if run_log is None:
        return
    run_log.log(RunEvent.skipped(operation, message, error, course_id=course_id, assignment_id=assignment_id))


__all__ = [
    "assignment_sort_key",
    "course_display_name",
    "fallback_course_name",
    "fetch_assignments",
    "is_real_submission",
    "latest_assignments",
    "pause",
    "record_skip",
    "resolve_course_name",
    "resolve_course_names",
    "speed_grader_url",
]
