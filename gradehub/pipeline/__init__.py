"""Aggregation pipelines that turn Canvas data into dashboard rows."""

from __future__ import annotations

from .missing import parse_assignment_limit, parse_course_selection, resolve
from .recent import aggregate
from .records import AssignmentGroup, CourseMissingReport, MissingEntry, MissingReport, RecentSubmissionRecord

__all__ = [
    "AssignmentGroup",
    "CourseMissingReport",
    "MissingEntry",
    "MissingReport",
    "RecentSubmissionRecord",
    "aggregate",
    "parse_assignment_limit",
    "parse_course_selection",
    "resolve",
]
