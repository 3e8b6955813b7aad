"""Row types handed from the pipelines to the presentation sinks."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from gradehub.canvas.models import Assignment


class RecentSubmissionRecord(BaseModel):
    """One real submission inside the recency window."""

    model_config = ConfigDict(frozen=True)

    student_name: str
    course_name: str
    assignment_name: str
    submitted_at: datetime
    late: bool = False
    graded: bool = False
    deep_link_url: str
    course_id: str
    assignment_id: str
    student_id: Optional[str] = None


class MissingEntry(BaseModel):
    """A roster student with no real submission for an assignment."""

    model_config = ConfigDict(frozen=True)

    student_id: str
    student_name: str
    assignment_id: str
    assignment_name: str
    course_id: str
    course_name: str
    assignment_created_at: Optional[datetime] = None
    deep_link_url: str


class AssignmentGroup(BaseModel):
    assignment: Assignment
    missing: List[MissingEntry] = Field(default_factory=list)
    submitted_ids: Set[str] = Field(default_factory=set)


class CourseMissingReport(BaseModel):
    course_id: str
    course_name: str
    groups: List[AssignmentGroup] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def missing_count(self) -> int:
        return sum(len(group.missing) for group in self.groups)


class MissingReport(BaseModel):
    """Grouped output of one missing-submission run, course by course."""

    courses: List[CourseMissingReport] = Field(default_factory=list)
    total_courses: int = 0
    cancelled: bool = False

    @property
    def entries(self) -> List[MissingEntry]:
        return [entry for course in self.courses for group in course.groups for entry in group.missing]


__all__ = [
    "AssignmentGroup",
    "CourseMissingReport",
    "MissingEntry",
    "MissingReport",
    "RecentSubmissionRecord",
]
