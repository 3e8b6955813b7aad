"""Typed views over the Canvas JSON payloads the pipelines consume."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

UNKNOWN_STUDENT = "Unknown Student"
UNSUBMITTED = "unsubmitted"
GRADED = "graded"


def _coerce_id(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return str(value)


CanvasId = Annotated[str, BeforeValidator(_coerce_id)]


def _coerce_timestamp(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CanvasModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class Course(CanvasModel):
    id: CanvasId
    name: Optional[str] = None


class Assignment(CanvasModel):
    id: CanvasId
    name: str = Field(default="Untitled Assignment")
    created_at: Optional[datetime] = None

    @field_validator("name", mode="before")
    @classmethod
    def _default_name(cls, value: Any) -> Any:
        return value if value else "Untitled Assignment"

    @field_validator("created_at", mode="before")
    @classmethod
    def _blank_timestamp(cls, value: Any) -> Any:
        return _coerce_timestamp(value)

    @field_validator("created_at")
    @classmethod
    def _aware(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _ensure_aware(value)


class SubmissionUser(CanvasModel):
    id: Optional[CanvasId] = None
    name: Optional[str] = None
    sortable_name: Optional[str] = None


class Submission(CanvasModel):
    """One row of ``/assignments/{id}/submissions``; ``user`` only with ``include[]=user``."""

    user_id: Optional[CanvasId] = None
    assignment_id: Optional[CanvasId] = None
    submitted_at: Optional[datetime] = None
    late: bool = False
    workflow_state: Optional[str] = None
    user: Optional[SubmissionUser] = None

    @field_validator("late", mode="before")
    @classmethod
    def _late_flag(cls, value: Any) -> bool:
        return bool(value)

    @field_validator("submitted_at", mode="before")
    @classmethod
    def _blank_timestamp(cls, value: Any) -> Any:
        return _coerce_timestamp(value)

    @field_validator("submitted_at")
    @classmethod
    def _aware(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _ensure_aware(value)

    @property
    def is_real(self) -> bool:
        """True when the student actually turned something in."""
        return self.submitted_at is not None and self.workflow_state != UNSUBMITTED

    @property
    def is_graded(self) -> bool:
        return self.workflow_state == GRADED

    @property
    def student_id(self) -> Optional[str]:
        if self.user_id is not None:
            return self.user_id
        return self.user.id if self.user is not None else None

    @property
    def student_name(self) -> str:
        if self.user is not None:
            return self.user.name or self.user.sortable_name or UNKNOWN_STUDENT
        return UNKNOWN_STUDENT


class Student(CanvasModel):
    """Roster entry from ``/courses/{id}/users?enrollment_type[]=student``."""

    id: CanvasId
    name: str = UNKNOWN_STUDENT

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Student":
        name = payload.get("name") or payload.get("sortable_name") or UNKNOWN_STUDENT
        return cls(id=payload.get("id"), name=name)


__all__ = [
    "Assignment",
    "Course",
    "Student",
    "Submission",
    "SubmissionUser",
    "UNKNOWN_STUDENT",
]
