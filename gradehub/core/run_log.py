"""
JSONL run log kept beside the generated reports.

Each `recent` or `missing` run appends one line per Canvas resource it had to
skip, then a closing summary line with the run's counts.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

RunLevel = Literal["info", "warning"]


class RunEvent(BaseModel):
    """A skipped Canvas resource (``warning``) or a finished run (``info``)."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str = Field(..., description="Pipeline that emitted the event: 'recent' or 'missing'.")
    message: str
    level: RunLevel = "info"
    course_id: Optional[str] = None
    assignment_id: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    summary: Dict[str, Any] = Field(default_factory=dict, description="Counts reported when a run finishes.")

    @classmethod
    def skipped(
        cls,
        operation: str,
        message: str,
        error: Exception,
        *,
        course_id: str | None = None,
        assignment_id: str | None = None,
    ) -> "RunEvent":
        return cls(
            operation=operation,
            message=message,
            level="warning",
            course_id=course_id,
            assignment_id=assignment_id,
            error=str(error),
            error_type=type(error).__name__,
        )

    @classmethod
    def finished(cls, operation: str, message: str, **summary: Any) -> "RunEvent":
        return cls(operation=operation, message=message, summary=summary)


class RunLogger:
    """Appends events to ``output_path``; unset fields are left out of each line."""

    def __init__(self, output_path: Path) -> None:
        self.output_path = output_path
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, event: RunEvent) -> RunEvent:
        with self.output_path.open("a", encoding="utf-8") as handle:
            handle.write(event.model_dump_json(exclude_none=True) + "\n")
        return event


__all__ = ["RunEvent", "RunLevel", "RunLogger"]
