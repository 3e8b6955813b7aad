"""Human-readable labels shared by the console and CSV sinks."""

from __future__ import annotations

from datetime import datetime, tzinfo

EMPTY_DATE = "-"
NO_ASSIGNMENTS_NOTE = "No assignments found for this selection."


def time_ago(then: datetime, now: datetime) -> str:
    """``5 minutes ago`` / ``3 hours ago`` / ``1 day ago`` style label."""
    seconds = max((now - then).total_seconds(), 0)
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)
    if minutes < 60:
        return "1 minute ago" if minutes == 1 else f"{minutes} minutes ago"
    if hours < 24:
        return "1 hour ago" if hours == 1 else f"{hours} hours ago"
    if days == 1:
        return "1 day ago"
    return f"{days} days ago"


def submitted_label(submitted_at: datetime, now: datetime, *, late: bool) -> str:
    label = time_ago(submitted_at, now)
    return f"{label} (LATE)" if late else label


def no_missing_note(assignment_name: str) -> str:
    return f"No missing submissions for {assignment_name}"


def skipped_note(error: str) -> str:
    return f"Skipped: {error}"


def format_timestamp(value: datetime | None, tz: tzinfo | None = None) -> str:
    """``M/d/yyyy h:mm AM`` in ``tz`` (local time when omitted)."""
    if value is None:
        return EMPTY_DATE
    local = value.astimezone(tz)
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{local.month}/{local.day}/{local.year} {hour}:{local.minute:02d} {meridiem}"


__all__ = [
    "EMPTY_DATE",
    "NO_ASSIGNMENTS_NOTE",
    "format_timestamp",
    "no_missing_note",
    "skipped_note",
    "submitted_label",
    "time_ago",
]
