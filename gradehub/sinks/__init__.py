"""Presentation sinks for pipeline output: console tables and CSV files."""

from .console import render_missing, render_recent
from .formatting import format_timestamp, submitted_label, time_ago
from .snapshots import DaySnapshotStore, write_missing_report

__all__ = [
    "DaySnapshotStore",
    "format_timestamp",
    "render_missing",
    "render_recent",
    "submitted_label",
    "time_ago",
    "write_missing_report",
]
