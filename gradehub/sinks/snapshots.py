"""CSV sinks: rotating Day 1-5 snapshots and the missing-submissions report."""

from __future__ import annotations

import csv
import logging
from datetime import datetime, tzinfo
from pathlib import Path
from typing import List, Sequence

from gradehub.pipeline.records import MissingReport, RecentSubmissionRecord

from .formatting import NO_ASSIGNMENTS_NOTE, format_timestamp, no_missing_note, skipped_note, submitted_label

DAY_COLUMNS = ["Graded?", "Student Name", "Class", "Assignment", "Submitted", "Link", "Notes"]
MISSING_COLUMNS = ["Course", "Student Name", "Assignment", "Created Date", "SpeedGrader Link"]
MISSING_REPORT_NAME = "missing_submissions.csv"

LOGGER = logging.getLogger("gradehub.sinks")


class DaySnapshotStore:
    """Keeps ``day_1.csv`` (newest) through ``day_{keep}.csv`` in one directory."""

    def __init__(self, directory: Path, *, keep: int = 5) -> None:
        if keep < 1:
            raise ValueError("keep must be at least 1")
        self.directory = directory
        self.keep = keep

    def path_for(self, day: int) -> Path:
        return self.directory / f"day_{day}.csv"

    def existing(self) -> List[Path]:
        return [self.path_for(day) for day in range(1, self.keep + 1) if self.path_for(day).exists()]

    def rotate(self) -> None:
        """Drop the oldest snapshot and shift the rest down one day."""
        self.directory.mkdir(parents=True, exist_ok=True)
        oldest = self.path_for(self.keep)
        if oldest.exists():
            oldest.unlink()
        for day in range(self.keep - 1, 0, -1):
            current = self.path_for(day)
            if current.exists():
                current.replace(self.path_for(day + 1))

    def write_day_one(self, records: Sequence[RecentSubmissionRecord], now: datetime) -> Path:
        path = self.path_for(1)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.writer(handle)
            writer.writerow(DAY_COLUMNS)
            for record in records:
                writer.writerow(
                    [
                        "TRUE" if record.graded else "FALSE",
                        record.student_name,
                        record.course_name,
                        record.assignment_name,
                        submitted_label(record.submitted_at, now, late=record.late),
                        record.deep_link_url,
                        "",
                    ]
                )
        LOGGER.info("Wrote %s row(s) to %s", len(records), path)
        return path

    def publish(self, records: Sequence[RecentSubmissionRecord], now: datetime) -> Path:
        """Rotate, then write the new Day 1 snapshot."""
        self.rotate()
        return self.write_day_one(records, now)


def write_missing_report(report: MissingReport, path: Path, *, tz: tzinfo | None = None) -> Path:
    """
    One row per missing student, grouped course then assignment as resolved.

    Courses that were skipped or had no assignments, and assignments with
    nobody missing, get a single note row in the Student Name column so the
    report accounts for every resolved course.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = 0
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(MISSING_COLUMNS)
        for course in report.courses:
            label = f"{course.course_name} ({course.course_id})"
            if course.error:
                writer.writerow([label, skipped_note(course.error), "", "", ""])
                continue
            if not course.groups:
                writer.writerow([label, NO_ASSIGNMENTS_NOTE, "", "", ""])
                continue
            for group in course.groups:
                created = format_timestamp(group.assignment.created_at, tz)
                if not group.missing:
                    writer.writerow([label, no_missing_note(group.assignment.name), group.assignment.name, created, ""])
                    continue
                for entry in group.missing:
                    writer.writerow([label, entry.student_name, entry.assignment_name, created, entry.deep_link_url])
                    rows += 1
    LOGGER.info("Wrote %s missing row(s) to %s", rows, path)
    return path


__all__ = [
    "DAY_COLUMNS",
    "DaySnapshotStore",
    "MISSING_COLUMNS",
    "MISSING_REPORT_NAME",
    "write_missing_report",
]
