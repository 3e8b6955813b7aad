"""Rich console renderers for the recent and missing dashboards."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gradehub.pipeline.records import MissingReport, RecentSubmissionRecord

from .formatting import NO_ASSIGNMENTS_NOTE, format_timestamp, no_missing_note, submitted_label


def render_recent(
    records: Sequence[RecentSubmissionRecord],
    console: Console,
    *,
    now: datetime,
    highlight_late: bool = False,
) -> None:
    table = Table(title="Canvas Grading Dashboard", show_lines=False)
    table.add_column("Graded?", justify="center")
    table.add_column("Student Name")
    table.add_column("Class")
    table.add_column("Assignment")
    table.add_column("Submitted")
    table.add_column("Link", overflow="fold")
    for record in records:
        submitted = submitted_label(record.submitted_at, now, late=record.late)
        if highlight_late and record.late:
            submitted = f"[bold red on yellow]{submitted}[/]"
        table.add_row(
            "yes" if record.graded else "no",
            escape(record.student_name),
            escape(record.course_name),
            escape(record.assignment_name),
            submitted,
            record.deep_link_url,
        )
    console.print(table)
    ungraded = sum(1 for record in records if not record.graded)
    graded = len(records) - ungraded
    console.print(f"Ungraded: [bold red]{ungraded}[/]  Graded: [bold green]{graded}[/]")


def render_missing(report: MissingReport, console: Console) -> None:
    for course in report.courses:
        console.rule(f"{escape(course.course_name)} ({course.course_id})")
        if course.error:
            console.print(f"[red]Skipped:[/] {escape(course.error)}")
            continue
        if not course.groups:
            console.print(f"[italic]{NO_ASSIGNMENTS_NOTE}[/]")
            continue
        for group in course.groups:
            name = group.assignment.name
            if not group.missing:
                console.print(f"[green]{escape(no_missing_note(name))}[/]")
                continue
            table = Table(title=escape(name), title_justify="left")
            table.add_column("Student Name")
            table.add_column("Created Date")
            table.add_column("SpeedGrader Link", overflow="fold")
            created = format_timestamp(group.assignment.created_at)
            for entry in group.missing:
                table.add_row(escape(entry.student_name), created, entry.deep_link_url)
            console.print(table)
    if report.cancelled:
        console.print(
            f"[yellow]Stopped after {len(report.courses)} of {report.total_courses} course(s).[/]"
        )


__all__ = ["render_missing", "render_recent"]
