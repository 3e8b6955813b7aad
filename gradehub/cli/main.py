"""Command-line entry point for the Canvas grading hub."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gradehub import get_version
from gradehub.canvas.client import CanvasClient
from gradehub.core.config import HubConfig, load_config
from gradehub.core.errors import ConfigError
from gradehub.core.run_log import RunLogger
from gradehub.pipeline.common import resolve_course_names
from gradehub.pipeline.missing import parse_assignment_limit, parse_course_selection, resolve
from gradehub.pipeline.recent import aggregate
from gradehub.sinks.console import render_missing, render_recent
from gradehub.sinks.snapshots import MISSING_REPORT_NAME, DaySnapshotStore, write_missing_report

app = typer.Typer(help="Canvas grading hub: recent-submission dashboards and missing-submission reports.")
console = Console()

RUN_LOG_NAME = "runs.jsonl"


def _build_client(config: HubConfig) -> CanvasClient:
    return CanvasClient(config)


def _load_settings(config_path: Path | None) -> HubConfig:
    try:
        return load_config(config_path)
    except ConfigError as exc:
        typer.echo(f"Settings error: {exc}", err=True)
        raise typer.Exit(code=2) from exc


def _resolve_output_dir(config: HubConfig, override: Path | None) -> Path:
    return (override or config.output_dir).expanduser().resolve()


def _run_logger(output_dir: Path) -> RunLogger:
    return RunLogger(output_dir / "logs" / RUN_LOG_NAME)


def _fail(command: str, exc: Exception) -> typer.Exit:
    typer.echo(f"[{command}] error: {exc}", err=True)
    return typer.Exit(code=1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every Canvas request."),
) -> None:
    """Canvas grading hub."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def recent(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Settings YAML (defaults to config/gradehub.yaml).",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        help="Directory for snapshots and run logs (defaults to the configured output_dir).",
    ),
    quiet: bool = typer.Option(False, "--quiet", help="Skip the table; snapshots are still written."),
) -> None:
    """Collect submissions inside the lookback window and publish the Day 1 snapshot."""

    config = _load_settings(config_path)
    out_dir = _resolve_output_dir(config, output_dir)
    now = datetime.now(timezone.utc)
    try:
        with _build_client(config) as client:
            records = aggregate(config, client, now=now, run_log=_run_logger(out_dir))
    except Exception as exc:  # noqa: BLE001 - surface unexpected failures as exit 1
        raise _fail("recent", exc) from exc

    if not records:
        typer.echo(
            f"No new submissions found in the last {config.lookback_hours} hours. "
            "You can adjust lookback_hours in the settings."
        )
        return

    store = DaySnapshotStore(out_dir / "snapshots")
    snapshot = store.publish(records, now)
    if not quiet:
        render_recent(records, console, now=now, highlight_late=config.highlight_late)
    typer.echo(f"Found {len(records)} new submission(s)! Snapshot: {snapshot}")


@app.command()
def missing(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Settings YAML (defaults to config/gradehub.yaml).",
    ),
    course: str = typer.Option("ALL", "--course", help="Course id, or ALL for every configured course."),
    assignment_range: str = typer.Option(
        "1",
        "--range",
        help="Number of newest assignments to check per course, or ALL (slow).",
    ),
    assume_yes: bool = typer.Option(False, "--yes", "-y", help="Continue past time checkpoints without asking."),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        help="Directory for the report and run logs (defaults to the configured output_dir).",
    ),
    quiet: bool = typer.Option(False, "--quiet", help="Skip the tables; the CSV report is still written."),
) -> None:
    """Report roster students without a submission for the newest assignments."""

    try:
        selection = parse_course_selection(course)
        limit = parse_assignment_limit(assignment_range)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    config = _load_settings(config_path)
    out_dir = _resolve_output_dir(config, output_dir)

    def _checkpoint(processed: int, total: int) -> bool:
        if assume_yes:
            return True
        try:
            return typer.confirm(f"Processed {processed} of {total} courses. Continue?", default=True)
        except (typer.Abort, EOFError):
            # No answer (Ctrl-C or closed stdin) stops here; resolved courses are still reported.
            typer.echo("")
            return False

    try:
        with _build_client(config) as client:
            report = resolve(
                config,
                client,
                selection,
                limit,
                checkpoint=_checkpoint,
                run_log=_run_logger(out_dir),
            )
    except Exception as exc:  # noqa: BLE001 - surface unexpected failures as exit 1
        raise _fail("missing", exc) from exc

    report_path = write_missing_report(report, out_dir / MISSING_REPORT_NAME)
    if not quiet:
        render_missing(report, console)
    if report.cancelled:
        typer.echo(f"Missing submissions cancelled. Partial report: {report_path}")
    else:
        typer.echo(f"Missing submissions complete! {len(report.entries)} missing. Report: {report_path}")


@app.command()
def courses(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Settings YAML (defaults to config/gradehub.yaml).",
    ),
) -> None:
    """List configured course ids with their Canvas names."""

    config = _load_settings(config_path)
    try:
        with _build_client(config) as client:
            names = resolve_course_names(client, config.course_ids, operation="courses")
    except Exception as exc:  # noqa: BLE001 - surface unexpected failures as exit 1
        raise _fail("courses", exc) from exc

    table = Table(title="Configured Courses")
    table.add_column("Course ID")
    table.add_column("Name")
    for course_id, name in names.items():
        table.add_row(course_id, escape(name))
    console.print(table)


@app.command()
def version() -> None:
    """Print the installed gradehub version."""
    typer.echo(get_version())


if __name__ == "__main__":  # pragma: no cover
    app()
