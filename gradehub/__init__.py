"""
Canvas grading hub: recent-submission dashboards and missing-submission reports.

The package root stays import-light so the CLI can report its version even
when the Canvas settings are not configured yet.
"""

from importlib import metadata


def get_version() -> str:
    """Return the installed project version."""
    try:
        return metadata.version("gradehub")
    except metadata.PackageNotFoundError:
        return "0.0.0"


__all__ = ["get_version"]
