"""
Typed operator configuration for the Canvas grading hub.

Settings come from a YAML mapping whose keys may be either the snake_case
field names below or the labels used by the grading spreadsheet's "Settings" tab
("Canvas Base URL", "Course IDs (comma-separated)", ...). Environment
variables override the file so tokens can stay out of version control.
"""

from __future__ import annotations

import os
import re
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from .errors import ConfigError

DEFAULT_CONFIG_PATH = Path("config/gradehub.yaml")
DEFAULT_LOOKBACK_HOURS = 24

PLACEHOLDER_BASE_HOST = "yourschool.instructure.com"
PLACEHOLDER_API_TOKEN = "PASTE_YOUR_TOKEN_HERE"

TRUTHY_FLAGS = frozenset({"yes", "y", "true"})

ENV_OVERRIDES = {
    "CANVAS_BASE_URL": "base_host",
    "CANVAS_API_TOKEN": "api_token",
    "CANVAS_COURSE_IDS": "course_ids",
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_SCHEME = re.compile(r"^https?://", re.IGNORECASE)


def parse_flag(value: Any) -> bool:
    """Interpret a yes/no setting; anything outside ``yes``/``y``/``true`` is False."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY_FLAGS


def parse_course_ids(value: Any) -> List[str]:
    """Split a comma-separated id list, keeping order and duplicates."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [str(item) for item in value if item is not None]
    else:
        items = str(value).split(",")
    return [item.strip() for item in items if item.strip()]


def parse_hours(value: Any, default: int = DEFAULT_LOOKBACK_HOURS) -> int:
    """Parse the leading integer of ``value``; zero, negative, or junk yields ``default``."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        hours = int(value)
    else:
        match = _LEADING_INT.match(str(value))
        if not match:
            return default
        hours = int(match.group(1))
    return hours if hours > 0 else default


def normalize_host(value: str) -> str:
    """Strip a leading scheme and a trailing slash from a Canvas host."""
    host = _SCHEME.sub("", value.strip())
    return host[:-1] if host.endswith("/") else host


class HubConfig(BaseModel):
    """Validated settings consumed by every pipeline entry point."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    base_host: str = Field(
        default="",
        validate_default=True,
        validation_alias=AliasChoices("base_host", "base_url", "Canvas Base URL"),
        description="Canvas hostname without scheme, e.g. school.instructure.com.",
    )
    api_token: str = Field(
        default="",
        validate_default=True,
        validation_alias=AliasChoices("api_token", "Canvas API Token"),
    )
    course_ids: List[str] = Field(
        default_factory=list,
        validate_default=True,
        validation_alias=AliasChoices("course_ids", "Course IDs (comma-separated)"),
    )
    lookback_hours: int = Field(
        default=DEFAULT_LOOKBACK_HOURS,
        validate_default=True,
        validation_alias=AliasChoices("lookback_hours", "Hours to Look Back"),
    )
    ungraded_only: bool = Field(
        default=False,
        validation_alias=AliasChoices("ungraded_only", "Show Only Ungraded?"),
    )
    highlight_late: bool = Field(
        default=False,
        validation_alias=AliasChoices("highlight_late", "Highlight Late Submissions?"),
    )
    request_timeout: float = Field(default=30.0, gt=0)
    follow_pagination: bool = True
    max_pages: int = Field(default=50, ge=1)
    course_delay: float = Field(default=0.2, ge=0.0)
    assignment_delay: float = Field(default=0.12, ge=0.0)
    missing_time_budget: float = Field(default=330.0, gt=0, description="Seconds before the missing report asks to continue.")
    output_dir: Path = Field(default=Path("outputs"))

    @field_validator("base_host", mode="before")
    @classmethod
    def check_base_host(cls, value: Any) -> str:
        host = normalize_host(str(value or ""))
        if not host or host == PLACEHOLDER_BASE_HOST:
            raise ValueError("Please enter your Canvas Base URL in the settings.")
        return host

    @field_validator("api_token", mode="before")
    @classmethod
    def check_api_token(cls, value: Any) -> str:
        token = str(value or "").strip()
        if not token or token == PLACEHOLDER_API_TOKEN:
            raise ValueError("Please enter your Canvas API Token in the settings.")
        return token

    @field_validator("course_ids", mode="before")
    @classmethod
    def check_course_ids(cls, value: Any) -> List[str]:
        ids = parse_course_ids(value)
        if not ids:
            raise ValueError("Please enter one or more Course IDs in the settings.")
        return ids

    @field_validator("lookback_hours", mode="before")
    @classmethod
    def coerce_hours(cls, value: Any, info: ValidationInfo) -> int:
        default = DEFAULT_LOOKBACK_HOURS
        if info.context:
            default = int(info.context.get("default_lookback_hours", default))
        return parse_hours(value, default)

    @field_validator("ungraded_only", "highlight_late", mode="before")
    @classmethod
    def coerce_flag(cls, value: Any) -> bool:
        return parse_flag(value)

    @field_validator("output_dir", mode="before")
    @classmethod
    def coerce_path(cls, value: Any) -> Path:
        return Path(value).expanduser()

    @property
    def lookback_window(self) -> timedelta:
        return timedelta(hours=self.lookback_hours)

    @property
    def api_root(self) -> str:
        return f"https://{self.base_host}"


def read_yaml_file(path: Path) -> Dict[str, Any]:
    """Load a YAML file and return a dictionary."""
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected mapping at root of {path}, received {type(data).__name__}")
    return data


def _apply_env_overrides(data: Dict[str, Any], env: Mapping[str, str]) -> Dict[str, Any]:
    payload = dict(data)
    for env_key, field_name in ENV_OVERRIDES.items():
        value = env.get(env_key)
        if value is not None and value.strip():
            payload[field_name] = value
    return payload


def _describe_validation_error(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        message = str(error.get("msg", "")).removeprefix("Value error, ")
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages)


def load_config(
    path: Path | None = None,
    *,
    default_lookback_hours: int = DEFAULT_LOOKBACK_HOURS,
    env: Mapping[str, str] | None = None,
) -> HubConfig:
    """
    Read and validate the operator configuration.

    Called at the start of every top-level command; the result is never
    cached so edits to the settings file apply on the next run.

    Parameters
    ----------
    path:
        YAML settings file. Defaults to ``config/gradehub.yaml``; a missing
        default file is tolerated when the environment supplies the values.
    default_lookback_hours:
        Window used when ``Hours to Look Back`` is absent or unparsable.
    env:
        Environment mapping for overrides. When omitted, ``.env`` is loaded
        and ``os.environ`` is used.
    """

    if env is None:
        load_dotenv(find_dotenv(usecwd=True))
        env = os.environ

    explicit = path is not None
    config_path = (path or DEFAULT_CONFIG_PATH).expanduser()
    if config_path.exists():
        data = read_yaml_file(config_path)
    elif explicit:
        raise ConfigError(f"Settings file not found at {config_path}")
    else:
        data = {}

    payload = _apply_env_overrides(data, env)
    try:
        return HubConfig.model_validate(payload, context={"default_lookback_hours": default_lookback_hours})
    except ValidationError as exc:
        raise ConfigError(_describe_validation_error(exc)) from exc


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "HubConfig",
    "load_config",
    "normalize_host",
    "parse_course_ids",
    "parse_flag",
    "parse_hours",
]
