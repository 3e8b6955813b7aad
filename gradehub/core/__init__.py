"""
Configuration, error taxonomy, and run logging for the grading hub.

The pipelines and the CLI depend on these modules; nothing here performs
network I/O.
"""

from .config import HubConfig, load_config
from .errors import AuthError, CanvasError, ConfigError, DecodeError, GradeHubError, UpstreamError
from .run_log import RunEvent, RunLogger

__all__ = [
    "AuthError",
    "CanvasError",
    "ConfigError",
    "DecodeError",
    "GradeHubError",
    "HubConfig",
    "RunEvent",
    "RunLogger",
    "UpstreamError",
    "load_config",
]
