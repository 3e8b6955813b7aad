"""Exception hierarchy shared by the config loader, Canvas client, and pipelines."""

from __future__ import annotations


class GradeHubError(Exception):
    """Base class for every error raised by gradehub."""


class ConfigError(GradeHubError, ValueError):
    """A required setting is missing, empty, or still set to its placeholder."""


class CanvasError(GradeHubError):
    """Base class for failures talking to the Canvas REST API."""

    def __init__(self, message: str, *, context: str | None = None) -> None:
        super().__init__(message)
        self.context = context


class AuthError(CanvasError):
    """Canvas rejected the token (401) or the token lacks access (403)."""

    def __init__(self, status: int, *, context: str | None = None) -> None:
        message = (
            f"Canvas returned {status} while {context or 'calling the API'}. "
            "The API token is invalid or expired, or it does not have permission to view this course."
        )
        super().__init__(message, context=context)
        self.status = status


class UpstreamError(CanvasError):
    """Any other non-2xx response, or a transport failure when ``status`` is None."""

    def __init__(
        self,
        status: int | None,
        body: str = "",
        *,
        context: str | None = None,
    ) -> None:
        label = status if status is not None else "no response"
        message = f"Canvas API error ({label}) while {context or 'calling the API'}."
        if body:
            message += f" Response: {body}"
        super().__init__(message, context=context)
        self.status = status
        self.body = body


class DecodeError(CanvasError):
    """Canvas answered 2xx with a body that is not valid JSON."""

    def __init__(self, *, context: str | None = None) -> None:
        super().__init__(f"Failed to parse Canvas response while {context or 'calling the API'}", context=context)


__all__ = [
    "AuthError",
    "CanvasError",
    "ConfigError",
    "DecodeError",
    "GradeHubError",
    "UpstreamError",
]
