"""HTTP client for the read-only slice of the Canvas REST API gradehub uses."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from gradehub.core.config import HubConfig
from gradehub.core.errors import AuthError, DecodeError, UpstreamError

from .models import Assignment, Course, Student, Submission

PER_PAGE = 100
BODY_PREVIEW_CHARS = 500

LOGGER = logging.getLogger("gradehub.canvas")

ModelT = TypeVar("ModelT", bound=BaseModel)


class CanvasClient:
    """Authenticated GETs against ``https://{base_host}`` with error classification.

    No call is retried; callers decide whether a failed resource is skipped.
    """

    def __init__(
        self,
        config: HubConfig,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self._config = config
        if client is None:
            self._client = httpx.Client(timeout=config.request_timeout)
            self._owns_client = True
        else:
            self._client = client
            self._owns_client = False

    def fetch(self, path: str, context: str) -> Any:
        """Return the decoded JSON for one request, or None for an empty body."""

        response = self._get(self._resolve(path), context)
        return self._decode(response, context)

    def fetch_all(self, path: str, context: str) -> List[Any]:
        """Collect a list endpoint, following ``Link: rel="next"`` when enabled."""

        url: str | None = self._resolve(path)
        items: List[Any] = []
        pages = 0
        while url:
            response = self._get(url, context)
            data = self._decode(response, context)
            pages += 1
            if data is None:
                break
            if not isinstance(data, list):
                LOGGER.warning("Expected a list while %s; got %s", context, type(data).__name__)
                break
            items.extend(data)
            if not self._config.follow_pagination:
                break
            if pages >= self._config.max_pages:
                LOGGER.warning("Stopped after %s pages while %s", pages, context)
                break
            url = response.links.get("next", {}).get("url")
        return items

    def get_course(self, course_id: str) -> Course | None:
        data = self.fetch(f"/api/v1/courses/{course_id}", f"fetching course {course_id}")
        if not isinstance(data, dict):
            return None
        payload = dict(data)
        payload.setdefault("id", course_id)
        return _parse(Course, payload, f"fetching course {course_id}")

    def list_assignments(self, course_id: str) -> List[Assignment]:
        context = f"fetching assignments for course {course_id}"
        items = self.fetch_all(f"/api/v1/courses/{course_id}/assignments?per_page={PER_PAGE}", context)
        return _parse_each(Assignment, items, context)

    def list_submissions(
        self,
        course_id: str,
        assignment_id: str,
        *,
        include_user: bool = True,
    ) -> List[Submission]:
        base = f"/api/v1/courses/{course_id}/assignments/{assignment_id}/submissions"
        if include_user:
            path = f"{base}?include[]=user&per_page={PER_PAGE}"
            context = f"fetching submissions for assignment {assignment_id}"
        else:
            path = f"{base}?per_page={PER_PAGE}"
            context = f"fetching raw submissions for assignment {assignment_id}"
        return _parse_each(Submission, self.fetch_all(path, context), context)

    def list_students(self, course_id: str) -> List[Student]:
        context = f"fetching students for course {course_id}"
        items = self.fetch_all(
            f"/api/v1/courses/{course_id}/users?enrollment_type[]=student&per_page={PER_PAGE}",
            context,
        )
        students: List[Student] = []
        for item in items:
            if not isinstance(item, dict) or item.get("id") is None:
                LOGGER.warning("Skipping roster entry without an id while %s", context)
                continue
            students.append(Student.from_payload(item))
        return students

    def close(self) -> None:
        if getattr(self, "_owns_client", False):
            self._client.close()

    def _resolve(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._config.api_root}{path}"

    def _get(self, url: str, context: str) -> httpx.Response:
        LOGGER.debug("GET %s (%s)", url, context)
        try:
            response = self._client.get(url, headers=self._build_headers())
        except httpx.HTTPError as exc:
            raise UpstreamError(None, str(exc), context=context) from exc

        status = response.status_code
        if status in (401, 403):
            raise AuthError(status, context=context)
        if status < 200 or status >= 300:
            raise UpstreamError(status, response.text[:BODY_PREVIEW_CHARS], context=context)
        return response

    @staticmethod
    def _decode(response: httpx.Response, context: str) -> Any:
        if not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(context=context) from exc

    def _build_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._config.api_token}"}

    def __enter__(self) -> "CanvasClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _parse(model: Type[ModelT], payload: Any, context: str) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(context=context) from exc


def _parse_each(model: Type[ModelT], items: List[Any], context: str) -> List[ModelT]:
    parsed: List[ModelT] = []
    for item in items:
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as exc:
            LOGGER.warning("Skipping malformed %s while %s (%s validation errors)", model.__name__, context, exc.error_count())
    return parsed


__all__ = ["CanvasClient", "PER_PAGE"]
