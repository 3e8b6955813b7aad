import httpx
import pytest

from gradehub.canvas.client import CanvasClient
from gradehub.core.errors import AuthError, DecodeError, UpstreamError
from tests.mocks.canvas_api import CanvasAPIMock, make_config


def _client(handler, **overrides) -> CanvasClient:
    transport = httpx.MockTransport(handler)
    return CanvasClient(make_config(**overrides), client=httpx.Client(transport=transport))


def test_fetch_prefixes_host_and_sends_bearer_token() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["authorization"] = request.headers.get("authorization")
        return httpx.Response(200, json={"id": 101, "name": "Biology"})

    client = _client(handler)
    result = client.fetch("/api/v1/courses/101", "fetching course")

    assert result == {"id": 101, "name": "Biology"}
    assert captured["url"] == "https://canvas.test/api/v1/courses/101"
    assert captured["authorization"] == "Bearer test-token"


def test_fetch_passes_absolute_urls_through() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json=[])

    _client(handler).fetch("https://elsewhere.test/api/v1/courses/5/assignments", "fetching")

    assert seen == ["https://elsewhere.test/api/v1/courses/5/assignments"]


def test_fetch_returns_none_for_empty_body() -> None:
    client = _client(lambda request: httpx.Response(200, content=b""))
    assert client.fetch("/api/v1/courses/101", "fetching course") is None


@pytest.mark.parametrize("status", [401, 403])
def test_auth_failures_raise_auth_error(status: int) -> None:
    client = _client(lambda request: httpx.Response(status, json={"errors": []}))

    with pytest.raises(AuthError) as excinfo:
        client.fetch("/api/v1/courses/101", "fetching course")

    assert excinfo.value.status == status
    assert excinfo.value.context == "fetching course"
    assert str(status) in str(excinfo.value)


def test_other_statuses_raise_upstream_error_with_truncated_body() -> None:
    client = _client(lambda request: httpx.Response(500, text="x" * 2000))

    with pytest.raises(UpstreamError) as excinfo:
        client.fetch("/api/v1/courses/101", "fetching course")

    assert excinfo.value.status == 500
    assert len(excinfo.value.body) == 500


def test_malformed_json_raises_decode_error() -> None:
    client = _client(lambda request: httpx.Response(200, text="<html>not json</html>"))

    with pytest.raises(DecodeError):
        client.fetch("/api/v1/courses/101", "fetching course")


def test_transport_failures_raise_upstream_error_without_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError) as excinfo:
        _client(handler).fetch("/api/v1/courses/101", "fetching course")

    assert excinfo.value.status is None


def test_fetch_all_follows_link_headers() -> None:
    api = CanvasAPIMock(page_size=2)
    api.add_course("101", "Biology", students=[(1, "Ada"), (2, "Ben"), (3, "Cy"), (4, "Di"), (5, "Ed")])
    client = api.client(make_config())

    students = client.list_students("101")

    assert [student.name for student in students] == ["Ada", "Ben", "Cy", "Di", "Ed"]
    assert len(api.requests) == 3


def test_fetch_all_single_page_when_pagination_disabled() -> None:
    api = CanvasAPIMock(page_size=2)
    api.add_course("101", "Biology", students=[(1, "Ada"), (2, "Ben"), (3, "Cy")])
    client = api.client(make_config(follow_pagination=False))

    students = client.list_students("101")

    assert [student.name for student in students] == ["Ada", "Ben"]
    assert len(api.requests) == 1


def test_fetch_all_stops_at_max_pages() -> None:
    api = CanvasAPIMock(page_size=1)
    api.add_course("101", "Biology", students=[(1, "Ada"), (2, "Ben"), (3, "Cy")])
    client = api.client(make_config(max_pages=2))

    assert len(client.list_students("101")) == 2
    assert len(api.requests) == 2


def test_list_submissions_requests_user_expansion_only_when_asked() -> None:
    api = CanvasAPIMock()
    api.add_course("101", "Biology")
    api.add_assignment("101", "9", "Lab 1")
    client = api.client(make_config())

    client.list_submissions("101", "9", include_user=True)
    client.list_submissions("101", "9", include_user=False)

    expanded, raw = api.requests
    assert expanded.url.params.get_list("include[]") == ["user"]
    assert expanded.url.params["per_page"] == "100"
    assert raw.url.params.get_list("include[]") == []
    assert raw.url.params["per_page"] == "100"


def test_list_students_falls_back_to_sortable_name_and_skips_missing_ids() -> None:
    payload = [
        {"id": 1, "name": "Ada Lovelace"},
        {"id": 2, "sortable_name": "Babbage, Charles"},
        {"id": 3},
        {"name": "No Id"},
    ]
    client = _client(lambda request: httpx.Response(200, json=payload))

    students = client.list_students("101")

    assert [(student.id, student.name) for student in students] == [
        ("1", "Ada Lovelace"),
        ("2", "Babbage, Charles"),
        ("3", "Unknown Student"),
    ]


def test_list_assignments_parses_optional_created_at() -> None:
    payload = [
        {"id": 1, "name": "Essay", "created_at": "2024-02-01T10:00:00Z"},
        {"id": 2, "name": "Quiz", "created_at": None},
    ]
    client = _client(lambda request: httpx.Response(200, json=payload))

    essay, quiz = client.list_assignments("101")

    assert essay.id == "1"
    assert essay.created_at is not None and essay.created_at.year == 2024
    assert quiz.created_at is None


def test_get_course_returns_none_for_empty_body() -> None:
    client = _client(lambda request: httpx.Response(200, content=b""))
    assert client.get_course("101") is None


def test_injected_http_client_is_not_closed() -> None:
    http_client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))
    with CanvasClient(make_config(), client=http_client):
        pass
    assert not http_client.is_closed


def test_whitespace_body_returns_none() -> None:
    client = _client(lambda request: httpx.Response(200, content=b"  \n"))
    assert client.fetch("/api/v1/courses/101", "fetching course") is None


def test_json_body_decoded_from_response() -> None:
    client = _client(lambda request: httpx.Response(200, content=b'[{"id": 5}]', headers={"content-type": "application/json"}))
    assert client.fetch("/api/v1/courses/101/assignments", "fetching") == [{"id": 5}]
