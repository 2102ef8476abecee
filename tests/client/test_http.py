"""Unit tests for the client HTTP layer (client/_http.py).

The tests verify:

1. _parse_error_response: extracting error info from response bodies
2. _raise_for_status: mapping status codes to exception types
3. _calculate_backoff: exponential backoff for retries
4. AsyncHTTPClient: requests, error mapping and retry behavior

Note: These tests use httpx's mock transport to avoid real network calls.
"""

import json

import httpx
import pytest

from client._http import (
    DEFAULT_RETRY_BACKOFF_BASE,
    DEFAULT_RETRY_BACKOFF_MAX,
    RETRYABLE_STATUS_CODES,
    AsyncHTTPClient,
    _calculate_backoff,
    _parse_error_response,
    _raise_for_status,
)
from client.exceptions import (
    APIError,
    ConnectionError,
    NotFoundError,
    ServerError,
    TimeoutError,
    ValidationError,
)


def create_client(handler, **kwargs) -> AsyncHTTPClient:
    return AsyncHTTPClient(
        base_url="http://testserver",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.fixture(autouse=True)
def no_backoff_sleep(monkeypatch):
    """Skip real sleeping between retries."""
    monkeypatch.setattr("client._http._calculate_backoff", lambda attempt: 0)


# =============================================================================
# Error mapping
# =============================================================================


class TestParseErrorResponse:
    """Tests for _parse_error_response."""

    def test_service_error_body(self) -> None:
        """The project service's {"error", "detail", "type", "details"} body."""
        response = httpx.Response(
            404,
            json={
                "error": "Project Not Found",
                "detail": "Project 'p-9' not found",
                "type": "not_found",
                "details": {"project_id": "p-9"},
            },
        )
        message, error_type, details = _parse_error_response(response)

        assert message == "Project 'p-9' not found"
        assert error_type == "not_found"
        assert details == {"project_id": "p-9"}

    def test_fastapi_validation_errors(self) -> None:
        """Test FastAPI's list-of-errors validation body."""
        response = httpx.Response(
            422,
            json={
                "detail": [
                    {"loc": ["body", "projectId"], "msg": "Field required", "type": "missing"},
                ]
            },
        )
        message, error_type, details = _parse_error_response(response)

        assert message == "projectId: Field required"
        assert error_type == "validation_error"
        assert "errors" in details

    def test_detail_as_dict(self) -> None:
        """Test a detail given as a dict."""
        response = httpx.Response(400, json={"detail": {"message": "bad", "type": "custom"}})
        message, error_type, _ = _parse_error_response(response)

        assert message == "bad"
        assert error_type == "custom"

    def test_plain_text(self) -> None:
        """Test a non-JSON body."""
        response = httpx.Response(500, text="Internal Server Error")
        assert _parse_error_response(response) == ("Internal Server Error", None, None)

    def test_empty_body(self) -> None:
        """Test that an empty body falls back to the status code."""
        message, _, _ = _parse_error_response(httpx.Response(404, text=""))
        assert "404" in message


class TestRaiseForStatus:
    """Tests for _raise_for_status."""

    def test_success_does_not_raise(self) -> None:
        """Test that a 2xx response does not raise."""
        _raise_for_status(httpx.Response(200, json={}))

    @pytest.mark.parametrize(
        "status_code,exception",
        [
            (422, ValidationError),
            (404, NotFoundError),
            (500, ServerError),
            (503, ServerError),
            (400, APIError),
            (409, APIError),
        ],
    )
    def test_maps_status(self, status_code, exception) -> None:
        """Test that each status code maps to its exception type."""
        with pytest.raises(exception) as exc_info:
            _raise_for_status(httpx.Response(status_code, json={"detail": "nope"}))

        assert exc_info.value.status_code == status_code
        assert exc_info.value.response_body == {"detail": "nope"}


# =============================================================================
# Backoff
# =============================================================================


class TestCalculateBackoff:
    """Tests for _calculate_backoff."""

    def test_exponential(self) -> None:
        """Test that the delay doubles per attempt."""
        assert _calculate_backoff(0) == DEFAULT_RETRY_BACKOFF_BASE
        assert _calculate_backoff(2) == DEFAULT_RETRY_BACKOFF_BASE * 4

    def test_capped(self) -> None:
        """Test that the delay is capped."""
        assert _calculate_backoff(30) == DEFAULT_RETRY_BACKOFF_MAX


# =============================================================================
# Requests
# =============================================================================


class TestAsyncHTTPClient:
    """Tests for AsyncHTTPClient request handling."""

    def test_base_url_trailing_slash_stripped(self) -> None:
        """Test that a trailing slash is stripped from base_url."""
        client = AsyncHTTPClient(base_url="http://testserver/")
        assert client.base_url == "http://testserver"

    async def test_context_manager(self) -> None:
        """Test async context manager support."""
        async with AsyncHTTPClient(base_url="http://testserver") as client:
            assert isinstance(client, AsyncHTTPClient)

    async def test_put_sends_json(self) -> None:
        """Test that put sends the JSON body."""
        async def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "PUT"
            assert request.url.path == "/projects/update-file-tree"
            assert json.loads(request.content) == {"projectId": "p-1"}
            return httpx.Response(200, json={"ok": True})

        client = create_client(handler)
        assert await client.put("/projects/update-file-tree", json={"projectId": "p-1"}) == {
            "ok": True
        }
        await client.close()

    async def test_get_filters_none_params(self) -> None:
        """Test that None query parameters are dropped."""
        async def handler(request: httpx.Request) -> httpx.Response:
            assert "keep=1" in str(request.url)
            assert "drop" not in str(request.url)
            return httpx.Response(200, json=[])

        client = create_client(handler)
        assert await client.get("/users/all", params={"keep": 1, "drop": None}) == []
        await client.close()

    async def test_empty_body_returns_none(self) -> None:
        """Test that an empty response body returns None."""
        client = create_client(lambda request: httpx.Response(204))
        assert await client.put("/projects/add-user", json={}) is None
        await client.close()

    async def test_error_status_raises(self) -> None:
        """Test that an error status raises the mapped exception."""
        client = create_client(lambda request: httpx.Response(404, json={"detail": "missing"}))

        with pytest.raises(NotFoundError, match="missing"):
            await client.get("/projects/get-project/p-9")
        await client.close()

    async def test_connect_error(self) -> None:
        """Test that a connect failure raises ConnectionError with the URL."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = create_client(handler)
        with pytest.raises(ConnectionError) as exc_info:
            await client.get("/users/all")

        assert exc_info.value.url == "http://testserver/users/all"
        await client.close()

    async def test_timeout(self) -> None:
        """Test that a timeout raises TimeoutError with the timeout."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        client = create_client(handler, timeout=2.5)
        with pytest.raises(TimeoutError) as exc_info:
            await client.get("/users/all")

        assert exc_info.value.timeout == 2.5
        await client.close()


# =============================================================================
# Retry
# =============================================================================


class TestRetry:
    """Retry behavior when retry_enabled is set."""

    async def test_retries_transient_status(self) -> None:
        """Test that 5xx responses are retried until success."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) < 3:
                return httpx.Response(503, text="busy")
            return httpx.Response(200, json={"ok": True})

        client = create_client(handler, retry_enabled=True, max_retries=3)

        assert await client.get("/users/all") == {"ok": True}
        assert len(calls) == 3
        await client.close()

    async def test_gives_up_after_max_retries(self) -> None:
        """Test that the last error is raised after max_retries."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(502, text="bad gateway")

        client = create_client(handler, retry_enabled=True, max_retries=2)

        with pytest.raises(ServerError) as exc_info:
            await client.get("/users/all")
        assert exc_info.value.status_code == 502
        assert len(calls) == 3
        await client.close()

    async def test_no_retry_when_disabled(self) -> None:
        """Test that nothing is retried by default."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        client = create_client(handler)

        with pytest.raises(ServerError):
            await client.get("/users/all")
        assert len(calls) == 1
        await client.close()

    async def test_client_errors_not_retried(self) -> None:
        """Test that 4xx responses are never retried."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(422, json={"detail": "bad tree"})

        client = create_client(handler, retry_enabled=True)

        with pytest.raises(ValidationError):
            await client.put("/projects/update-file-tree", json={})
        assert len(calls) == 1
        assert 422 not in RETRYABLE_STATUS_CODES
        await client.close()

    async def test_retries_connect_errors(self) -> None:
        """Test that connect failures are retried."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json={})

        client = create_client(handler, retry_enabled=True, max_retries=1)

        assert await client.get("/users/all") == {}
        assert len(calls) == 2
        await client.close()
