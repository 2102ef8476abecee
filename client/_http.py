"""Internal HTTP handling for the project service client.

Provides the async request layer shared by the project and user
sub-clients:
- Response parsing and status-code to exception mapping
- Retry with exponential backoff for transient failures
- Connection management

This is an internal module and should not be imported directly by users.
"""

import asyncio
import logging
from typing import Any, Literal

import httpx

from client.exceptions import (
    APIError,
    ConnectionError,
    NotFoundError,
    ServerError,
    TimeoutError,
    ValidationError,
)

logger = logging.getLogger(__name__)

HttpMethod = Literal["GET", "POST", "PUT"]

# Status codes that trigger automatic retry (when retry is enabled)
RETRYABLE_STATUS_CODES = {502, 503, 504}

DEFAULT_RETRY_BACKOFF_BASE = 0.5  # seconds
DEFAULT_RETRY_BACKOFF_MAX = 30.0  # seconds


def _parse_error_response(response: httpx.Response) -> tuple[str, str | None, dict | None]:
    """Extract (message, error_type, details) from an error response.

    Understands FastAPI's ``{"detail": ...}`` format (string, validation
    list, or dict) and ``{"error": ...}`` bodies; falls back to raw text.
    """
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return (text or f"HTTP {response.status_code} error"), None, None

    if isinstance(body, dict):
        detail = body.get("detail")
        if isinstance(detail, str):
            return detail, body.get("type") or body.get("error"), body.get("details")
        if isinstance(detail, list):
            messages = [
                f"{err.get('loc', ['unknown'])[-1]}: {err.get('msg', 'invalid')}"
                for err in detail
                if isinstance(err, dict)
            ]
            return "; ".join(messages), "validation_error", {"errors": detail}
        if isinstance(detail, dict):
            return detail.get("message", str(detail)), detail.get("type"), detail
        if "error" in body:
            return str(body["error"]), body.get("type"), body.get("details")
    return str(body), None, None


def _raise_for_status(response: httpx.Response) -> None:
    """Raise the exception matching an error status code.

    Raises:
        ValidationError: For HTTP 422.
        NotFoundError: For HTTP 404.
        ServerError: For HTTP 5xx.
        APIError: For any other 4xx.
    """
    if response.is_success:
        return

    message, error_type, details = _parse_error_response(response)
    status_code = response.status_code
    try:
        response_body = response.json()
    except ValueError:
        response_body = response.text

    if status_code == 422:
        raise ValidationError(message=message, details=details, response_body=response_body)
    if status_code == 404:
        raise NotFoundError(message=message, details=details, response_body=response_body)
    if status_code >= 500:
        raise ServerError(
            message=message,
            status_code=status_code,
            details=details,
            response_body=response_body,
        )
    raise APIError(
        message=message,
        status_code=status_code,
        error_type=error_type,
        details=details,
        response_body=response_body,
    )


def _calculate_backoff(attempt: int, base: float = DEFAULT_RETRY_BACKOFF_BASE) -> float:
    """Exponential backoff ``base * 2**attempt``, capped at DEFAULT_RETRY_BACKOFF_MAX."""
    return min(base * (2**attempt), DEFAULT_RETRY_BACKOFF_MAX)


class AsyncHTTPClient:
    """Async HTTP client for the project service.

    Wraps httpx.AsyncClient with error mapping and optional retry.

    Attributes:
        base_url: The base URL for all requests.
        timeout: Request timeout in seconds.
        retry_enabled: Whether to retry on transient failures.
        max_retries: Maximum number of retry attempts.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: The base URL for all requests.
            timeout: Request timeout in seconds.
            retry_enabled: Whether to retry on transient failures.
            max_retries: Maximum number of retry attempts.
            transport: Custom transport (e.g. ASGITransport or MockTransport in tests).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def request(
        self,
        method: HttpMethod,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Make a request and return the parsed JSON body (None if empty).

        Raises:
            ConnectionError: If the connection fails.
            TimeoutError: If the request times out.
            APIError: If the server returns an error response.
        """
        url = f"{self.base_url}{path}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        attempts = self.max_retries + 1 if self.retry_enabled else 1
        for attempt in range(attempts):
            last_attempt = attempt >= attempts - 1
            try:
                response = await self._client.request(
                    method=method,
                    url=path,
                    params=params,
                    json=json,
                )
            except httpx.ConnectError as e:
                if last_attempt:
                    raise ConnectionError(
                        message=f"Failed to connect to {url}", url=url, cause=e
                    ) from e
            except httpx.TimeoutException as e:
                if last_attempt:
                    raise TimeoutError(
                        message=f"Request to {url} timed out",
                        timeout=self.timeout,
                        url=url,
                    ) from e
            else:
                if response.status_code in RETRYABLE_STATUS_CODES and not last_attempt:
                    logger.debug(f"{method} {path} returned {response.status_code}; retrying")
                else:
                    _raise_for_status(response)
                    if response.content:
                        return response.json()
                    return None

            await asyncio.sleep(_calculate_backoff(attempt))

        raise RuntimeError("Unexpected exit from request retry loop")

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(
        self,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        return await self.request("POST", path, params=params, json=json)

    async def put(
        self,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        return await self.request("PUT", path, params=params, json=json)
