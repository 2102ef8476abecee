"""Exception hierarchy for the coderoom client library.

Exception Hierarchy:
    CoderoomClientError (base)
    ├── ConnectionError - Network/connection failures
    ├── TimeoutError - Request timeout
    ├── ChannelError - Realtime channel misuse or failure
    └── APIError - Server returned an error response
        ├── ValidationError (HTTP 422)
        ├── NotFoundError (HTTP 404)
        └── ServerError (HTTP 5xx)

The channel manager itself reports failures as booleans and state changes
(``send`` returns False, ``receive`` returns False before a channel exists);
ChannelError is raised by callers that need an exception instead, such as
``Workspace.send_message(..., strict=True)``.

Example:
    Catching project service errors::

        try:
            project = await client.projects.get_project(project_id)
        except NotFoundError:
            project = None
        except APIError as e:
            print(f"API error {e.status_code}: {e.message}")
"""

from typing import Any


class CoderoomClientError(Exception):
    """Base exception for all client errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ConnectionError(CoderoomClientError):
    """Failed to reach the project service.

    Attributes:
        url: The URL that failed to connect.
        cause: The underlying exception.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.url = url
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.url:
            return f"{self.message} (url: {self.url})"
        return self.message


class TimeoutError(CoderoomClientError):
    """A request took longer than the configured timeout.

    Attributes:
        timeout: The timeout value in seconds.
        url: The URL that timed out.
    """

    def __init__(
        self,
        message: str,
        timeout: float | None = None,
        url: str | None = None,
    ) -> None:
        self.timeout = timeout
        self.url = url
        super().__init__(message)

    def __str__(self) -> str:
        details = []
        if self.timeout is not None:
            details.append(f"timeout: {self.timeout}s")
        if self.url:
            details.append(f"url: {self.url}")
        if not details:
            return self.message
        return f"{self.message} ({', '.join(details)})"


class ChannelError(CoderoomClientError):
    """The realtime channel could not deliver or accept an operation.

    Attributes:
        channel_key: Key of the channel involved, if one was initialized.
        retryable: Whether a manual reconnect may fix the problem.
    """

    def __init__(
        self,
        message: str,
        channel_key: str | None = None,
        retryable: bool = True,
    ) -> None:
        self.channel_key = channel_key
        self.retryable = retryable
        super().__init__(message)


class APIError(CoderoomClientError):
    """The project service returned an error response.

    Attributes:
        status_code: HTTP status code.
        error_type: Error type from the response body, if present.
        details: Additional error details, if present.
        response_body: Raw response body for debugging.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        self.response_body = response_body
        super().__init__(message)

    def __str__(self) -> str:
        if self.error_type:
            return f"[HTTP {self.status_code}] [{self.error_type}] {self.message}"
        return f"[HTTP {self.status_code}] {self.message}"


class ValidationError(APIError):
    """Request validation failed (HTTP 422), e.g. a malformed file tree."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=422,
            error_type="validation_error",
            details=details,
            response_body=response_body,
        )


class NotFoundError(APIError):
    """Unknown project or user (HTTP 404)."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=404,
            error_type="not_found",
            details=details,
            response_body=response_body,
        )


class ServerError(APIError):
    """Server-side failure (HTTP 5xx). Retried when retry is enabled."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status_code,
            error_type="server_error",
            details=details,
            response_body=response_body,
        )
