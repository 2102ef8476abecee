"""Main client entry point for the project service.

Example:
    async with AsyncCoderoomClient(base_url="http://localhost:8000") as client:
        project = await client.projects.get_project("p-1")
        users = await client.users.list_users()
"""

from typing import Any

import httpx

from client._http import AsyncHTTPClient
from client._projects import AsyncProjectsClient
from client._users import AsyncUsersClient
from config import Settings


class AsyncCoderoomClient:
    """Async client for the project service REST API.

    Attributes:
        base_url: The base URL of the project service.
        projects: Project endpoints (fetch, persist tree, add collaborators).
        users: User directory.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: The base URL of the project service.
            timeout: Request timeout in seconds.
            retry_enabled: Retry transient failures with exponential backoff.
            max_retries: Maximum number of retries.
            transport: Custom httpx transport (e.g. ASGITransport in tests).
        """
        self._http = AsyncHTTPClient(
            base_url=base_url,
            timeout=timeout,
            retry_enabled=retry_enabled,
            max_retries=max_retries,
            transport=transport,
        )
        self.projects = AsyncProjectsClient(self._http)
        self.users = AsyncUsersClient(self._http)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "AsyncCoderoomClient":
        return cls(
            base_url=settings.api_url,
            timeout=settings.http_timeout,
            retry_enabled=settings.http_retry_enabled,
            max_retries=settings.http_max_retries,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._http.base_url

    async def close(self) -> None:
        await self._http.close()

    async def __aenter__(self) -> "AsyncCoderoomClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
