"""User directory sub-client (/users/*).

This is an internal module. Import from `client` instead.
"""

from client._base import AsyncBaseClient
from client.models import UserListResponse, UserRecord


class AsyncUsersClient(AsyncBaseClient):
    """Async client for the user directory, used to pick collaborators."""

    async def list_users(self) -> list[UserRecord]:
        data = await self._get("/users/all")
        return UserListResponse(**data).users

    async def create_user(self, display_name: str, user_id: str | None = None) -> UserRecord:
        data = await self._post("/users/create", json={"displayName": display_name, "id": user_id})
        return UserRecord(**data)
