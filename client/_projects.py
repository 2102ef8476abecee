"""Project sub-client (/projects/*).

Covers the three project operations the workspace consumes: fetching a
project with its persisted tree, persisting a new tree, and adding
collaborators.

This is an internal module. Import from `client` instead.
"""

from typing import Any

from client._base import AsyncBaseClient
from client.models import ProjectRecord, ProjectResponse


class AsyncProjectsClient(AsyncBaseClient):
    """Async client for project endpoints.

    Example:
        async with AsyncCoderoomClient() as client:
            project = await client.projects.get_project("p-1")
            await client.projects.update_file_tree("p-1", project.file_tree)
    """

    async def get_project(self, project_id: str) -> ProjectRecord:
        """Fetch a project, including its users and persisted file tree.

        Raises:
            NotFoundError: If the project does not exist.
        """
        data = await self._get(f"/projects/get-project/{project_id}")
        return ProjectResponse(**data).project

    async def update_file_tree(self, project_id: str, file_tree: dict[str, Any]) -> ProjectRecord:
        """Persist a project's file tree (wire shape).

        Raises:
            NotFoundError: If the project does not exist.
            ValidationError: If file_tree is not a valid tree.
        """
        data = await self._put(
            "/projects/update-file-tree",
            json={"projectId": project_id, "fileTree": file_tree},
        )
        return ProjectResponse(**data).project

    async def add_collaborators(self, project_id: str, user_ids: list[str]) -> ProjectRecord:
        """Add users to a project.

        Raises:
            NotFoundError: If the project or one of the users does not exist.
        """
        data = await self._put(
            "/projects/add-user",
            json={"projectId": project_id, "users": list(user_ids)},
        )
        return ProjectResponse(**data).project

    async def create_project(self, name: str, user_ids: list[str] | None = None) -> ProjectRecord:
        """Create an empty project.

        Raises:
            NotFoundError: If one of the initial collaborators does not exist.
        """
        data = await self._post("/projects/create", json={"name": name, "users": list(user_ids or [])})
        return ProjectResponse(**data).project
