"""Integration tests for AsyncCoderoomClient against the in-process app.

Requests go through httpx.ASGITransport into main.app, backed by the
ProjectStore from the project_store fixture.
"""

import pytest

from client import AsyncCoderoomClient, NotFoundError, ValidationError
from config import Settings
from models.file_tree import parse_file_tree
from tests.fixtures.trees import create_project_tree, file_node


class TestProjects:
    """Tests for ProjectsResource."""

    async def test_get_project(self, api_client, seeded_project):
        """Test fetching a seeded project."""
        project = await api_client.projects.get_project(seeded_project.id)

        assert project.id == seeded_project.id
        assert project.name == "demo"
        assert project.users == ["alice"]
        assert parse_file_tree(project.file_tree) == parse_file_tree(create_project_tree())

    async def test_get_unknown_project(self, api_client):
        """Test that an unknown project raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            await api_client.projects.get_project("missing")

        assert exc_info.value.details == {"project_id": "missing"}

    async def test_update_file_tree(self, api_client, seeded_project):
        """Test that a saved tree is returned and persisted."""
        tree = {"index.js": file_node("console.log(1);")}

        project = await api_client.projects.update_file_tree(seeded_project.id, tree)

        assert project.file_tree == tree
        assert (await api_client.projects.get_project(seeded_project.id)).file_tree == tree

    async def test_update_with_invalid_tree(self, api_client, seeded_project):
        """Test that an invalid tree raises ValidationError with its location."""
        with pytest.raises(ValidationError) as exc_info:
            await api_client.projects.update_file_tree(
                seeded_project.id, {"src": {"directory": {"App.js": {"file": 3}}}}
            )

        assert exc_info.value.details == {"location": "src/App.js"}

    async def test_add_collaborators(self, api_client, seeded_project):
        """Test that collaborators are added without duplicates."""
        project = await api_client.projects.add_collaborators(seeded_project.id, ["bob", "alice"])
        assert project.users == ["alice", "bob"]

    async def test_add_unknown_collaborator(self, api_client, seeded_project):
        """Test that an unknown collaborator raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await api_client.projects.add_collaborators(seeded_project.id, ["mallory"])

    async def test_create_project(self, api_client, seeded_project):
        """Test creating a project with an empty tree."""
        project = await api_client.projects.create_project("second", ["bob"])

        assert project.name == "second"
        assert project.users == ["bob"]
        assert project.file_tree == {}


class TestUsers:
    """Tests for UsersResource."""

    async def test_list_users(self, api_client, seeded_project):
        """Test listing users."""
        users = await api_client.users.list_users()
        assert [(user.id, user.display_name) for user in users] == [
            ("alice", "Alice"),
            ("bob", "Bob"),
        ]

    async def test_create_user(self, api_client, project_store):
        """Test creating a user."""
        user = await api_client.users.create_user("Carol")

        assert user.display_name == "Carol"
        assert [u.id for u in project_store.list_users()] == [user.id]


class TestClientConstruction:
    """Tests for AsyncCoderoomClient construction."""

    def test_from_settings(self):
        """Test that from_settings applies the HTTP settings."""
        settings = Settings(api_url="http://service:9000", http_timeout=5, http_retry_enabled=True)
        client = AsyncCoderoomClient.from_settings(settings)

        assert client.base_url == "http://service:9000"
        assert client._http.timeout == 5
        assert client._http.retry_enabled
