"""Tests for the project and user routes."""

from fastapi import status

from tests.fixtures.trees import file_node


# =============================================================================
# Projects
# =============================================================================


class TestGetProject:
    """Tests for GET /projects/get-project/{project_id}."""

    def test_returns_project_envelope(self, client_with_project):
        """Test that the project is returned inside a project envelope."""
        client, project = client_with_project

        response = client.get(f"/projects/get-project/{project.id}")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()["project"]
        assert body["id"] == project.id
        assert body["users"] == ["alice"]
        assert body["fileTree"]["src"]["directory"]["App.js"] == file_node("export default App;\n")

    def test_unknown_project(self, test_client):
        """Test that an unknown project id returns 404."""
        response = test_client.get("/projects/get-project/nope")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["type"] == "not_found"


class TestUpdateFileTree:
    """Tests for PUT /projects/update-file-tree."""

    def test_saves_tree(self, client_with_project):
        """Test that a valid tree is stored and echoed back."""
        client, project = client_with_project
        tree = {"app.js": file_node("1")}

        response = client.put(
            "/projects/update-file-tree", json={"projectId": project.id, "fileTree": tree}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["project"]["fileTree"] == tree
        assert project.file_tree == tree

    def test_rejects_malformed_tree(self, client_with_project):
        """Test that a malformed tree returns 422 with its location."""
        client, project = client_with_project

        response = client.put(
            "/projects/update-file-tree",
            json={"projectId": project.id, "fileTree": {"app.js": {"symlink": {}}}},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["details"] == {"location": "app.js"}
        assert "src" in project.file_tree

    def test_missing_fields(self, test_client):
        """Test that a request without projectId returns 422."""
        response = test_client.put("/projects/update-file-tree", json={"fileTree": {}})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestAddUser:
    """Tests for PUT /projects/add-user."""

    def test_adds_users_once(self, client_with_project):
        """Test that adding the same user twice keeps one entry."""
        client, project = client_with_project

        response = client.put("/projects/add-user", json={"projectId": project.id, "users": ["bob"]})
        client.put("/projects/add-user", json={"projectId": project.id, "users": ["bob"]})

        assert response.status_code == status.HTTP_200_OK
        assert project.users == ["alice", "bob"]

    def test_unknown_user(self, client_with_project):
        """Test that an unknown user id returns 404 and adds nobody."""
        client, project = client_with_project

        response = client.put(
            "/projects/add-user", json={"projectId": project.id, "users": ["bob", "zed"]}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["details"] == {"user_ids": ["zed"]}
        assert project.users == ["alice"]

    def test_empty_user_list(self, client_with_project):
        """Test that an empty user list returns 422."""
        client, project = client_with_project
        response = client.put("/projects/add-user", json={"projectId": project.id, "users": []})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


# =============================================================================
# Users
# =============================================================================


class TestUsers:
    """Tests for the user routes and project creation."""

    def test_list_users(self, client_with_project):
        """Test that /users/all lists every user."""
        client, _ = client_with_project

        response = client.get("/users/all")

        assert response.json() == {
            "users": [
                {"id": "alice", "displayName": "Alice"},
                {"id": "bob", "displayName": "Bob"},
            ]
        }

    def test_create_user_and_project(self, test_client):
        """Test creating a user and then a project owned by them."""
        user = test_client.post("/users/create", json={"displayName": "Dana"}).json()

        response = test_client.post("/projects/create", json={"name": "p", "users": [user["id"]]})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["project"]["users"] == [user["id"]]


# =============================================================================
# Root
# =============================================================================


class TestRootEndpoints:
    """Tests for / and /health."""

    def test_health(self, test_client):
        """Test the health check."""
        assert test_client.get("/health").json() == {"status": "healthy"}

    def test_root(self, test_client):
        """Test that the root lists the docs URL."""
        assert test_client.get("/").json()["docs_url"] == "/docs"
