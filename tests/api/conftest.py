"""Shared fixtures for API tests."""

import pytest


@pytest.fixture
def client_with_project(test_client, seeded_project):
    """Provide a TestClient and the seeded project.

    Example:
        def test_something(client_with_project):
            client, project = client_with_project
            response = client.get(f"/projects/get-project/{project.id}")
    """
    return test_client, seeded_project
