"""Response models for the project service.

These mirror the JSON returned by the FastAPI app in main.py. The file tree
stays in its wire shape here; models/file_tree.py parses it.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UserRecord(BaseModel):
    """A user known to the project service.

    Attributes:
        id: User identifier.
        display_name: Name shown in collaborator lists.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    display_name: str = Field(default="", alias="displayName")


class ProjectRecord(BaseModel):
    """A project with its collaborators and persisted file tree.

    Attributes:
        id: Project identifier.
        name: Project name.
        users: Collaborator ids.
        file_tree: Persisted file tree in wire shape.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    users: list[str] = Field(default_factory=list)
    file_tree: dict[str, Any] = Field(default_factory=dict, alias="fileTree")


class ProjectResponse(BaseModel):
    """Envelope returned by project endpoints: ``{"project": {...}}``."""

    project: ProjectRecord


class UserListResponse(BaseModel):
    """Envelope returned by the user directory: ``{"users": [...]}``."""

    users: list[UserRecord]
