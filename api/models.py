"""Request and response models for the project service endpoints.

Field aliases keep the camelCase wire names (``projectId``, ``fileTree``,
``displayName``) used by the realtime clients.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    display_name: str = Field(default="", serialization_alias="displayName", alias="displayName")


class ProjectBody(BaseModel):
    """A project as returned to clients.

    Attributes:
        id: Project identifier.
        name: Project name.
        users: Collaborator ids.
        file_tree: Saved file tree in wire shape.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    users: list[str]
    file_tree: dict[str, Any] = Field(alias="fileTree", serialization_alias="fileTree")


class ProjectResponse(BaseModel):
    project: ProjectBody


class UserListResponse(BaseModel):
    users: list[UserResponse]


class CreateUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    display_name: str = Field(alias="displayName", min_length=1)
    id: str | None = Field(default=None, description="Optional fixed user id")


class CreateProjectRequest(BaseModel):
    """Request model for creating a project.

    Attributes:
        name: Project name.
        users: Initial collaborator ids.
    """

    name: str = Field(min_length=1)
    users: list[str] = Field(default_factory=list)


class UpdateFileTreeRequest(BaseModel):
    """Request model for saving a project's file tree.

    The tree is validated against the file tree shape by the route, so a
    malformed tree is reported with the location of the offending node.
    """

    model_config = ConfigDict(populate_by_name=True)

    project_id: str = Field(alias="projectId")
    file_tree: dict[str, Any] = Field(alias="fileTree")


class AddUsersRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_id: str = Field(alias="projectId")
    users: list[str] = Field(min_length=1)
