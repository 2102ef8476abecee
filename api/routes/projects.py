"""Project endpoints.

Paths follow the routes the realtime clients already call:
``/projects/get-project/{id}``, ``/projects/update-file-tree`` and
``/projects/add-user``.
"""

from fastapi import APIRouter, status

from api.dependencies import ProjectStoreDep
from api.models import (
    AddUsersRequest,
    CreateProjectRequest,
    ProjectBody,
    ProjectResponse,
    UpdateFileTreeRequest,
)
from api.store import StoredProject

router = APIRouter(
    prefix="/projects",
    tags=["projects"],
)


def _project_response(project: StoredProject) -> ProjectResponse:
    return ProjectResponse(project=ProjectBody.model_validate(project.to_dict()))


@router.post("/create", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(request: CreateProjectRequest, store: ProjectStoreDep) -> ProjectResponse:
    """Create an empty project.

    Raises:
        UserNotFoundError: If an initial collaborator does not exist (404).
    """
    return _project_response(store.create_project(request.name, request.users))


@router.get("/get-project/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: str, store: ProjectStoreDep) -> ProjectResponse:
    """Return a project with its collaborators and saved file tree."""
    return _project_response(store.get_project(project_id))


@router.put("/update-file-tree", response_model=ProjectResponse)
async def update_file_tree(request: UpdateFileTreeRequest, store: ProjectStoreDep) -> ProjectResponse:
    """Replace the saved file tree of a project.

    Raises:
        ProjectNotFoundError: Unknown project (404).
        FileTreeFormatError: The tree does not have the tree shape (422).
    """
    return _project_response(store.save_file_tree(request.project_id, request.file_tree))


@router.put("/add-user", response_model=ProjectResponse)
async def add_users(request: AddUsersRequest, store: ProjectStoreDep) -> ProjectResponse:
    """Add collaborators to a project."""
    return _project_response(store.add_collaborators(request.project_id, request.users))
