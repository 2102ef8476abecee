"""In-memory state of the project service.

ProjectStore holds users and projects (with their persisted file trees).
RelayHub holds the open realtime connections grouped by project, and
forwards each ``project-message`` frame to every other connection in the
same project room.
"""

import logging
from typing import Any, Protocol
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from models.file_tree import parse_file_tree, serialize_file_tree

logger = logging.getLogger(__name__)


class StoredUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    display_name: str = Field(default="", alias="displayName")

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "displayName": self.display_name}


class StoredProject(BaseModel):
    """A project as persisted by the service.

    Args:
        id: Project identifier.
        name: Project name.
        users: Collaborator ids, in the order they were added.
        file_tree: Last saved file tree, in wire shape.
    """

    id: str
    name: str
    users: list[str] = Field(default_factory=list)
    file_tree: dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "users": list(self.users),
            "fileTree": self.file_tree,
        }


class ProjectNotFoundError(Exception):
    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project '{project_id}' not found")


class UserNotFoundError(Exception):
    def __init__(self, user_ids: list[str]):
        self.user_ids = user_ids
        super().__init__(f"Unknown users: {', '.join(user_ids)}")


class ProjectStore:
    """Users and projects, kept in memory for the lifetime of the app."""

    def __init__(self) -> None:
        self._users: dict[str, StoredUser] = {}
        self._projects: dict[str, StoredProject] = {}

    # ===== Users =====

    def add_user(self, display_name: str, user_id: str | None = None) -> StoredUser:
        user = StoredUser(id=user_id or uuid4().hex, display_name=display_name)
        self._users[user.id] = user
        return user

    def list_users(self) -> list[StoredUser]:
        return list(self._users.values())

    # ===== Projects =====

    def create_project(self, name: str, users: list[str] | None = None) -> StoredProject:
        """Create an empty project owned by users.

        Raises:
            UserNotFoundError: If any user id is unknown.
        """
        users = list(dict.fromkeys(users or []))
        self._check_users(users)
        project = StoredProject(id=uuid4().hex, name=name, users=users)
        self._projects[project.id] = project
        logger.info(f"Created project {project.id} ({name!r})")
        return project

    def get_project(self, project_id: str) -> StoredProject:
        project = self._projects.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def save_file_tree(self, project_id: str, file_tree: Any) -> StoredProject:
        """Replace the saved tree of a project.

        Raises:
            ProjectNotFoundError: If the project does not exist.
            FileTreeFormatError: If file_tree does not have the tree shape.
        """
        project = self.get_project(project_id)
        project.file_tree = serialize_file_tree(parse_file_tree(file_tree))
        logger.debug(f"Saved file tree of project {project_id}")
        return project

    def add_collaborators(self, project_id: str, user_ids: list[str]) -> StoredProject:
        """Add users to a project; ids already present are ignored.

        Raises:
            ProjectNotFoundError: If the project does not exist.
            UserNotFoundError: If any user id is unknown.
        """
        project = self.get_project(project_id)
        self._check_users(user_ids)
        for user_id in user_ids:
            if user_id not in project.users:
                project.users.append(user_id)
        return project

    def clear(self) -> None:
        self._users.clear()
        self._projects.clear()

    def _check_users(self, user_ids: list[str]) -> None:
        unknown = [user_id for user_id in user_ids if user_id not in self._users]
        if unknown:
            raise UserNotFoundError(unknown)


class RoomConnection(Protocol):
    async def send_text(self, data: str) -> None: ...


class RelayHub:
    """Open channel connections, grouped into one room per project."""

    def __init__(self) -> None:
        self._rooms: dict[str, list[RoomConnection]] = {}

    def join(self, project_id: str, connection: RoomConnection) -> None:
        self._rooms.setdefault(project_id, []).append(connection)
        logger.debug(f"Connection joined room {project_id} ({len(self._rooms[project_id])} open)")

    def leave(self, project_id: str, connection: RoomConnection) -> None:
        room = self._rooms.get(project_id, [])
        if connection in room:
            room.remove(connection)
        if not room:
            self._rooms.pop(project_id, None)

    def occupants(self, project_id: str) -> int:
        return len(self._rooms.get(project_id, ()))

    async def broadcast(self, project_id: str, frame: str, sender: RoomConnection) -> int:
        """Send frame to every connection in the room except sender.

        Returns:
            Number of connections the frame was delivered to. Connections
            that fail are removed from the room.
        """
        delivered = 0
        for connection in list(self._rooms.get(project_id, ())):
            if connection is sender:
                continue
            try:
                await connection.send_text(frame)
            except Exception as e:
                logger.warning(f"Dropping connection from room {project_id}: {e}")
                self.leave(project_id, connection)
                continue
            delivered += 1
        return delivered
