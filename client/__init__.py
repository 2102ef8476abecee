"""coderoom client library.

Two clients live here:

- ChannelManager: the realtime channel (connect, send, receive, reconnect,
  teardown) a workspace uses to exchange ``project-message`` events.
- AsyncCoderoomClient: the project service REST API (project fetch, file
  tree persistence, collaborator management, user directory).

Example::

    from client import AsyncCoderoomClient, ChannelManager

    channel = ChannelManager("ws://localhost:8000/ws/projects")
    await channel.initialize("p-1")

    async with AsyncCoderoomClient() as api:
        project = await api.projects.get_project("p-1")

Exports:
    ChannelManager, AsyncCoderoomClient, response models and exceptions.
"""

from client._channel import ChannelManager, EventHandler
from client._projects import AsyncProjectsClient
from client._transport import Connection, Connector, decode_frame, encode_frame
from client._users import AsyncUsersClient
from client.client import AsyncCoderoomClient
from client.exceptions import (
    APIError,
    ChannelError,
    CoderoomClientError,
    ConnectionError,
    NotFoundError,
    ServerError,
    TimeoutError,
    ValidationError,
)
from client.models import ProjectRecord, ProjectResponse, UserListResponse, UserRecord

__all__ = [
    # Channel
    "ChannelManager",
    "Connection",
    "Connector",
    "EventHandler",
    "decode_frame",
    "encode_frame",
    # REST
    "AsyncCoderoomClient",
    "AsyncProjectsClient",
    "AsyncUsersClient",
    "ProjectRecord",
    "ProjectResponse",
    "UserListResponse",
    "UserRecord",
    # Exceptions
    "CoderoomClientError",
    "ConnectionError",
    "TimeoutError",
    "ChannelError",
    "APIError",
    "ValidationError",
    "NotFoundError",
    "ServerError",
]
