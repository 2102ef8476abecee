"""Realtime project channel.

Clients connect to ``/ws/projects/{project_id}`` and exchange JSON frames
``{"event": ..., "data": ...}``. Every ``project-message`` frame is relayed
to the other connections of the same project; the sender does not get its
own frame back. Other events and malformed frames are dropped.
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from api.dependencies import ProjectStoreDep, RelayHubDep
from api.store import ProjectNotFoundError
from client._transport import decode_frame, encode_frame
from models.message import PROJECT_MESSAGE_EVENT

logger = logging.getLogger(__name__)

router = APIRouter(tags=["channel"])


@router.websocket("/ws/projects/{project_id}")
async def project_channel(
    websocket: WebSocket,
    project_id: str,
    store: ProjectStoreDep,
    hub: RelayHubDep,
) -> None:
    try:
        store.get_project(project_id)
    except ProjectNotFoundError as e:
        logger.info(f"Rejecting channel connection: {e}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    hub.join(project_id, websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                event, data = decode_frame(raw)
            except ValueError as e:
                logger.warning(f"Dropping malformed frame on {project_id}: {e}")
                continue
            if event != PROJECT_MESSAGE_EVENT:
                logger.debug(f"Ignoring event {event!r} on {project_id}")
                continue
            await hub.broadcast(project_id, encode_frame(event, data), sender=websocket)
    except WebSocketDisconnect:
        logger.debug(f"Channel connection to {project_id} closed")
    finally:
        hub.leave(project_id, websocket)
