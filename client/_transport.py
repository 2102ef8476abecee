"""Realtime transport for the channel manager.

A connection is anything that can send text frames, be iterated for
inbound text frames, and be closed; ``websockets`` client connections fit
as-is. Frames are JSON objects::

    {"event": "project-message", "data": {...}}

This is an internal module. Import from `client` instead.
"""

import json
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, Protocol

import websockets


class Connection(Protocol):
    """One live bidirectional connection."""

    async def send(self, message: str) -> None: ...

    async def close(self) -> None: ...

    def __aiter__(self) -> AsyncIterator[str | bytes]: ...


Connector = Callable[[str], Awaitable[Connection]]


async def websocket_connector(url: str) -> Connection:
    """Open a websocket connection to url.

    The handshake timeout is enforced by the caller.
    """
    return await websockets.connect(url, open_timeout=None)


def encode_frame(event: str, data: Any) -> str:
    """Serialize an event and its payload into a text frame.

    Raises:
        TypeError: If data is not JSON-serializable.
    """
    return json.dumps({"event": event, "data": data})


def decode_frame(raw: str | bytes) -> tuple[str, Any]:
    """Parse a text frame into ``(event, data)``.

    Raises:
        ValueError: If raw is not a JSON object with a string ``event``.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    frame = json.loads(raw)
    if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
        raise ValueError("frame must be a JSON object with a string 'event'")
    return frame["event"], frame.get("data")
