"""Realtime channel manager.

One ChannelManager is constructed per workspace and owns that workspace's
channel: its connection, its inbound handlers, and its ChannelState. Callers
pass the manager around explicitly; there is no process-wide socket.

Lifecycle::

    manager = ChannelManager("ws://localhost:8000/ws/projects")
    await manager.initialize(project_id)       # DISCONNECTED -> CONNECTING -> CONNECTED
    manager.receive("project-message", on_message)
    ok = await manager.send("project-message", payload)
    ...
    await manager.teardown()

Reconnection: every failed connection attempt increments
``state.reconnect_attempts`` and, until ``max_reconnect_attempts`` is
reached, schedules another attempt after ``reconnect_delay`` seconds. A
dropped connection schedules an attempt the same way; one that closes less
than ``stable_after`` seconds after its handshake counts as a failed
attempt. Once the cap is reached nothing is scheduled until ``reset()``.

Every handshake carries an attempt number. ``initialize``, ``reset`` and
``teardown`` invalidate attempts still in flight, and a connection that
completes for a stale attempt is closed instead of installed.

This is an internal module. Import from `client` instead.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import quote

from client._transport import (
    Connection,
    Connector,
    decode_frame,
    encode_frame,
    websocket_connector,
)
from models.channel_state import ChannelPhase, ChannelState

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], Awaitable[None] | None]

DEFAULT_MAX_RECONNECT_ATTEMPTS = 5
DEFAULT_RECONNECT_DELAY = 20.0  # seconds
DEFAULT_CONNECT_TIMEOUT = 30.0  # seconds
DEFAULT_STABLE_AFTER = 5.0  # seconds


class ChannelManager:
    """Owns the lifecycle of one realtime channel.

    Attributes:
        url: Base channel URL; the channel key is appended as a path segment.
        reconnect_delay: Seconds between automatic reconnect attempts.
        connect_timeout: Seconds allowed for one connection handshake.
        stable_after: Uptime after which a dropped connection no longer
            counts as a failed attempt.
        state: Current ChannelState (read-only for callers).
    """

    def __init__(
        self,
        url: str,
        connector: Connector | None = None,
        max_reconnect_attempts: int = DEFAULT_MAX_RECONNECT_ATTEMPTS,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        stable_after: float = DEFAULT_STABLE_AFTER,
    ) -> None:
        """Initialize the manager without connecting.

        Args:
            url: Base channel URL.
            connector: Async callable opening a Connection for a URL.
                Defaults to a websocket connection.
            max_reconnect_attempts: Cap on automatic retries.
            reconnect_delay: Seconds between automatic retries.
            connect_timeout: Seconds allowed for one handshake.
            stable_after: Seconds a connection must stay up before its
                drop stops counting toward the retry cap.
        """
        self.url = url.rstrip("/")
        self.reconnect_delay = reconnect_delay
        self.connect_timeout = connect_timeout
        self.stable_after = stable_after
        self.state = ChannelState(max_reconnect_attempts=max_reconnect_attempts)

        self._connector = connector or websocket_connector
        self._channel_key: str | None = None
        self._connection: Connection | None = None
        self._handlers: dict[str, list[EventHandler]] = {}
        self._reader_task: asyncio.Task | None = None
        self._retry_task: asyncio.Task | None = None
        self._attempt = 0
        self._connected_at = 0.0
        self._carried_attempts = 0

    # ===== Properties =====

    @property
    def channel_key(self) -> str | None:
        return self._channel_key

    @property
    def phase(self) -> ChannelPhase:
        return self.state.phase

    @property
    def is_connected(self) -> bool:
        return self.state.phase == ChannelPhase.CONNECTED and self._connection is not None

    @property
    def retry_pending(self) -> bool:
        """Whether an automatic reconnect attempt is scheduled."""
        return self._retry_task is not None and not self._retry_task.done()

    def channel_url(self, channel_key: str) -> str:
        return f"{self.url}/{quote(channel_key, safe='')}"

    # ===== Lifecycle =====

    async def initialize(self, channel_key: str) -> bool:
        """Open the channel for channel_key, closing any existing one first.

        Handlers registered for the same key are kept; switching to a
        different key discards them.

        Args:
            channel_key: Key of the channel to join (the project id).

        Returns:
            True if the channel reached CONNECTED. On False a retry may
            already be scheduled (see retry_pending).
        """
        if not channel_key:
            logger.error("Cannot initialize channel: missing channel key")
            return False

        await self._close_current()
        if channel_key != self._channel_key:
            self._handlers = {}
        self._channel_key = channel_key
        return await self._connect()

    async def reset(self) -> bool:
        """Manual retry: clear the attempt counter and reinitialize.

        Any existing connection is closed first, so two live connections for
        the same key never coexist.

        Returns:
            True if the channel reached CONNECTED, False otherwise (including
            when no channel was ever initialized).
        """
        if self._channel_key is None:
            logger.error("Cannot reset channel: not initialized")
            return False
        self.state.reconnect_attempts = 0
        logger.info(f"Manual reset of channel {self._channel_key}")
        return await self.initialize(self._channel_key)

    async def teardown(self) -> None:
        """Close the channel, cancel scheduled retries and drop handlers."""
        key = self._channel_key
        await self._close_current()
        self._channel_key = None
        self._handlers = {}
        if key is not None:
            logger.info(f"Channel {key} torn down")

    async def wait_for_retries(self) -> None:
        """Wait until no automatic reconnect attempt is scheduled."""
        while (task := self._retry_task) is not None and not task.done():
            await asyncio.wait({task})

    # ===== Messaging =====

    async def send(self, event: str, payload: Any) -> bool:
        """Send an event on the channel.

        Returns:
            True if the frame was handed to the transport. False if the
            channel is not connected, the payload cannot be encoded, or the
            transport write failed; nothing is buffered for later delivery.
        """
        connection = self._connection
        if self.state.phase != ChannelPhase.CONNECTED or connection is None:
            logger.error(f"Cannot send {event!r}: channel not connected")
            return False

        try:
            frame = encode_frame(event, payload)
        except (TypeError, ValueError) as e:
            logger.error(f"Cannot send {event!r}: payload not serializable ({e})")
            return False

        try:
            await connection.send(frame)
        except Exception as e:
            logger.warning(f"Send of {event!r} failed: {e}")
            await self._drop_connection(connection, e)
            return False
        return True

    def receive(self, event: str, handler: EventHandler) -> bool:
        """Register handler for every inbound event named event.

        Handlers may be plain functions or coroutine functions. They run in
        arrival order, one at a time.

        Returns:
            False (and registers nothing) if no channel has been initialized.
        """
        if self._channel_key is None:
            logger.error(f"Cannot receive {event!r}: channel not initialized")
            return False
        self._handlers.setdefault(event, []).append(handler)
        return True

    # ===== Internals =====

    async def _connect(self) -> bool:
        self._attempt += 1
        attempt = self._attempt
        key = self._channel_key
        self.state.phase = ChannelPhase.CONNECTING
        try:
            connection = await asyncio.wait_for(
                self._connector(self.channel_url(key)), self.connect_timeout
            )
        except asyncio.CancelledError:
            if attempt == self._attempt:
                self.state.phase = ChannelPhase.DISCONNECTED
            raise
        except Exception as e:
            if attempt != self._attempt:
                logger.debug(f"Ignoring failure of superseded attempt on {key}: {e}")
                return False
            self.state.phase = ChannelPhase.DISCONNECTED
            self._record_failure(e)
            return False

        if attempt != self._attempt or key != self._channel_key:
            logger.info(f"Closing connection to {key}: attempt superseded")
            await self._close_quietly(connection)
            return False

        self._connection = connection
        self.state.phase = ChannelPhase.CONNECTED
        self._carried_attempts = self.state.reconnect_attempts
        self.state.reconnect_attempts = 0
        self._connected_at = asyncio.get_running_loop().time()
        self._reader_task = asyncio.create_task(self._read_loop(connection))
        logger.info(f"Channel {self._channel_key} connected")
        return True

    def _after_disconnect(self, error: Exception | None) -> None:
        uptime = asyncio.get_running_loop().time() - self._connected_at
        if uptime < self.stable_after:
            self.state.reconnect_attempts = self._carried_attempts
            self._record_failure(error or ConnectionResetError("closed right after connecting"))
            return
        self._schedule_retry()

    def _record_failure(self, error: Exception) -> None:
        limit = self.state.max_reconnect_attempts
        self.state.reconnect_attempts = min(self.state.reconnect_attempts + 1, limit)
        if self.state.retries_exhausted:
            logger.error(
                f"Channel {self._channel_key}: max reconnection attempts ({limit}) "
                f"reached, last error: {error}. Manual reset required."
            )
            return
        logger.warning(
            f"Channel {self._channel_key} connection error "
            f"({self.state.reconnect_attempts}/{limit}): {error}"
        )
        self._schedule_retry()

    def _schedule_retry(self) -> None:
        if self._channel_key is None:
            return
        if self.retry_pending and self._retry_task is not asyncio.current_task():
            return
        if self.state.retries_exhausted:
            logger.error(f"Channel {self._channel_key}: retries exhausted, not reconnecting")
            return
        self._retry_task = asyncio.create_task(self._retry_after_delay())

    async def _retry_after_delay(self) -> None:
        # Stays registered as _retry_task through the handshake
        await asyncio.sleep(self.reconnect_delay)
        if self._channel_key is None or self.state.phase != ChannelPhase.DISCONNECTED:
            return
        logger.info(f"Reconnecting channel {self._channel_key}")
        await self._connect()

    async def _read_loop(self, connection: Connection) -> None:
        error: Exception | None = None
        try:
            async for raw in connection:
                await self._dispatch(raw)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            error = e

        if connection is not self._connection:
            return
        self._connection = None
        self._reader_task = None
        self.state.phase = ChannelPhase.DISCONNECTED
        logger.warning(
            f"Channel {self._channel_key} disconnected: {error or 'closed by peer'}"
        )
        self._after_disconnect(error)

    async def _dispatch(self, raw: str | bytes) -> None:
        try:
            event, data = decode_frame(raw)
        except ValueError as e:
            logger.warning(f"Dropping malformed frame: {e}")
            return

        for handler in list(self._handlers.get(event, ())):
            try:
                result = handler(data)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Handler for {event!r} failed")

    async def _drop_connection(self, connection: Connection, error: Exception) -> None:
        if connection is not self._connection:
            return
        reader = self._reader_task
        self._connection = None
        self._reader_task = None
        self.state.phase = ChannelPhase.DISCONNECTED
        if reader is not None and reader is not asyncio.current_task():
            reader.cancel()
            await asyncio.wait({reader})
        await self._close_quietly(connection)
        logger.warning(f"Channel {self._channel_key} dropped after error: {error}")
        self._after_disconnect(error)

    async def _close_current(self) -> None:
        self._attempt += 1
        retry = self._retry_task
        self._retry_task = None
        if retry is not None and not retry.done() and retry is not asyncio.current_task():
            retry.cancel()
            await asyncio.wait({retry})

        reader = self._reader_task
        connection = self._connection
        self._reader_task = None
        self._connection = None
        self.state.phase = ChannelPhase.DISCONNECTED
        if reader is not None and not reader.done() and reader is not asyncio.current_task():
            reader.cancel()
            await asyncio.wait({reader})
        if connection is not None:
            await self._close_quietly(connection)

    async def _close_quietly(self, connection: Connection) -> None:
        try:
            await connection.close()
        except Exception as e:
            logger.debug(f"Error while closing connection: {e}")
