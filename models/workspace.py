"""Workspace orchestration.

A Workspace ties together one project's chat timeline, its file tree
synchronizer, its realtime channel, and (optionally) the project service.

Inbound flow::

    project-message event -> WireEvent -> decode (automated sender only)
        -> Timeline.append -> tree replace / template / directive

Outbound flow::

    send_message -> ChannelManager.send -> Timeline.append -> directive

Tree mutations commit synchronously; mirroring into the sandbox and
persisting to the project service run as background tasks, so a slow or
failing sandbox never blocks chat. ``settle()`` waits for them.
"""

import asyncio
import json
import logging
from collections.abc import Coroutine
from typing import Any

from pydantic import ValidationError

from client._channel import ChannelManager
from client.client import AsyncCoderoomClient
from client.exceptions import ChannelError, CoderoomClientError
from client.models import ProjectRecord, UserRecord
from config import Settings
from models.decoded_content import TextWithTree, TreePresenceFlag
from models.decoder import DEFAULT_EXCERPT_LENGTH, decode
from models.directives import recognize
from models.errors import FileTreeFormatError, MountError, WorkspaceError
from models.file_tree import FileTree, serialize_file_tree
from models.message import PROJECT_MESSAGE_EVENT, Message, MessageOrigin, WireEvent
from models.participant import AI_PARTICIPANT, SYSTEM_PARTICIPANT, Participant
from models.sandbox import DirectorySandbox, Sandbox
from models.synchronizer import FileTreeSynchronizer, MountStatus
from models.templates import get_template, match_template
from models.timeline import Timeline

logger = logging.getLogger(__name__)

UNKNOWN_PARTICIPANT = Participant(id="unknown", display_name="Unknown")


class Workspace:
    """One open project: chat, file tree, sandbox mirror and channel.

    Args:
        project_id: Project identifier, also used as the channel key.
        user: The local participant.
        channel: Channel manager owned by this workspace.
        synchronizer: Tree synchronizer. A sandbox-less one is created if
            omitted.
        api: Project service client. Without one the workspace neither
            fetches nor persists its tree.
        timeline: Timeline to append to. A new one is created if omitted.
        excerpt_length: Excerpt size for undecodable payloads.
    """

    def __init__(
        self,
        project_id: str,
        user: Participant,
        channel: ChannelManager,
        synchronizer: FileTreeSynchronizer | None = None,
        api: AsyncCoderoomClient | None = None,
        timeline: Timeline | None = None,
        excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
    ) -> None:
        self.project_id = project_id
        self.user = user
        self.channel = channel
        self.synchronizer = synchronizer or FileTreeSynchronizer()
        self.api = api
        self.timeline = timeline if timeline is not None else Timeline()
        self.excerpt_length = excerpt_length
        self.last_error: Exception | None = None

        self._opened = False
        self._tasks: set[asyncio.Task] = set()
        self._persist_lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        project_id: str,
        user: Participant,
        sandbox: Sandbox | None = None,
    ) -> "Workspace":
        """Wire a workspace from Settings.

        A DirectorySandbox on ``settings.sandbox_dir`` is used when no
        sandbox is given and the directory is configured.
        """
        if sandbox is None and settings.sandbox_dir:
            sandbox = DirectorySandbox(settings.sandbox_dir)
        channel = ChannelManager(
            settings.channel_url,
            max_reconnect_attempts=settings.max_reconnect_attempts,
            reconnect_delay=settings.reconnect_delay,
            connect_timeout=settings.connect_timeout,
            stable_after=settings.stable_after,
        )
        return cls(
            project_id,
            user,
            channel,
            synchronizer=FileTreeSynchronizer(sandbox=sandbox),
            api=AsyncCoderoomClient.from_settings(settings),
            excerpt_length=settings.excerpt_length,
        )

    # ===== Properties =====

    @property
    def file_tree(self) -> FileTree:
        return self.synchronizer.current_tree()

    @property
    def is_connected(self) -> bool:
        return self.channel.is_connected

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    # ===== Lifecycle =====

    async def open(self) -> bool:
        """Seed the tree from the project service and join the channel.

        Returns:
            True if the channel connected. The workspace is usable either
            way; a failed connection can be retried with retry_connection().
        """
        if self._opened:
            logger.debug(f"Workspace {self.project_id} already open")
            return self.channel.is_connected
        self._opened = True

        if self.api is not None:
            await self._load_project()

        connected = await self.channel.initialize(self.project_id)
        self.channel.receive(PROJECT_MESSAGE_EVENT, self._on_project_message)
        if not connected:
            self.last_error = ChannelError(
                "could not connect to the project channel",
                channel_key=self.project_id,
            )
        logger.info(f"Workspace {self.project_id} opened (connected={connected})")
        return connected

    async def close(self) -> None:
        """Tear down the channel and close the API client once pending work settles.

        The timeline is discarded; a reopened workspace starts with an empty
        history.
        """
        await self.channel.teardown()
        await self.settle()
        if self.api is not None:
            await self.api.close()
        self.timeline = Timeline()
        self._opened = False
        logger.info(f"Workspace {self.project_id} closed")

    async def settle(self) -> None:
        """Wait until no background mirror or persist task is pending."""
        while self._tasks:
            await asyncio.wait(set(self._tasks))

    async def retry_connection(self) -> bool:
        """Manual reconnect after automatic retries gave up."""
        connected = await self.channel.reset()
        if connected:
            self.last_error = None
        return connected

    # ===== Chat =====

    async def send_message(self, text: str, strict: bool = False) -> bool:
        """Send a chat message from the local user.

        The message is appended to the timeline once the channel accepts it.
        Delivery to other participants is not confirmed.

        Args:
            text: Message text as typed.
            strict: Raise instead of returning False when the channel
                refuses the message.

        Returns:
            True if the channel accepted the message.

        Raises:
            ChannelError: If strict is set and the message was not sent.
        """
        message = Message.plain(self.user, text, origin=MessageOrigin.LOCAL)
        if not await self.channel.send(PROJECT_MESSAGE_EVENT, message.to_wire()):
            error = ChannelError(
                "message not sent: channel not connected",
                channel_key=self.channel.channel_key,
            )
            self.last_error = error
            logger.warning(f"Workspace {self.project_id}: {error}")
            if strict:
                raise error
            return False

        self.timeline.append(message)
        self._dispatch_directive(message)
        return True

    def _on_project_message(self, data: Any) -> None:
        try:
            event = WireEvent.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Malformed {PROJECT_MESSAGE_EVENT} event: {e.error_count()} errors")
            raw = data if isinstance(data, str) else json.dumps(data, default=str)
            self.timeline.append(
                Message(
                    sender=UNKNOWN_PARTICIPANT,
                    content=raw,
                    decoded=decode(raw, self.excerpt_length),
                )
            )
            return

        raw = event.message_text
        if not event.sender.is_automated:
            message = Message.plain(event.sender, raw, origin=MessageOrigin.REMOTE)
            self.timeline.append(message)
            self._dispatch_directive(message)
            return

        decoded = decode(raw, self.excerpt_length)
        self.timeline.append(
            Message(sender=event.sender, content=raw, decoded=decoded, origin=MessageOrigin.REMOTE)
        )
        if isinstance(decoded, TextWithTree):
            self._apply_tree(decoded.tree, persist=False)
        elif isinstance(decoded, TreePresenceFlag):
            template = match_template(raw)
            if template is None:
                logger.info("Payload announces a tree but matches no known template")
            else:
                self._apply_tree(template.build(), persist=False)

    def _dispatch_directive(self, message: Message) -> None:
        directive = recognize(message.sender.is_automated, message.content)
        if directive is None:
            return

        template = get_template(directive)
        logger.info(f"Directive {directive.value} from {message.sender.id}")
        self.timeline.append(
            Message.plain(AI_PARTICIPANT, template.progress_text, origin=MessageOrigin.SYNTHETIC)
        )
        self._apply_tree(template.build(), persist=message.origin == MessageOrigin.LOCAL)

    # ===== File tree =====

    def replace_tree(self, tree: Any) -> bool:
        """Replace the whole tree locally, then mirror and persist it.

        Returns:
            False if tree equals the current tree (nothing happens).

        Raises:
            FileTreeFormatError: If tree is not a valid file tree.
        """
        generation = self.synchronizer.commit_tree(tree)
        if generation is None:
            return False
        self._after_commit(generation, persist=True)
        return True

    def edit_file(self, path: str, contents: str) -> bool:
        """Set one file's contents locally, then mirror and persist.

        Returns:
            False if the file already had these contents.

        Raises:
            PathError: If the path is malformed, its directory does not
                exist, or it names a directory.
        """
        generation = self.synchronizer.commit_edit(path, contents)
        if generation is None:
            return False
        self._after_commit(generation, persist=True)
        return True

    async def attach_sandbox(self, sandbox: Sandbox) -> MountStatus | None:
        """Install a sandbox that booted late and mirror the tree into it.

        Returns:
            The mirror status, or None if the mount failed (reported on the
            timeline).
        """
        try:
            return await self.synchronizer.attach_sandbox(sandbox)
        except MountError as e:
            self._report_mount_failure(e)
            return None

    def _apply_tree(self, tree: Any, persist: bool) -> None:
        try:
            generation = self.synchronizer.commit_tree(tree)
        except FileTreeFormatError as e:
            logger.warning(f"Ignoring invalid file tree: {e}")
            return
        if generation is not None:
            self._after_commit(generation, persist)

    def _after_commit(self, generation: int, persist: bool) -> None:
        self._spawn(self._mirror(generation))
        if persist:
            self._spawn(self._persist())

    async def _mirror(self, generation: int) -> None:
        try:
            await self.synchronizer.mirror(generation)
        except MountError as e:
            self._report_mount_failure(e)

    def _report_mount_failure(self, error: MountError) -> None:
        self.last_error = error
        if not self.synchronizer.has_sandbox:
            logger.debug(f"Skipping mirror of generation {error.generation}: {error}")
            return
        logger.warning(f"Workspace {self.project_id}: {error}")
        self.timeline.append(
            Message.plain(
                SYSTEM_PARTICIPANT,
                f"Could not update the sandbox: {error}",
                origin=MessageOrigin.SYNTHETIC,
            )
        )

    async def _persist(self) -> None:
        if self.api is None:
            return
        async with self._persist_lock:
            tree = serialize_file_tree(self.synchronizer.current_tree())
            try:
                await self.api.projects.update_file_tree(self.project_id, tree)
            except CoderoomClientError as e:
                self.last_error = e
                logger.warning(f"Failed to save file tree of {self.project_id}: {e}")
                return
            logger.debug(f"Saved file tree of {self.project_id}")

    async def _load_project(self) -> None:
        try:
            project = await self.api.projects.get_project(self.project_id)
        except CoderoomClientError as e:
            self.last_error = e
            logger.warning(f"Could not load project {self.project_id}: {e}")
            return

        try:
            generation = self.synchronizer.commit_tree(project.file_tree)
        except FileTreeFormatError as e:
            logger.warning(f"Stored file tree of {self.project_id} is invalid: {e}")
            return
        if generation is not None:
            self._spawn(self._mirror(generation))

    # ===== Collaborators =====

    async def add_collaborators(self, user_ids: list[str]) -> ProjectRecord:
        return await self._require_api().projects.add_collaborators(self.project_id, user_ids)

    async def list_users(self) -> list[UserRecord]:
        return await self._require_api().users.list_users()

    def _require_api(self) -> AsyncCoderoomClient:
        if self.api is None:
            raise WorkspaceError("no project service configured")
        return self.api

    # ===== Background tasks =====

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Background task failed: {error}", exc_info=error)
