"""Chat timeline.

The timeline is the ordered record of everything shown in a workspace's chat:
optimistic local sends, inbound channel events, and synthetic notices
(directive progress, mount failures). Entries are kept in the order this
process observed them; there is no global ordering across participants.

No deduplication happens here. If the channel echoes a participant's own
message back, it is appended a second time; suppressing echoes belongs to
the channel layer.
"""

import logging
from collections.abc import Callable, Iterator

from models.message import Message

logger = logging.getLogger(__name__)

TimelineListener = Callable[[Message], None]


class Timeline:
    """Append-only ordered sequence of chat messages.

    Listeners (e.g. a UI projection) are notified synchronously after each
    append. A failing listener is logged and does not affect the append.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._listeners: list[TimelineListener] = []

    def append(self, message: Message) -> int:
        """Append message and return its index."""
        if not isinstance(message, Message):
            raise TypeError(f"Timeline can only hold Message, got {type(message)}")

        self._messages.append(message)
        index = len(self._messages) - 1
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception:
                logger.exception(f"Timeline listener {listener!r} failed")
        return index

    def subscribe(self, listener: TimelineListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def __getitem__(self, index: int) -> Message:
        return self._messages[index]
