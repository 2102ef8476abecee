"""Tests for the chat Timeline."""

import pytest

from models.message import Message, MessageOrigin
from models.participant import Participant
from models.timeline import Timeline

ALICE = Participant(id="alice", display_name="Alice")


def create_message(text: str = "hello") -> Message:
    return Message.plain(ALICE, text)


class TestTimeline:
    """Tests for Timeline."""

    def test_starts_empty(self):
        """Test that a new timeline has no messages."""
        timeline = Timeline()

        assert len(timeline) == 0
        assert timeline.last() is None

    def test_append_preserves_order(self):
        """Test that append returns indices in arrival order."""
        timeline = Timeline()
        messages = [create_message(str(i)) for i in range(3)]

        indices = [timeline.append(message) for message in messages]

        assert indices == [0, 1, 2]
        assert list(timeline) == messages
        assert timeline[1] is messages[1]
        assert timeline.last() is messages[2]

    def test_duplicates_are_kept(self):
        """An echoed message appears twice; no deduplication happens."""
        timeline = Timeline()
        message = create_message()

        timeline.append(message)
        timeline.append(message)

        assert len(timeline) == 2

    def test_rejects_non_messages(self):
        """Test that appending a non-Message raises TypeError."""
        with pytest.raises(TypeError):
            Timeline().append("hello")

    def test_messages_is_read_only_view(self):
        """Test that messages is exposed as a tuple."""
        timeline = Timeline()
        timeline.append(create_message())

        assert isinstance(timeline.messages, tuple)

    def test_listeners_notified_after_append(self):
        """Test that listeners run after the message is stored."""
        timeline = Timeline()
        seen: list[tuple[int, str]] = []
        timeline.subscribe(lambda message: seen.append((len(timeline), message.content)))

        timeline.append(create_message("a"))

        assert seen == [(1, "a")]

    def test_unsubscribe(self):
        """Test that unsubscribing twice is harmless and stops delivery."""
        timeline = Timeline()
        seen: list[Message] = []
        unsubscribe = timeline.subscribe(seen.append)

        unsubscribe()
        unsubscribe()
        timeline.append(create_message())

        assert seen == []

    def test_failing_listener_does_not_block_append(self, caplog):
        """Test that a raising listener is logged and skipped."""
        timeline = Timeline()
        seen: list[Message] = []

        def broken(message: Message) -> None:
            raise RuntimeError("render failed")

        timeline.subscribe(broken)
        timeline.subscribe(seen.append)
        timeline.append(create_message())

        assert len(timeline) == 1
        assert len(seen) == 1
        assert "listener" in caplog.text


class TestMessage:
    """Tests for Message."""

    def test_plain_message(self):
        """Test the display text and wire form of a plain message."""
        message = Message.plain(ALICE, "hi", origin=MessageOrigin.REMOTE)

        assert message.display_text == "hi"
        assert message.origin == MessageOrigin.REMOTE
        assert message.to_wire() == {
            "sender": {"id": "alice", "displayName": "Alice"},
            "message": "hi",
        }

    def test_message_ids_are_unique(self):
        """Test that each message gets its own id."""
        assert create_message().message_id != create_message().message_id
