"""Tests for participants and the project-message wire event."""

import pytest
from pydantic import ValidationError

from models.message import WireEvent
from models.participant import AI_PARTICIPANT, Participant


class TestParticipant:
    """Tests for Participant."""

    def test_wire_keys(self):
        """Test that camelCase wire keys round through to_wire."""
        participant = Participant.model_validate({"id": "u1", "displayName": "Ann"})

        assert participant.display_name == "Ann"
        assert participant.to_wire() == {"id": "u1", "displayName": "Ann"}

    def test_legacy_keys(self):
        """Test that _id and email are accepted as fallbacks."""
        participant = Participant.model_validate({"_id": 42, "email": "ann@example.com"})

        assert participant.id == "42"
        assert participant.display_name == "ann@example.com"

    def test_is_automated(self):
        """Test that only the AI identity counts as automated."""
        assert AI_PARTICIPANT.is_automated
        assert Participant.model_validate({"id": "ai"}).is_automated
        assert not Participant(id="u1").is_automated

    def test_missing_id(self):
        """Test that a participant without an id is rejected."""
        with pytest.raises(ValidationError):
            Participant.model_validate({"displayName": "nobody"})


class TestWireEvent:
    """Tests for WireEvent."""

    def test_text_message(self):
        """Test that extra fields are ignored and text passes through."""
        event = WireEvent.model_validate(
            {"sender": {"id": "u1", "displayName": "Ann"}, "message": "hi", "extra": 1}
        )

        assert event.sender.id == "u1"
        assert event.message_text == "hi"

    def test_structured_message_is_serialized(self):
        """Test that a structured message is serialized to JSON text."""
        event = WireEvent.model_validate({"sender": {"id": "ai"}, "message": {"body": "x"}})
        assert event.message_text == '{"body": "x"}'

    def test_missing_message(self):
        """Test that a null message becomes empty text."""
        event = WireEvent.model_validate({"sender": {"id": "u1"}, "message": None})
        assert event.message_text == ""

    def test_missing_sender(self):
        """Test that an event without a sender is rejected."""
        with pytest.raises(ValidationError):
            WireEvent.model_validate({"message": "hi"})
