"""Tests for ChannelState."""

import pytest
from pydantic import ValidationError

from models.channel_state import ChannelPhase, ChannelState


class TestChannelState:
    """Tests for the ChannelState model."""

    def test_defaults(self):
        """Test that a new state is disconnected with no attempts."""
        state = ChannelState()

        assert state.phase == ChannelPhase.DISCONNECTED
        assert state.reconnect_attempts == 0
        assert state.max_reconnect_attempts == 5
        assert not state.retries_exhausted

    def test_attempts_cannot_exceed_cap(self):
        """Test that attempts above the cap are rejected."""
        with pytest.raises(ValidationError):
            ChannelState(reconnect_attempts=6, max_reconnect_attempts=5)

    def test_assignment_is_validated(self):
        """Test that assigning attempts is validated against the cap."""
        state = ChannelState(max_reconnect_attempts=2)
        state.reconnect_attempts = 2

        assert state.retries_exhausted
        with pytest.raises(ValidationError):
            state.reconnect_attempts = 3

    def test_is_connected(self):
        """Test that only the CONNECTED phase counts as connected."""
        assert ChannelState(phase=ChannelPhase.CONNECTED).is_connected
        assert not ChannelState(phase=ChannelPhase.CONNECTING).is_connected
