"""Realtime channel state."""

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class ChannelPhase(str, Enum):
    """Lifecycle phase of the realtime channel.

    Transitions: DISCONNECTED -> CONNECTING -> CONNECTED, CONNECTED ->
    DISCONNECTED on transport error or teardown, CONNECTING -> DISCONNECTED
    when a connection attempt fails.
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ChannelState(BaseModel):
    """Connection phase and reconnect bookkeeping, owned by the channel manager.

    Args:
        phase: Current lifecycle phase.
        reconnect_attempts: Consecutive failed connection attempts.
        max_reconnect_attempts: Cap on automatic retries.
    """

    model_config = {"validate_assignment": True}

    phase: ChannelPhase = Field(default=ChannelPhase.DISCONNECTED)
    reconnect_attempts: int = Field(default=0, ge=0)
    max_reconnect_attempts: int = Field(default=5, ge=0)

    @model_validator(mode="after")
    def _attempts_within_cap(self) -> "ChannelState":
        if self.reconnect_attempts > self.max_reconnect_attempts:
            raise ValueError(
                f"reconnect_attempts ({self.reconnect_attempts}) exceeds "
                f"max_reconnect_attempts ({self.max_reconnect_attempts})"
            )
        return self

    @property
    def retries_exhausted(self) -> bool:
        """True once automatic retries must stop until a manual reset."""
        return self.reconnect_attempts >= self.max_reconnect_attempts

    @property
    def is_connected(self) -> bool:
        return self.phase == ChannelPhase.CONNECTED
