"""Chat messages and the project-message wire event."""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from models.decoded_content import DecodedContent, Text
from models.participant import Participant

PROJECT_MESSAGE_EVENT = "project-message"


class MessageOrigin(str, Enum):
    """Where a timeline entry came from."""

    LOCAL = "local"
    REMOTE = "remote"
    SYNTHETIC = "synthetic"


class Message(BaseModel):
    """One entry of the chat timeline.

    Args:
        sender: Who authored the message.
        content: The raw payload exactly as sent or received.
        decoded: Structured interpretation of content.
        origin: Local send, inbound event, or synthetic notice.
        message_id: Locally generated identifier (not sent on the wire).
        received_at: When this process observed the message.
    """

    model_config = ConfigDict(frozen=True)

    sender: Participant
    content: str
    decoded: DecodedContent
    origin: MessageOrigin = MessageOrigin.REMOTE
    message_id: str = Field(default_factory=lambda: str(uuid4()))
    received_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def plain(
        cls,
        sender: Participant,
        text: str,
        origin: MessageOrigin = MessageOrigin.LOCAL,
    ) -> "Message":
        """Build a message whose content is plain human text."""
        return cls(sender=sender, content=text, decoded=Text(body=text), origin=origin)

    @property
    def display_text(self) -> str:
        return self.decoded.display_text

    def to_wire(self) -> dict[str, Any]:
        return {"sender": self.sender.to_wire(), "message": self.content}


class WireEvent(BaseModel):
    """Payload of a ``project-message`` channel event.

    ``message`` is free text for human senders; for the automated participant
    it is normally a JSON document (see models/decoder.py). Non-string
    messages are kept as-is so the decoder can interpret them.
    """

    model_config = ConfigDict(extra="ignore")

    sender: Participant
    message: Any = ""

    @property
    def message_text(self) -> str:
        if isinstance(self.message, str):
            return self.message
        if self.message is None:
            return ""
        return json.dumps(self.message, default=str)
