"""Chat participants."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Reserved participant ids
AI_PARTICIPANT_ID = "ai"
SYSTEM_PARTICIPANT_ID = "system"


class Participant(BaseModel):
    """Someone (or something) that can author a chat message.

    Accepts the legacy wire keys ``_id`` and ``email`` in addition to
    ``id`` and ``displayName``.

    Args:
        id: Stable participant identifier.
        display_name: Name shown next to the participant's messages.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(description="Stable participant identifier")
    display_name: str = Field(
        default="",
        alias="displayName",
        description="Name shown next to the participant's messages",
    )

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "id" not in data and "_id" in data:
            data["id"] = str(data.pop("_id"))
        if "displayName" not in data and "display_name" not in data and "email" in data:
            data["displayName"] = data.pop("email")
        return data

    @property
    def is_automated(self) -> bool:
        """Whether this participant is the automated assistant."""
        return self.id == AI_PARTICIPANT_ID

    def to_wire(self) -> dict[str, str]:
        return {"id": self.id, "displayName": self.display_name}


AI_PARTICIPANT = Participant(id=AI_PARTICIPANT_ID, display_name="AI")
SYSTEM_PARTICIPANT = Participant(id=SYSTEM_PARTICIPANT_ID, display_name="System")
