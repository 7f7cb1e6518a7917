from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_MESSAGE_LENGTH = 5000


class ClientFrame(BaseModel):
    """A frame sent by a client over the realtime socket: {"event": ..., "data": {...}}."""

    event: str = Field(min_length=1, max_length=50)
    data: dict[str, Any] = Field(default_factory=dict)


class SendMessagePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recipient_id: int = Field(alias="recipientId", gt=0)
    content: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)

    @field_validator("content")
    @classmethod
    def _strip_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("content cannot be empty")
        return v


class MessageOut(BaseModel):
    """Canonical stored message; identical for relay, acknowledgment and history."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    sender_id: int
    receiver_id: int
    content: str
    created_at: datetime
