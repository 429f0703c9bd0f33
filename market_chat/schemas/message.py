"""Pydantic schemas for chat messages, drafts and the API response envelope."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

TEMP_ID_PREFIX = "tmp-"

MessageId = Union[int, str]


def to_local_naive(value: datetime) -> datetime:
    """Server timestamps are local wall-clock time; aware values are converted to it."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def new_temp_id() -> str:
    return f"{TEMP_ID_PREFIX}{uuid.uuid4().hex}"


def is_temp_id(message_id: Optional[MessageId]) -> bool:
    return isinstance(message_id, str) and message_id.startswith(TEMP_ID_PREFIX)


class MessageType(str, Enum):
    """Message kinds. RECALL is terminal."""

    TEXT = "TEXT"
    IMAGE = "IMAGE"
    RECALL = "RECALL"


class DeliveryState(str, Enum):
    """Local delivery state of a message; never sent over the wire."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class Message(BaseModel):
    """One message of a session thread, as returned by the messaging service."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: MessageId
    session_id: Optional[MessageId] = Field(default=None, alias="sessionId")
    sender_id: MessageId = Field(alias="senderId")
    type: MessageType = MessageType.TEXT
    content: str = ""
    read: bool = False
    created_at: datetime = Field(alias="createdAt")
    delivery: DeliveryState = Field(default=DeliveryState.SENT, exclude=True)

    @field_validator("created_at")
    @classmethod
    def _normalize_created_at(cls, value: datetime) -> datetime:
        return to_local_naive(value)

    @field_validator("content", mode="before")
    @classmethod
    def _none_content(cls, value: Any) -> Any:
        return "" if value is None else value

    @model_validator(mode="before")
    @classmethod
    def _redact_recalled(cls, data: Any) -> Any:
        # A recalled message never carries its original content.
        if isinstance(data, dict) and data.get("type") in (
            MessageType.RECALL,
            MessageType.RECALL.value,
        ):
            data = {**data, "content": ""}
        return data

    @property
    def is_temporary(self) -> bool:
        return is_temp_id(self.id)

    @property
    def is_recalled(self) -> bool:
        return self.type == MessageType.RECALL

    def as_recalled(self, record: Optional["Message"] = None) -> "Message":
        """
        Return the recalled form of this message.

        Fields of `record` (the service's updated copy) win over ours, except
        that type is forced to RECALL and content is always dropped.
        """
        base = record if record is not None else self
        return base.model_copy(
            update={
                "id": self.id,
                "session_id": base.session_id or self.session_id,
                "type": MessageType.RECALL,
                "content": "",
                "delivery": DeliveryState.SENT,
            }
        )


class MessageDraft(BaseModel):
    """A message the user is about to send; draft_id identifies the send attempt."""

    model_config = ConfigDict(frozen=True)

    session_id: MessageId
    type: MessageType = MessageType.TEXT
    content: str
    draft_id: str = Field(default_factory=lambda: uuid.uuid4().hex)

    @field_validator("type")
    @classmethod
    def _sendable_type(cls, value: MessageType) -> MessageType:
        if value == MessageType.RECALL:
            raise ValueError("RECALL messages cannot be sent")
        return value

    def to_request(self) -> dict[str, str]:
        """Request body for the send endpoint."""
        return {"type": self.type.value, "content": self.content}


class ApiEnvelope(BaseModel):
    """Every REST response is shaped {success, data, message}."""

    success: bool
    data: Any = None
    message: Optional[str] = None
