"""Display rows of the aggregated notification dropdown."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from market_chat.schemas.message import MessageId


class NotificationEntry(BaseModel):
    """One session summarized for the notification feed."""

    model_config = ConfigDict(frozen=True)

    session_id: MessageId
    from_name: str
    avatar_url: str
    preview: str
    time_label: str = ""
    unread_count: int = 0
