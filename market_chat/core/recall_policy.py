"""
Recall (unsend) eligibility.

A message is SENT when created, RECALLABLE while its sender is the current
user and it is inside the recall window, and RECALLED once transformed.
RECALLABLE is derived from the clock and never stored. The server remains
the authority; this check only decides whether to offer the action.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from market_chat.schemas.message import Message, MessageId, to_local_naive

DEFAULT_RECALL_WINDOW = timedelta(minutes=2)

SELF_RECALLED_PREVIEW = "你撤回了一条消息"
PARTNER_RECALLED_PREVIEW = "对方撤回了一条消息"


class RecallState(str, Enum):
    SENT = "sent"
    RECALLABLE = "recallable"
    RECALLED = "recalled"


class RecallPolicy:
    """Decides recall eligibility for one signed-in user."""

    def __init__(
        self,
        current_user_id: MessageId,
        window: timedelta = DEFAULT_RECALL_WINDOW,
    ) -> None:
        self.current_user_id = current_user_id
        self.window = window

    def is_own(self, message: Message) -> bool:
        return message.sender_id == self.current_user_id

    def state(self, message: Message, now: Optional[datetime] = None) -> RecallState:
        if message.is_recalled:
            return RecallState.RECALLED
        if self.is_recallable(message, now):
            return RecallState.RECALLABLE
        return RecallState.SENT

    def is_recallable(self, message: Message, now: Optional[datetime] = None) -> bool:
        if message.is_recalled or not self.is_own(message):
            return False
        # Unconfirmed optimistic records have no server id to recall.
        if message.is_temporary:
            return False
        now = to_local_naive(now) if now is not None else datetime.now()
        return now - message.created_at <= self.window

    def recall_preview(self, message: Message) -> str:
        """Session preview text once `message` is recalled; never reveals content."""
        if self.is_own(message):
            return SELF_RECALLED_PREVIEW
        return PARTNER_RECALLED_PREVIEW
