"""
Message thread of the active session.

Holds the ordered messages of exactly one session. Optimistic entries are
appended at the tail with a temporary id and later replaced in place by the
authoritative record; recalls replace a message in place. Messages are
never reordered.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from market_chat.adapters.base import BaseMessagingService
from market_chat.infra.logging_config import get_logger
from market_chat.schemas.message import (
    DeliveryState,
    Message,
    MessageDraft,
    MessageId,
    new_temp_id,
)

logger = get_logger("message_thread")


class MessageThread:
    def __init__(self, service: BaseMessagingService) -> None:
        self._service = service
        self._messages: List[Message] = []
        self._session_id: Optional[MessageId] = None
        self._ticket = 0
        self.loading = False

    @property
    def session_id(self) -> Optional[MessageId]:
        return self._session_id

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def belongs_to(self, session_id: MessageId) -> bool:
        return self._session_id == session_id

    async def load_for_session(self, session_id: MessageId) -> Optional[List[Message]]:
        """
        Replace the thread with the messages of `session_id`.

        Returns the loaded list, or None when a newer load (or another session)
        took over while this one was waiting; that response is discarded.
        Switching to another session empties the thread right away so that it
        never shows one session while belonging to another. Reloading the same
        session keeps its unconfirmed optimistic entries after the loaded ones.
        Collaborator errors propagate.
        """
        self._ticket += 1
        ticket = self._ticket
        if self._session_id != session_id:
            self._messages = []
        self._session_id = session_id
        self.loading = True
        try:
            loaded = await self._service.list_messages(session_id)
        finally:
            if ticket == self._ticket:
                self.loading = False

        if ticket != self._ticket or self._session_id != session_id:
            logger.debug("Discarding stale messages for session %s", session_id)
            return None
        # Sends still pending (or failed) are not in the server list; keep them at the tail.
        unconfirmed = [
            m for m in self._messages if m.is_temporary and m.session_id == session_id
        ]
        self._messages = list(loaded) + unconfirmed
        return list(self._messages)

    def append_optimistic(
        self,
        draft: MessageDraft,
        sender_id: MessageId,
        now: Optional[datetime] = None,
    ) -> Message:
        """Show a draft immediately at the tail with a temporary id."""
        message = Message(
            id=new_temp_id(),
            session_id=draft.session_id,
            sender_id=sender_id,
            type=draft.type,
            content=draft.content,
            read=True,
            created_at=now or datetime.now(),
            delivery=DeliveryState.PENDING,
        )
        self._messages.append(message)
        return message

    def reconcile(self, temp_id: MessageId, record: Message) -> bool:
        """Swap the optimistic entry for the authoritative record, keeping its position."""
        index = self.index_of(temp_id)
        if index is None:
            return False
        existing = self.index_of(record.id)
        if existing is not None and existing != index:
            # The record already arrived through another path; drop the temp copy only.
            logger.debug("Record %s already present, dropping %s", record.id, temp_id)
            del self._messages[index]
            return True
        self._messages[index] = record.model_copy(
            update={
                "delivery": DeliveryState.SENT,
                "session_id": record.session_id or self._messages[index].session_id,
            }
        )
        return True

    def mark_failed(self, temp_id: MessageId) -> bool:
        index = self.index_of(temp_id)
        if index is None:
            return False
        self._messages[index] = self._messages[index].model_copy(
            update={"delivery": DeliveryState.FAILED}
        )
        return True

    def apply_recall(self, message_id: MessageId, record: Optional[Message] = None) -> bool:
        """Replace the message with its recalled form; no-op when it is not here."""
        index = self.index_of(message_id)
        if index is None:
            return False
        self._messages[index] = self._messages[index].as_recalled(record)
        return True

    def index_of(self, message_id: MessageId) -> Optional[int]:
        for index, message in enumerate(self._messages):
            if message.id == message_id:
                return index
        return None

    def find(self, message_id: MessageId) -> Optional[Message]:
        index = self.index_of(message_id)
        return self._messages[index] if index is not None else None

    def is_last(self, message_id: MessageId) -> bool:
        return bool(self._messages) and self._messages[-1].id == message_id

    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None
