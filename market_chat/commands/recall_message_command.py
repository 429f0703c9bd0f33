"""
Command to recall (unsend) one of the current user's messages.

Checks eligibility locally, asks the service to recall, then applies the
recalled record to the thread and, when it was the latest message, patches
the session preview. Nothing changes locally unless the service succeeds.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from market_chat.adapters.base import BaseMessagingService
from market_chat.core.errors import MessagingError, RecallNotAllowedError, user_text
from market_chat.core.feedback import Notifier
from market_chat.core.recall_policy import RecallPolicy
from market_chat.schemas.message import Message, MessageId
from market_chat.services.message_thread import MessageThread
from market_chat.services.session_store import SessionStore

RECALL_FAILED = "撤回失败，可能已超过可撤回时间"


class RecallMessageCommand:
    def __init__(
        self,
        service: BaseMessagingService,
        sessions: SessionStore,
        thread: MessageThread,
        policy: RecallPolicy,
        notifier: Notifier,
    ) -> None:
        self._service = service
        self._sessions = sessions
        self._thread = thread
        self._policy = policy
        self._notifier = notifier
        self.logger = logging.getLogger(__name__)

    async def execute(
        self, message_id: MessageId, now: Optional[datetime] = None
    ) -> Optional[Message]:
        """
        Recall the message with `message_id` from the active thread.

        Args:
            message_id: Id of a confirmed message in the active thread.
            now: Clock override for the eligibility check.

        Returns:
            Message: The recalled message as now stored in the thread.
            None: If the message is not recallable or the service refused;
                the reason has been shown to the user and nothing changed.
        """
        session_id = self._thread.session_id
        message = self._thread.find(message_id)
        if session_id is None or message is None:
            self._notifier.error(RecallNotAllowedError().user_message)
            return None
        if not self._policy.is_recallable(message, now):
            self.logger.info("Message %s is not recallable", message_id)
            self._notifier.error(RecallNotAllowedError().user_message)
            return None

        was_last = self._thread.is_last(message_id)
        try:
            record = await self._service.recall_message(session_id, message_id)
        except MessagingError as e:
            self.logger.warning("Recall of message %s failed: %s", message_id, e)
            self._notifier.error(user_text(e, RECALL_FAILED))
            return None

        applied = self._thread.belongs_to(session_id) and self._thread.apply_recall(
            message_id, record
        )
        if not applied:
            self.logger.debug(
                "Message %s left the thread before its recall was confirmed",
                message_id,
            )
        if was_last:
            self._sessions.patch_preview(
                session_id,
                self._policy.recall_preview(message),
                record.created_at,
            )
        self.logger.info("Recalled message %s in session %s", message_id, session_id)
        if applied:
            return self._thread.find(message_id)
        return message.as_recalled(record)
