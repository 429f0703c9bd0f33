"""
Optimistic send of text and image messages.

The draft is appended to the thread before the network call. On success the
temporary entry is reconciled with the authoritative record and the owning
session's preview is patched. On failure the optimistic entry stays visible,
flagged FAILED, and only an error is raised to the user.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Set, Union

from market_chat.adapters.base import BaseMessagingService
from market_chat.core.errors import (
    EmptyDraftError,
    MessagingError,
    NoActiveSessionError,
    PreconditionError,
    SendInProgressError,
    user_text,
)
from market_chat.core.feedback import Notifier
from market_chat.core.image_encoder import DEFAULT_MAX_IMAGE_BYTES, encode_image
from market_chat.schemas.message import Message, MessageDraft, MessageId, MessageType
from market_chat.services.message_thread import MessageThread
from market_chat.services.session_store import SessionStore

logger = logging.getLogger(__name__)

IMAGE_PREVIEW = "[图片]"
SEND_TEXT_FAILED = "发送消息失败，请稍后重试"
SEND_IMAGE_FAILED = "发送图片失败，请稍后重试"


def preview_for(message: Message) -> str:
    if message.type == MessageType.IMAGE:
        return IMAGE_PREVIEW
    return message.content


class OptimisticSendPipeline:
    def __init__(
        self,
        service: BaseMessagingService,
        sessions: SessionStore,
        thread: MessageThread,
        notifier: Notifier,
        sender_id: MessageId,
        max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
    ) -> None:
        self._service = service
        self._sessions = sessions
        self._thread = thread
        self._notifier = notifier
        self._sender_id = sender_id
        self._max_image_bytes = max_image_bytes
        self._in_flight: Set[str] = set()

    @property
    def sending(self) -> bool:
        return bool(self._in_flight)

    def draft(self, content: str, type: MessageType = MessageType.TEXT) -> MessageDraft:
        """Build a draft for the active session. Raise PreconditionError if not sendable."""
        session_id = self._sessions.active_id
        if session_id is None:
            raise NoActiveSessionError()
        if type == MessageType.TEXT:
            content = content.strip()
        if not content:
            raise EmptyDraftError()
        return MessageDraft(session_id=session_id, type=type, content=content)

    async def send_text(self, content: str) -> Optional[Message]:
        try:
            draft = self.draft(content)
        except PreconditionError as e:
            self._notifier.error(e.user_message)
            return None
        return await self.send(draft)

    async def send_image(self, path: Union[str, Path]) -> Optional[Message]:
        """Encode the image, then send it; an unreadable file never creates a message."""
        if self._sessions.active_id is None:
            self._notifier.error(NoActiveSessionError().user_message)
            return None
        try:
            data_url = await encode_image(path, max_bytes=self._max_image_bytes)
            draft = self.draft(data_url, type=MessageType.IMAGE)
        except PreconditionError as e:
            logger.info("Image %s not sent: %s", path, e)
            self._notifier.error(e.user_message)
            return None
        return await self.send(draft)

    async def send(self, draft: MessageDraft) -> Optional[Message]:
        """
        Run one draft through the pipeline.

        Returns the authoritative record, or None if the draft was rejected
        locally or the service call failed.
        """
        if draft.draft_id in self._in_flight:
            self._notifier.error(SendInProgressError().user_message)
            return None
        self._in_flight.add(draft.draft_id)
        try:
            return await self._send(draft)
        finally:
            self._in_flight.discard(draft.draft_id)

    async def _send(self, draft: MessageDraft) -> Optional[Message]:
        temp = self._thread.append_optimistic(draft, self._sender_id)
        try:
            record = await self._service.send_message(draft.session_id, draft)
        except MessagingError as e:
            logger.warning("Send to session %s failed: %s", draft.session_id, e)
            if self._thread.belongs_to(draft.session_id):
                self._thread.mark_failed(temp.id)
            fallback = (
                SEND_IMAGE_FAILED if draft.type == MessageType.IMAGE else SEND_TEXT_FAILED
            )
            self._notifier.error(user_text(e, fallback))
            return None

        if self._thread.belongs_to(draft.session_id):
            self._thread.reconcile(temp.id, record)
        else:
            logger.debug(
                "Thread switched away from session %s, skipping reconcile",
                draft.session_id,
            )
        self._sessions.patch_preview(
            draft.session_id, preview_for(record), record.created_at
        )
        return record
