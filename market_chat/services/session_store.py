"""Session list: selection, previews, unread counts and read receipts."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from market_chat.adapters.base import BaseMessagingService
from market_chat.core.errors import MessagingError, user_text
from market_chat.core.feedback import Notifier
from market_chat.infra.logging_config import get_logger
from market_chat.schemas.message import MessageId
from market_chat.schemas.session import Session
from market_chat.services.message_thread import MessageThread

logger = get_logger("session_store")

LOAD_SESSIONS_FAILED = "加载会话列表失败，请稍后重试"
LOAD_MESSAGES_FAILED = "加载消息失败，请稍后重试"
START_CHAT_FAILED = "发起聊天失败，请稍后重试"
MARK_READ_FAILED = "标记消息已读失败"


class SessionStore:
    """
    Conversations of the signed-in user, in server order.

    Owns the selection and drives the thread: selecting a session loads its
    messages into the shared MessageThread. Sessions are replaced, never
    mutated, so readers holding a previous snapshot are unaffected.
    """

    def __init__(
        self,
        service: BaseMessagingService,
        thread: MessageThread,
        notifier: Notifier,
    ) -> None:
        self._service = service
        self._thread = thread
        self._notifier = notifier
        self._sessions: List[Session] = []
        self._active_id: Optional[MessageId] = None
        self.loading = False

    @property
    def sessions(self) -> List[Session]:
        return list(self._sessions)

    @property
    def active_id(self) -> Optional[MessageId]:
        return self._active_id

    @property
    def active(self) -> Optional[Session]:
        return self.get(self._active_id) if self._active_id is not None else None

    def get(self, session_id: MessageId) -> Optional[Session]:
        for session in self._sessions:
            if session.id == session_id:
                return session
        return None

    async def load(self, preferred_id: Optional[MessageId] = None) -> Optional[List[Session]]:
        """
        Fetch the session list and select `preferred_id` (or the first session).

        On failure the error is surfaced and the previous list and selection
        are kept; returns None in that case.
        """
        self.loading = True
        try:
            sessions = await self._service.list_sessions()
        except MessagingError as e:
            logger.warning("Loading sessions failed: %s", e)
            self._notifier.error(user_text(e, LOAD_SESSIONS_FAILED))
            return None
        finally:
            self.loading = False

        self._sessions = list(sessions)
        if not self._sessions:
            self._active_id = None
            return self.sessions

        target = self._sessions[0]
        if preferred_id is not None:
            target = self.get(preferred_id) or target
        self._active_id = target.id
        await self._load_thread(target.id)
        return self.sessions

    async def select(self, session_id: MessageId) -> bool:
        """Make `session_id` active and load its thread; no-op if already active."""
        if session_id == self._active_id:
            return False
        if self.get(session_id) is None:
            logger.warning("Select ignored, unknown session %s", session_id)
            return False
        self._active_id = session_id
        await self._load_thread(session_id)
        return True

    def patch_preview(
        self,
        session_id: MessageId,
        preview: str,
        time: Optional[datetime] = None,
    ) -> bool:
        update: dict = {"last_message_preview": preview}
        if time is not None:
            update["last_message_time"] = time
        return self._replace(session_id, **update)

    def clear_unread(self, session_id: MessageId) -> bool:
        return self._replace(session_id, unread_count=0)

    async def mark_all_read(self) -> bool:
        """
        Zero every unread count right away, then confirm with the service.

        The zeroing is not rolled back when confirmation fails; the failure is
        only reported. Returns whether the confirmation succeeded.
        """
        self._sessions = [
            s.model_copy(update={"unread_count": 0}) if s.unread_count else s
            for s in self._sessions
        ]
        try:
            await self._service.mark_all_read()
        except MessagingError as e:
            logger.warning("Mark all read failed: %s", e)
            self._notifier.error(MARK_READ_FAILED)
            return False
        return True

    async def start_conversation(self, listing_id: MessageId) -> Optional[Session]:
        """Open (or create) the session about a catalog listing and select it."""
        try:
            session = await self._service.start_chat(listing_id)
        except MessagingError as e:
            logger.warning("Start chat for listing %s failed: %s", listing_id, e)
            self._notifier.error(user_text(e, START_CHAT_FAILED))
            return None
        await self.load(preferred_id=session.id)
        return self.get(session.id) or session

    async def _load_thread(self, session_id: MessageId) -> None:
        try:
            loaded = await self._thread.load_for_session(session_id)
        except MessagingError as e:
            if session_id == self._active_id:
                logger.warning("Loading messages of session %s failed: %s", session_id, e)
                self._notifier.error(user_text(e, LOAD_MESSAGES_FAILED))
            return
        if loaded is not None:
            # Listing a thread marks its messages read on the server.
            self.clear_unread(session_id)

    def _replace(self, session_id: MessageId, **update) -> bool:
        for index, session in enumerate(self._sessions):
            if session.id == session_id:
                self._sessions[index] = session.model_copy(update=update)
                return True
        return False
