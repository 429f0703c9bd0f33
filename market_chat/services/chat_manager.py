"""ChatManager: facade wiring sessions, thread, send, recall, notifications and favorites."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional, Union

from market_chat.adapters.base import BaseFavoritesService, BaseMessagingService
from market_chat.commands.recall_message_command import RecallMessageCommand
from market_chat.config import Settings, get_settings
from market_chat.core.feedback import Notifier
from market_chat.core.recall_policy import RecallPolicy
from market_chat.core.thread_view import ThreadItem, build_thread_view
from market_chat.infra.logging_config import get_logger
from market_chat.schemas.identity import CurrentUser
from market_chat.schemas.message import Message, MessageId
from market_chat.schemas.session import Session
from market_chat.services.favorite_cache import FavoriteCache
from market_chat.services.message_thread import MessageThread
from market_chat.services.notification_aggregator import NotificationAggregator
from market_chat.services.send_pipeline import OptimisticSendPipeline
from market_chat.services.session_store import SessionStore

logger = get_logger("chat_manager")


class ChatManager:
    """Messaging core for one signed-in user."""

    def __init__(
        self,
        service: BaseMessagingService,
        current_user: CurrentUser,
        favorites_service: Optional[BaseFavoritesService] = None,
        settings: Optional[Settings] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.current_user = current_user
        self.notifier = notifier or Notifier(self.settings.toast_duration_seconds)
        self.thread = MessageThread(service)
        self.sessions = SessionStore(service, self.thread, self.notifier)
        self.policy = RecallPolicy(
            current_user.id,
            window=timedelta(seconds=self.settings.recall_window_seconds),
        )
        self.pipeline = OptimisticSendPipeline(
            service,
            self.sessions,
            self.thread,
            self.notifier,
            sender_id=current_user.id,
            max_image_bytes=self.settings.max_image_bytes,
        )
        self._recall = RecallMessageCommand(
            service, self.sessions, self.thread, self.policy, self.notifier
        )
        self.notifications = NotificationAggregator(
            self.sessions,
            avatar_template=self.settings.placeholder_avatar_url,
            default_partner_name=self.settings.default_partner_name,
        )
        self.favorites = (
            FavoriteCache(favorites_service) if favorites_service is not None else None
        )

    async def open(self, preferred_id: Optional[MessageId] = None) -> Optional[List[Session]]:
        logger.info("Opening chat for user %s", self.current_user.id)
        return await self.sessions.load(preferred_id)

    async def select(self, session_id: MessageId) -> bool:
        return await self.sessions.select(session_id)

    async def send_text(self, content: str) -> Optional[Message]:
        return await self.pipeline.send_text(content)

    async def send_image(self, path: Union[str, Path]) -> Optional[Message]:
        return await self.pipeline.send_image(path)

    async def recall(
        self, message_id: MessageId, now: Optional[datetime] = None
    ) -> Optional[Message]:
        return await self._recall.execute(message_id, now)

    async def open_notifications(self) -> bool:
        return await self.notifications.open()

    async def start_conversation(self, listing_id: MessageId) -> Optional[Session]:
        return await self.sessions.start_conversation(listing_id)

    def thread_view(self, now: Optional[datetime] = None) -> List[ThreadItem]:
        return build_thread_view(
            self.thread.messages,
            self.policy,
            now=now,
            gap=timedelta(seconds=self.settings.divider_gap_seconds),
        )

    def close(self) -> None:
        """Release resources tied to this screen (pending toast timers)."""
        self.notifier.close()
