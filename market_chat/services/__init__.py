"""Stateful services of the chat screen. `ChatManager` lives in `market_chat.services.chat_manager`."""

from market_chat.services.favorite_cache import FavoriteCache
from market_chat.services.message_thread import MessageThread
from market_chat.services.notification_aggregator import NotificationAggregator
from market_chat.services.send_pipeline import OptimisticSendPipeline
from market_chat.services.session_store import SessionStore

__all__ = [
    "FavoriteCache",
    "MessageThread",
    "NotificationAggregator",
    "OptimisticSendPipeline",
    "SessionStore",
]
