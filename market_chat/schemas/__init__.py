from market_chat.schemas.identity import CurrentUser
from market_chat.schemas.message import (
    ApiEnvelope,
    DeliveryState,
    Message,
    MessageDraft,
    MessageType,
)
from market_chat.schemas.notification import NotificationEntry
from market_chat.schemas.session import LinkedListing, Session

__all__ = [
    "ApiEnvelope",
    "CurrentUser",
    "DeliveryState",
    "LinkedListing",
    "Message",
    "MessageDraft",
    "MessageType",
    "NotificationEntry",
    "Session",
]
