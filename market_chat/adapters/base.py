"""
Collaborator interfaces.

The messaging core talks to the marketplace backend only through these
contracts; the REST implementation lives in `market_chat.adapters.rest` and
tests substitute in-memory fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from market_chat.schemas.message import Message, MessageDraft, MessageId
from market_chat.schemas.session import Session


class BaseMessagingService(ABC):
    """Contract for the messaging service. All calls raise MessagingError subclasses."""

    @abstractmethod
    async def list_sessions(self) -> List[Session]:
        """Sessions of the current user, most recent first (server order)."""
        ...

    @abstractmethod
    async def list_messages(self, session_id: MessageId) -> List[Message]:
        """Messages of one session ordered by created_at. Marks them read server-side."""
        ...

    @abstractmethod
    async def send_message(self, session_id: MessageId, draft: MessageDraft) -> Message:
        """Create a message; returns the authoritative record."""
        ...

    @abstractmethod
    async def recall_message(
        self, session_id: MessageId, message_id: MessageId
    ) -> Message:
        """Recall a message; returns the updated record with type RECALL."""
        ...

    @abstractmethod
    async def mark_all_read(self) -> None:
        ...

    @abstractmethod
    async def start_chat(self, listing_id: MessageId) -> Session:
        """Get or create the session about a catalog listing."""
        ...


class BaseFavoritesService(ABC):
    """Contract for the favorites backing store."""

    @abstractmethod
    async def list(self) -> List[MessageId]:
        """Ids of the current user's favorited listings."""
        ...

    @abstractmethod
    async def add(self, listing_id: MessageId) -> None:
        ...

    @abstractmethod
    async def remove(self, listing_id: MessageId) -> None:
        ...
