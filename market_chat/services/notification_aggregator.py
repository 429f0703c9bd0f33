"""Cross-session unread total and notification feed for the top-level chrome."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from market_chat.core.time_labels import format_list_time
from market_chat.schemas.notification import NotificationEntry
from market_chat.services.session_store import SessionStore

EMPTY_PREVIEW = "暂无聊天记录"
BADGE_CAP = 99


class NotificationAggregator:
    """Derived view over SessionStore; holds no state of its own."""

    def __init__(
        self,
        sessions: SessionStore,
        avatar_template: str,
        default_partner_name: str,
    ) -> None:
        self._sessions = sessions
        self._avatar_template = avatar_template
        self._default_name = default_partner_name

    @property
    def unread_total(self) -> int:
        return sum(s.unread_count for s in self._sessions.sessions)

    def badge_text(self) -> str:
        total = self.unread_total
        if total <= 0:
            return ""
        return f"{BADGE_CAP}+" if total > BADGE_CAP else str(total)

    def feed(self, now: Optional[datetime] = None) -> List[NotificationEntry]:
        """One entry per session, in the session list's own order."""
        now = now or datetime.now()
        return [
            NotificationEntry(
                session_id=s.id,
                from_name=s.display_name(self._default_name),
                avatar_url=s.avatar_url(self._avatar_template, self._default_name),
                preview=s.last_message_preview or EMPTY_PREVIEW,
                time_label=format_list_time(s.last_message_time, now),
                unread_count=s.unread_count,
            )
            for s in self._sessions.sessions
        ]

    async def open(self) -> bool:
        """Opening the dropdown marks everything read, but only if something is unread."""
        if self.unread_total <= 0:
            return False
        await self._sessions.mark_all_read()
        return True
