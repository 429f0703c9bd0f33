"""Render model of a message thread: time dividers, ownership, recall affordances."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

from market_chat.core.recall_policy import RecallPolicy
from market_chat.core.time_labels import (
    DIVIDER_GAP,
    format_divider_label,
    should_show_divider,
)
from market_chat.schemas.message import Message


@dataclass(frozen=True)
class ThreadItem:
    message: Message
    divider_label: Optional[str]
    is_mine: bool
    can_recall: bool
    recall_notice: Optional[str] = None


def build_thread_view(
    messages: Sequence[Message],
    policy: RecallPolicy,
    now: Optional[datetime] = None,
    gap: timedelta = DIVIDER_GAP,
) -> list[ThreadItem]:
    now = now or datetime.now()
    items: list[ThreadItem] = []
    for index, message in enumerate(messages):
        label = (
            format_divider_label(message.created_at, now)
            if should_show_divider(messages, index, gap)
            else None
        )
        items.append(
            ThreadItem(
                message=message,
                divider_label=label,
                is_mine=policy.is_own(message),
                can_recall=policy.is_recallable(message, now),
                recall_notice=(
                    policy.recall_preview(message) if message.is_recalled else None
                ),
            )
        )
    return items
