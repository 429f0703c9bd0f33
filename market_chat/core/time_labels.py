"""
Time labels for the chat UI.

Divider labels bucket a timestamp by local calendar day relative to "now":
today, yesterday, the rest of the past week, the current year, older years.
All comparisons use calendar dates, never raw millisecond deltas.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from market_chat.schemas.message import Message, to_local_naive

DIVIDER_GAP = timedelta(minutes=5)

YESTERDAY_LABEL = "昨天"
# Indexed by date.weekday(): Monday == 0
WEEKDAY_NAMES = ("周一", "周二", "周三", "周四", "周五", "周六", "周日")


def _local(ts: datetime) -> datetime:
    return to_local_naive(ts)


def _clock(ts: datetime) -> str:
    return f"{ts.hour:02d}:{ts.minute:02d}"


def calendar_days_between(earlier: date, later: date) -> int:
    """Whole calendar days from `earlier` to `later` (negative if reversed)."""
    return (later - earlier).days


def should_show_divider(
    messages: Sequence[Message], index: int, gap: timedelta = DIVIDER_GAP
) -> bool:
    """A divider precedes the first message and any message more than `gap` after its predecessor."""
    if index == 0:
        return True
    current = _local(messages[index].created_at)
    previous = _local(messages[index - 1].created_at)
    return current - previous > gap


def format_divider_label(ts: datetime, now: Optional[datetime] = None) -> str:
    ts = _local(ts)
    now = _local(now) if now is not None else datetime.now()
    days = calendar_days_between(ts.date(), now.date())
    clock = _clock(ts)

    # Future timestamps (clock skew) read as today.
    if days <= 0:
        return clock
    if days == 1:
        return f"{YESTERDAY_LABEL} {clock}"
    if days < 7:
        return f"{WEEKDAY_NAMES[ts.weekday()]} {clock}"
    if ts.year == now.year:
        return f"{ts.month}月{ts.day}日 {clock}"
    return f"{ts.year}年{ts.month}月{ts.day}日 {clock}"


def format_list_time(ts: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Short label for the session list and notification feed: HH:MM today, else MM/DD."""
    if ts is None:
        return ""
    ts = _local(ts)
    now = _local(now) if now is not None else datetime.now()
    if ts.date() == now.date():
        return _clock(ts)
    return f"{ts.month:02d}/{ts.day:02d}"
