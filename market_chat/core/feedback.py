"""
User-visible feedback (toasts).

Each toast's auto-dismiss is a scheduled call whose handle is kept on the
toast; dismissing the toast or closing the notifier cancels it.
"""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from market_chat.infra.logging_config import get_logger

logger = get_logger("feedback")


class ToastLevel(str, Enum):
    INFO = "info"
    ERROR = "error"


@dataclass
class Toast:
    id: int
    level: ToastLevel
    text: str
    handle: Optional[asyncio.TimerHandle] = field(default=None, repr=False)


class Notifier:
    """Collects toasts for the UI; owned by one chat screen."""

    def __init__(self, duration_seconds: float = 3.0) -> None:
        self.duration_seconds = duration_seconds
        self._toasts: dict[int, Toast] = {}
        self._ids = itertools.count(1)
        self._closed = False

    @property
    def toasts(self) -> list[Toast]:
        return list(self._toasts.values())

    @property
    def last_error(self) -> Optional[str]:
        errors = [t.text for t in self._toasts.values() if t.level == ToastLevel.ERROR]
        return errors[-1] if errors else None

    def info(self, text: str) -> Toast:
        return self._push(ToastLevel.INFO, text)

    def error(self, text: str) -> Toast:
        return self._push(ToastLevel.ERROR, text)

    def dismiss(self, toast_id: int) -> None:
        toast = self._toasts.pop(toast_id, None)
        if toast is not None and toast.handle is not None:
            toast.handle.cancel()

    def close(self) -> None:
        """Cancel every pending auto-dismiss and drop all toasts."""
        self._closed = True
        for toast_id in list(self._toasts):
            self.dismiss(toast_id)

    def _push(self, level: ToastLevel, text: str) -> Toast:
        toast = Toast(id=next(self._ids), level=level, text=text)
        if self._closed:
            logger.debug("Notifier closed, dropping toast: %s", text)
            return toast
        self._toasts[toast.id] = toast
        if self.duration_seconds > 0:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                toast.handle = loop.call_later(
                    self.duration_seconds, self._expire, toast.id
                )
        return toast

    def _expire(self, toast_id: int) -> None:
        self._toasts.pop(toast_id, None)
