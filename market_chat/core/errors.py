"""
Error taxonomy for the messaging core.

Transport failures and business rejections come back from collaborators;
precondition failures are raised locally before any network call.
"""

from __future__ import annotations

from typing import Optional


class MessagingError(Exception):
    """Base error; `user_message` is the text shown to the user."""

    default_user_message = "操作失败，请稍后重试"

    def __init__(self, message: Optional[str] = None) -> None:
        self.user_message = message or self.default_user_message
        super().__init__(self.user_message)


class TransportError(MessagingError):
    """Network failure, timeout, non-JSON body or unexpected HTTP status."""

    default_user_message = "网络异常，请稍后重试"

    def __init__(
        self, message: Optional[str] = None, status_code: Optional[int] = None
    ) -> None:
        self.status_code = status_code
        super().__init__(message)


class BusinessRejection(MessagingError):
    """The service answered with success=false (e.g. recall window expired)."""


class PreconditionError(MessagingError):
    """Local precondition failed; never reaches the network layer."""


class NoActiveSessionError(PreconditionError):
    default_user_message = "请选择左侧会话后再发送"


class EmptyDraftError(PreconditionError):
    default_user_message = "消息内容不能为空"


class SendInProgressError(PreconditionError):
    default_user_message = "消息正在发送中"


class RecallNotAllowedError(PreconditionError):
    default_user_message = "撤回失败，可能已超过可撤回时间"


class ImageEncodingError(PreconditionError):
    default_user_message = "读取图片失败，请稍后重试"


def user_text(error: MessagingError, fallback: str) -> str:
    """Text to show for `error`: the action's own wording for transport failures."""
    if isinstance(error, TransportError):
        return fallback
    return error.user_message
