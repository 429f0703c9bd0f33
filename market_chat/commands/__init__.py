"""User-action commands spanning several services."""

from market_chat.commands.recall_message_command import RecallMessageCommand

__all__ = ["RecallMessageCommand"]
