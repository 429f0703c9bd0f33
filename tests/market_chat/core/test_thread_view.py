from datetime import timedelta

from market_chat.core.recall_policy import (
    PARTNER_RECALLED_PREVIEW,
    SELF_RECALLED_PREVIEW,
    RecallPolicy,
)
from market_chat.core.thread_view import build_thread_view
from market_chat.schemas.message import MessageType
from tests.fixtures.messaging_fixtures import ME, NOW, PARTNER, make_message


def test_build_thread_view():
    messages = [
        make_message(1, sender_id=PARTNER, created_at=NOW - timedelta(days=1)),
        make_message(2, sender_id=ME, created_at=NOW - timedelta(minutes=10)),
        make_message(3, sender_id=ME, created_at=NOW - timedelta(minutes=1)),
        make_message(
            4, sender_id=PARTNER, created_at=NOW, type=MessageType.RECALL, content="x"
        ),
    ]

    items = build_thread_view(messages, RecallPolicy(ME), now=NOW)

    assert [i.divider_label for i in items] == ["昨天 12:00", "11:50", "11:59", None]
    assert [i.is_mine for i in items] == [False, True, True, False]
    assert [i.can_recall for i in items] == [False, False, True, False]
    assert items[3].recall_notice == PARTNER_RECALLED_PREVIEW
    assert items[3].message.content == ""
    assert items[2].recall_notice is None


def test_own_recalled_message_notice():
    messages = [make_message(1, sender_id=ME, type=MessageType.RECALL)]
    items = build_thread_view(messages, RecallPolicy(ME), now=NOW)
    assert items[0].recall_notice == SELF_RECALLED_PREVIEW
    assert items[0].can_recall is False


def test_empty_thread():
    assert build_thread_view([], RecallPolicy(ME), now=NOW) == []
