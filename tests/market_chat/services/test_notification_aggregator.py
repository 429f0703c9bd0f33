from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from market_chat.core.errors import TransportError
from market_chat.services.message_thread import MessageThread
from market_chat.services.notification_aggregator import (
    EMPTY_PREVIEW,
    NotificationAggregator,
)
from market_chat.services.session_store import SessionStore
from tests.fixtures.messaging_fixtures import NOW, make_session

AVATAR_TEMPLATE = "https://avatars.example/{seed}.svg"


@pytest.fixture
def store(fake_service, notifier):
    return SessionStore(fake_service, MessageThread(fake_service), notifier)


@pytest.fixture
def aggregator(store):
    return NotificationAggregator(
        store, avatar_template=AVATAR_TEMPLATE, default_partner_name="同学"
    )


@pytest.mark.asyncio
async def test_unread_total_follows_sessions(aggregator, store, fake_service, setup_sessions):
    # Select the empty session so the others keep their counts.
    await store.load(preferred_id=20)

    assert aggregator.unread_total == 7
    assert aggregator.badge_text() == "7"

    store.clear_unread(30)
    assert aggregator.unread_total == 2


def test_badge_caps_at_99(aggregator, store):
    store._sessions = [make_session(1, unread_count=60), make_session(2, unread_count=40)]

    assert aggregator.badge_text() == "99+"


def test_badge_empty_when_nothing_unread(aggregator):
    assert aggregator.unread_total == 0
    assert aggregator.badge_text() == ""


@pytest.mark.asyncio
async def test_feed_entries_in_session_order(aggregator, store, setup_sessions):
    await store.load(preferred_id=20)

    feed = aggregator.feed(NOW)

    assert [e.session_id for e in feed] == [10, 20, 30]
    assert feed[1].from_name == "同学"
    assert feed[1].avatar_url == "https://avatars.example/7.svg"
    assert feed[2].preview == EMPTY_PREVIEW
    assert feed[0].time_label == "12:00"
    assert [e.unread_count for e in feed] == [2, 0, 5]


def test_feed_uses_short_date_for_older_sessions(aggregator, store):
    store._sessions = [make_session(1, last_time=NOW - timedelta(days=3))]
    assert aggregator.feed(NOW)[0].time_label == "05/12"


@pytest.mark.asyncio
async def test_open_marks_all_read(aggregator, store, fake_service, setup_sessions):
    await store.load(preferred_id=20)

    assert await aggregator.open() is True

    assert aggregator.unread_total == 0
    assert fake_service.count("mark_all_read") == 1


@pytest.mark.asyncio
async def test_open_with_nothing_unread_does_not_call_service(
    aggregator, store, fake_service, setup_sessions
):
    await store.load(preferred_id=20)
    await store.mark_all_read()

    assert await aggregator.open() is False
    assert fake_service.count("mark_all_read") == 1


@pytest.mark.asyncio
async def test_open_failure_still_clears_badge(
    aggregator, store, fake_service, notifier, setup_sessions
):
    await store.load(preferred_id=20)
    fake_service.fail("mark_all_read", TransportError())

    assert await aggregator.open() is True

    assert aggregator.badge_text() == ""
    assert notifier.last_error is not None


@pytest.mark.asyncio
async def test_open_delegates_to_session_store(aggregator, store):
    store._sessions = [make_session(1, unread_count=3)]

    with patch.object(store, "mark_all_read", new=AsyncMock(return_value=True)) as mark:
        assert await aggregator.open() is True

    mark.assert_awaited_once()
