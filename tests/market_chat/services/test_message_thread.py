import asyncio
from datetime import timedelta

import pytest

from market_chat.core.errors import TransportError
from market_chat.schemas.message import DeliveryState, MessageDraft, MessageType
from market_chat.services.message_thread import MessageThread
from tests.fixtures.messaging_fixtures import ME, NOW, make_message


@pytest.mark.asyncio
async def test_load_for_session(fake_service, setup_sessions):
    thread = MessageThread(fake_service)

    loaded = await thread.load_for_session(10)

    assert [m.id for m in loaded] == [1, 2]
    assert thread.session_id == 10
    assert thread.loading is False
    assert thread.belongs_to(10)


@pytest.mark.asyncio
async def test_stale_load_is_discarded(fake_service, setup_sessions):
    thread = MessageThread(fake_service)
    gate = fake_service.hold("list_messages", 10)

    slow = asyncio.ensure_future(thread.load_for_session(10))
    await asyncio.sleep(0)
    await thread.load_for_session(20)
    gate.set()

    assert await slow is None
    assert thread.session_id == 20
    assert [m.id for m in thread.messages] == [3]


@pytest.mark.asyncio
async def test_switching_session_empties_thread_immediately(fake_service, setup_sessions):
    thread = MessageThread(fake_service)
    await thread.load_for_session(10)
    gate = fake_service.hold("list_messages", 20)

    pending = asyncio.ensure_future(thread.load_for_session(20))
    await asyncio.sleep(0)

    assert thread.messages == ()
    assert thread.loading is True
    gate.set()
    assert [m.id for m in await pending] == [3]


@pytest.mark.asyncio
async def test_load_error_propagates(fake_service, setup_sessions):
    thread = MessageThread(fake_service)
    fake_service.fail("list_messages", TransportError())

    with pytest.raises(TransportError):
        await thread.load_for_session(10)
    assert thread.loading is False


@pytest.mark.asyncio
async def test_reconcile_keeps_position(fake_service, setup_sessions):
    thread = MessageThread(fake_service)
    await thread.load_for_session(10)
    first = thread.append_optimistic(MessageDraft(session_id=10, content="a"), ME)
    second = thread.append_optimistic(MessageDraft(session_id=10, content="b"), ME)
    assert first.delivery == DeliveryState.PENDING

    record = make_message(500, session_id=None, content="a", created_at=NOW)
    assert thread.reconcile(first.id, record) is True

    assert [m.id for m in thread.messages] == [1, 2, 500, second.id]
    assert thread.messages[2].delivery == DeliveryState.SENT
    assert thread.messages[2].session_id == 10


def test_reconcile_drops_temp_when_record_already_present(fake_service):
    thread = MessageThread(fake_service)
    temp = thread.append_optimistic(MessageDraft(session_id=10, content="a"), ME)
    thread._messages.append(make_message(500))

    assert thread.reconcile(temp.id, make_message(500)) is True
    assert [m.id for m in thread.messages] == [500]


def test_reconcile_unknown_temp_id(fake_service):
    thread = MessageThread(fake_service)
    assert thread.reconcile("tmp-missing", make_message(1)) is False


def test_mark_failed(fake_service):
    thread = MessageThread(fake_service)
    temp = thread.append_optimistic(MessageDraft(session_id=10, content="a"), ME)

    assert thread.mark_failed(temp.id) is True
    assert thread.find(temp.id).delivery == DeliveryState.FAILED
    assert thread.find(temp.id).content == "a"


@pytest.mark.asyncio
async def test_apply_recall_in_place(fake_service, setup_sessions):
    thread = MessageThread(fake_service)
    await thread.load_for_session(10)

    assert thread.apply_recall(1) is True
    assert thread.apply_recall(404) is False

    recalled = thread.messages[0]
    assert recalled.id == 1
    assert recalled.type == MessageType.RECALL
    assert recalled.content == ""
    assert len(thread) == 2


def test_is_last_and_last(fake_service):
    thread = MessageThread(fake_service)
    assert thread.last() is None
    assert not thread.is_last(1)

    thread._messages.extend(
        [make_message(1), make_message(2, created_at=NOW + timedelta(minutes=1))]
    )
    assert thread.is_last(2)
    assert not thread.is_last(1)
    assert thread.last().id == 2


@pytest.mark.asyncio
async def test_reload_keeps_unconfirmed_entries_at_tail(fake_service, setup_sessions):
    thread = MessageThread(fake_service)
    await thread.load_for_session(10)
    pending = thread.append_optimistic(MessageDraft(session_id=10, content="a"), ME)
    failed = thread.append_optimistic(MessageDraft(session_id=10, content="b"), ME)
    thread.mark_failed(failed.id)

    loaded = await thread.load_for_session(10)

    assert [m.id for m in loaded] == [1, 2, pending.id, failed.id]
    assert thread.find(failed.id).delivery == DeliveryState.FAILED
    assert thread.reconcile(pending.id, make_message(500, content="a")) is True
    assert [m.id for m in thread.messages] == [1, 2, 500, failed.id]
