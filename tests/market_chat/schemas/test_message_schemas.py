from datetime import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from market_chat.schemas.identity import CurrentUser
from market_chat.schemas.message import (
    DeliveryState,
    Message,
    MessageDraft,
    MessageType,
    is_temp_id,
    new_temp_id,
)
from market_chat.schemas.session import SYSTEM_PARTNER_NAME, Session
from tests.fixtures.messaging_fixtures import ME, make_message

AVATAR_TEMPLATE = "https://avatars.example/{seed}.svg"


def test_message_from_wire_payload():
    message = Message.model_validate(
        {
            "id": 5,
            "sessionId": 10,
            "senderId": 2,
            "type": "TEXT",
            "content": None,
            "read": True,
            "createdAt": "2024-05-15T11:58:00",
        }
    )
    assert message.content == ""
    assert message.created_at == datetime(2024, 5, 15, 11, 58)
    assert message.delivery == DeliveryState.SENT
    assert "delivery" not in message.model_dump()


def test_recall_payload_never_keeps_content():
    message = Message.model_validate(
        {
            "id": 5,
            "senderId": 2,
            "type": "RECALL",
            "content": "leaked",
            "createdAt": "2024-05-15T11:58:00",
        }
    )
    assert message.is_recalled
    assert message.content == ""


def test_as_recalled_keeps_identity_and_drops_content():
    original = make_message(7, content="private")
    record = original.model_copy(update={"read": True})

    recalled = original.as_recalled(record)

    assert recalled.id == 7
    assert recalled.type == MessageType.RECALL
    assert recalled.content == ""
    assert recalled.read is True
    assert original.content == "private"


def test_message_is_frozen():
    message = make_message(1)
    with pytest.raises(ValidationError):
        message.content = "changed"


def test_temp_ids():
    temp = new_temp_id()
    assert is_temp_id(temp)
    assert not is_temp_id(42)
    assert not is_temp_id("42")
    assert make_message(temp).is_temporary


def test_draft_rejects_recall_type():
    with pytest.raises(ValidationError):
        MessageDraft(session_id=1, type=MessageType.RECALL, content="x")


def test_draft_request_body():
    draft = MessageDraft(session_id=1, content="hi")
    assert draft.to_request() == {"type": "TEXT", "content": "hi"}
    assert draft.draft_id != MessageDraft(session_id=1, content="hi").draft_id


def test_session_folds_product_fields():
    session = Session.model_validate(
        {
            "id": 10,
            "partnerId": 2,
            "partnerName": "Bob",
            "lastMessage": "ok",
            "lastTime": "2024-05-15T09:00:00",
            "unreadCount": None,
            "productId": 77,
            "productTitle": "Bike",
            "productThumbnail": "https://img.example/bike.png",
            "productPrice": "120.50",
        }
    )
    assert session.unread_count == 0
    assert session.linked_listing.id == 77
    assert session.linked_listing.price == Decimal("120.50")
    assert session.last_message_preview == "ok"


def test_session_rejects_negative_unread():
    with pytest.raises(ValidationError):
        Session(id=1, unread_count=-1)


def test_session_display_name_and_avatar():
    named = Session(id=1, partner_id=2, partner_name="Bob", partner_avatar_ref="a.png")
    anonymous = Session(id=2, partner_id=7)
    system = Session(id=3, partner_id=0)

    assert named.display_name("同学") == "Bob"
    assert named.avatar_url(AVATAR_TEMPLATE, "同学") == "a.png"
    assert anonymous.display_name("同学") == "同学"
    assert anonymous.avatar_url(AVATAR_TEMPLATE, "同学") == (
        "https://avatars.example/7.svg"
    )
    assert system.is_system
    assert system.display_name("同学") == SYSTEM_PARTNER_NAME


def test_current_user_avatar(faker):
    user = CurrentUser(id=ME, username=faker.user_name())
    assert user.avatar(AVATAR_TEMPLATE) == f"https://avatars.example/{ME}.svg"
    custom = CurrentUser.model_validate({"id": ME, "avatarUrl": "me.png"})
    assert custom.avatar(AVATAR_TEMPLATE) == "me.png"
