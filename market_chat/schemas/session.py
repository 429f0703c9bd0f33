"""Pydantic schemas for chat sessions and their linked catalog listing."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from market_chat.schemas.message import MessageId, to_local_naive

SYSTEM_PARTNER_ID = 0
SYSTEM_PARTNER_NAME = "系统通知"
SYSTEM_PARTNER_AVATAR = "https://api.dicebear.com/7.x/bottts/svg?seed=system-notice"

# -----------------------------------------------------------------------------
# Linked listing (read-only summary supplied by the catalog)
# -----------------------------------------------------------------------------


class LinkedListing(BaseModel):
    """Catalog item a session was started from."""

    model_config = ConfigDict(frozen=True)

    id: MessageId
    title: Optional[str] = None
    thumbnail: Optional[str] = None
    price: Optional[Decimal] = None


# -----------------------------------------------------------------------------
# Session
# -----------------------------------------------------------------------------


class Session(BaseModel):
    """
    One conversation between the current user and a counterpart.

    The wire format is the flat camelCase DTO of the chat list endpoint; the
    product* fields are folded into `linked_listing`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: MessageId
    partner_id: Optional[MessageId] = Field(default=None, alias="partnerId")
    partner_name: Optional[str] = Field(default=None, alias="partnerName")
    partner_avatar_ref: Optional[str] = Field(default=None, alias="partnerAvatar")
    last_message_preview: Optional[str] = Field(default=None, alias="lastMessage")
    last_message_time: Optional[datetime] = Field(default=None, alias="lastTime")
    unread_count: int = Field(default=0, ge=0, alias="unreadCount")
    linked_listing: Optional[LinkedListing] = Field(
        default=None, alias="linkedListing"
    )

    @model_validator(mode="before")
    @classmethod
    def _fold_product_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("productId") is None:
            return data
        data = dict(data)
        data.setdefault(
            "linkedListing",
            {
                "id": data.pop("productId"),
                "title": data.pop("productTitle", None),
                "thumbnail": data.pop("productThumbnail", None),
                "price": data.pop("productPrice", None),
            },
        )
        return data

    @field_validator("last_message_time")
    @classmethod
    def _normalize_time(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_local_naive(value) if value is not None else None

    @field_validator("unread_count", mode="before")
    @classmethod
    def _none_unread(cls, value: Any) -> Any:
        return 0 if value is None else value

    @property
    def is_system(self) -> bool:
        return self.partner_id == SYSTEM_PARTNER_ID

    def display_name(self, default: str) -> str:
        if self.partner_name:
            return self.partner_name
        if self.is_system:
            return SYSTEM_PARTNER_NAME
        return default

    def avatar_url(self, template: str, default_name: str) -> str:
        """Partner avatar, or a placeholder seeded by partner id (or name)."""
        if self.partner_avatar_ref:
            return self.partner_avatar_ref
        if self.is_system:
            return SYSTEM_PARTNER_AVATAR
        seed = self.partner_id if self.partner_id else self.display_name(default_name)
        return template.format(seed=quote(str(seed), safe=""))
