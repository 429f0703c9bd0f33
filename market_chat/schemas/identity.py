"""Signed-in user as supplied by the identity collaborator (read-only)."""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field

from market_chat.schemas.message import MessageId


class CurrentUser(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: MessageId
    username: Optional[str] = None
    nickname: Optional[str] = None
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")

    def avatar(self, template: str) -> str:
        seed = self.id or self.username or "user"
        return self.avatar_url or template.format(seed=quote(str(seed), safe=""))
