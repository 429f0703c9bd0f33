"""REST implementation of the messaging and favorites collaborators."""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional

import requests
from pydantic import ValidationError

from market_chat.adapters.base import BaseFavoritesService, BaseMessagingService
from market_chat.config import Settings, get_settings
from market_chat.core.errors import BusinessRejection, TransportError
from market_chat.infra.logging_config import get_logger
from market_chat.schemas.message import ApiEnvelope, Message, MessageDraft, MessageId
from market_chat.schemas.session import Session

logger = get_logger("rest_client")


class RestClient:
    """
    Thin JSON client for the marketplace API.

    Every response is unwrapped from its {success, data, message} envelope.
    Blocking `requests` calls run in a worker thread so callers can await them.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        http: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._http = http or requests.Session()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "RestClient":
        settings = settings or get_settings()
        return cls(
            base_url=settings.messaging_api_url,
            token=settings.api_token,
            timeout=settings.request_timeout_seconds,
        )

    def close(self) -> None:
        self._http.close()

    async def request(
        self, method: str, path: str, json: Optional[dict[str, Any]] = None
    ) -> Any:
        return await asyncio.to_thread(self._request_sync, method, path, json)

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _request_sync(
        self, method: str, path: str, json: Optional[dict[str, Any]] = None
    ) -> Any:
        url = f"{self._base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            resp = self._http.request(
                method,
                url,
                json=json,
                headers=self._headers(),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransportError() from e

        try:
            body = resp.json()
        except ValueError:
            body = None

        envelope: Optional[ApiEnvelope] = None
        if isinstance(body, dict):
            try:
                envelope = ApiEnvelope.model_validate(body)
            except ValidationError:
                envelope = None

        if envelope is not None and not envelope.success:
            logger.info("%s %s rejected: %s", method, url, envelope.message)
            raise BusinessRejection(envelope.message)

        if resp.status_code >= 400:
            # Error handlers may answer with only {message} and no success flag.
            message = body.get("message") if isinstance(body, dict) else None
            logger.warning(
                "%s %s returned HTTP %s: %s",
                method,
                url,
                resp.status_code,
                (resp.text or "no body")[:500],
            )
            if message and resp.status_code < 500:
                raise BusinessRejection(message)
            raise TransportError(status_code=resp.status_code)

        if envelope is None:
            raise TransportError(f"Invalid response from {path}")
        return envelope.data


def _parse(model: Any, data: Any, what: str) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning("Invalid %s payload: %s", what, e)
        raise TransportError(f"Invalid {what} payload") from e


def _records(data: Any, what: str) -> List[dict]:
    """List payload whose items are all JSON objects; anything else is a transport error."""
    items = data or []
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        logger.warning("Invalid %s list payload: %r", what, data)
        raise TransportError(f"Invalid {what} payload")
    return items


class RestMessagingService(BaseMessagingService):
    """Messaging service over the /chats endpoints."""

    def __init__(self, client: RestClient) -> None:
        self._client = client

    async def list_sessions(self) -> List[Session]:
        data = await self._client.request("GET", "/chats")
        return [_parse(Session, item, "session") for item in _records(data, "session")]

    async def list_messages(self, session_id: MessageId) -> List[Message]:
        data = await self._client.request("GET", f"/chats/{session_id}/messages")
        return [
            _parse(Message, {**item, "sessionId": session_id}, "message")
            for item in _records(data, "message")
        ]

    async def send_message(self, session_id: MessageId, draft: MessageDraft) -> Message:
        data = await self._client.request(
            "POST", f"/chats/{session_id}/messages", json=draft.to_request()
        )
        if not isinstance(data, dict):
            raise TransportError("Invalid message payload")
        return _parse(Message, {**data, "sessionId": session_id}, "message")

    async def recall_message(
        self, session_id: MessageId, message_id: MessageId
    ) -> Message:
        data = await self._client.request(
            "POST", f"/chats/{session_id}/messages/{message_id}/recall"
        )
        if not isinstance(data, dict):
            raise TransportError("Invalid message payload")
        return _parse(Message, {**data, "sessionId": session_id}, "message")

    async def mark_all_read(self) -> None:
        await self._client.request("POST", "/chats/read-all")

    async def start_chat(self, listing_id: MessageId) -> Session:
        data = await self._client.request(
            "POST", "/chats/start", json={"productId": listing_id}
        )
        return _parse(Session, data, "session")


class RestFavoritesService(BaseFavoritesService):
    """Favorites over the /favorites endpoints; list returns listing summaries."""

    def __init__(self, client: RestClient) -> None:
        self._client = client

    async def list(self) -> List[MessageId]:
        data = await self._client.request("GET", "/favorites")
        ids: List[MessageId] = []
        for item in _records(data, "favorite"):
            if item.get("id") is not None:
                ids.append(item["id"])
        return ids

    async def add(self, listing_id: MessageId) -> None:
        await self._client.request("POST", f"/favorites/{listing_id}")

    async def remove(self, listing_id: MessageId) -> None:
        await self._client.request("DELETE", f"/favorites/{listing_id}")
