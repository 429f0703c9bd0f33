"""
Shared cache of favorited listing ids.

Constructed explicitly and injected into its consumers. Concurrent `load()`
calls share one underlying fetch; mutations patch the cached set before the
network call and roll back that id if the call fails.
"""

from __future__ import annotations

import asyncio
import logging
from typing import FrozenSet, Optional, Set

from market_chat.adapters.base import BaseFavoritesService
from market_chat.schemas.message import MessageId

logger = logging.getLogger(__name__)


class FavoriteCache:
    def __init__(self, service: BaseFavoritesService) -> None:
        self._service = service
        self._ids: Optional[Set[MessageId]] = None
        self._inflight: Optional[asyncio.Task] = None
        self._generation = 0

    @property
    def is_loaded(self) -> bool:
        return self._ids is not None

    async def init(self) -> FrozenSet[MessageId]:
        """Warm the cache."""
        return await self.load()

    async def load(self) -> FrozenSet[MessageId]:
        if self._ids is not None:
            return frozenset(self._ids)
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._fetch(self._generation))
        task = self._inflight
        return await asyncio.shield(task)

    def invalidate(self) -> None:
        """Forget the cached set and any in-flight fetch; the next load re-fetches."""
        self._generation += 1
        self._ids = None
        self._inflight = None

    def is_favorite(self, listing_id: MessageId) -> bool:
        return self._ids is not None and listing_id in self._ids

    async def add(self, listing_id: MessageId) -> None:
        await self._mutate(listing_id, add=True)

    async def remove(self, listing_id: MessageId) -> None:
        await self._mutate(listing_id, add=False)

    async def toggle(self, listing_id: MessageId) -> bool:
        """Flip membership; returns the new state."""
        if self._ids is None:
            await self.load()
        favorite = not self.is_favorite(listing_id)
        await self._mutate(listing_id, add=favorite)
        return favorite

    async def _fetch(self, generation: int) -> FrozenSet[MessageId]:
        try:
            ids = set(await self._service.list())
        except Exception:
            if generation == self._generation:
                self._inflight = None
            raise
        if generation == self._generation:
            self._ids = ids
            self._inflight = None
        else:
            logger.debug("Discarding favorites fetched before invalidation")
        return frozenset(ids)

    async def _mutate(self, listing_id: MessageId, add: bool) -> None:
        call = self._service.add if add else self._service.remove
        if self._ids is None:
            # Nothing to patch; no fetch overlapping the call may populate the cache.
            self.invalidate()
            try:
                await call(listing_id)
            finally:
                self.invalidate()
            return

        ids = self._ids
        was_member = listing_id in ids
        if add:
            ids.add(listing_id)
        else:
            ids.discard(listing_id)
        try:
            await call(listing_id)
        except Exception as e:
            logger.warning(
                "Favorite %s failed for %s, rolling back: %s",
                "add" if add else "remove",
                listing_id,
                e,
            )
            if self._ids is ids:
                if was_member:
                    ids.add(listing_id)
                else:
                    ids.discard(listing_id)
            raise
