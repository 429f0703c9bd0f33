"""Collaborator adapters for the marketplace backend."""

from market_chat.adapters.base import BaseFavoritesService, BaseMessagingService
from market_chat.adapters.rest import (
    RestClient,
    RestFavoritesService,
    RestMessagingService,
)

__all__ = [
    "BaseFavoritesService",
    "BaseMessagingService",
    "RestClient",
    "RestFavoritesService",
    "RestMessagingService",
]
