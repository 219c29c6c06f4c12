"""Route server-side mutations to the read-models they make stale."""

from __future__ import annotations

import inspect
import logging
from typing import Final, Iterable, Mapping

from dashboard_sync.domain.entities import EventScope
from dashboard_sync.infrastructure.cache import CacheManager, QueryKey

from .activity import (
    RESOURCE_BRANCH,
    RESOURCE_CATEGORY,
    RESOURCE_CLIENT,
    RESOURCE_PRODUCT,
    RESOURCE_SESSION,
    RESOURCE_SETTINGS,
    RESOURCE_SUPPORT,
    RESOURCE_TRANSACTION,
    RESOURCE_USER,
)

logger = logging.getLogger(__name__)

READ_MODELS_BY_RESOURCE: Final[Mapping[str, tuple[str, ...]]] = {
    # A transaction changes the ledger, the client balance and the stock.
    RESOURCE_TRANSACTION: ("transactions", "clients", "inventory", "products"),
    RESOURCE_CLIENT: ("clients", "transactions"),
    RESOURCE_PRODUCT: ("products", "inventory"),
    RESOURCE_CATEGORY: ("categories", "products"),
    RESOURCE_USER: ("users",),
    RESOURCE_BRANCH: ("branches", "users"),
    RESOURCE_SETTINGS: ("settings", "products"),
    RESOURCE_SESSION: ("activity-logs",),
    RESOURCE_SUPPORT: ("activity-logs",),
}

SUMMARY_READ_MODELS: Final[tuple[str, ...]] = ("dashboard", "revenue", "reports")
FALLBACK_READ_MODELS: Final[tuple[str, ...]] = ("transactions", "clients", "products")


class CacheInvalidationRouter:
    """Mark the read-models derived from a mutated resource as stale."""

    def __init__(
        self,
        cache_manager: CacheManager,
        *,
        read_models: Mapping[str, tuple[str, ...]] = READ_MODELS_BY_RESOURCE,
        summary_read_models: Iterable[str] = SUMMARY_READ_MODELS,
        fallback_read_models: Iterable[str] = FALLBACK_READ_MODELS,
    ) -> None:
        self._cache_manager = cache_manager
        self._read_models = dict(read_models)
        self._summary = tuple(summary_read_models)
        self._fallback = tuple(fallback_read_models)

    def keys_for(self, resource_type: str, scope: EventScope | None = None) -> list[QueryKey]:
        """Return the query keys invalidated for ``resource_type``.

        Keys are read-model prefixes; the cache manager matches branch-scoped
        entries under them, so ``scope`` never narrows the set.
        """

        names = self._read_models.get(resource_type, self._fallback)
        keys: list[QueryKey] = []
        seen: set[QueryKey] = set()
        for name in (*names, *self._summary):
            key: QueryKey = (name,)
            if key in seen:
                continue
            seen.add(key)
            keys.append(key)
        return keys

    async def invalidate(
        self, resource_type: str, scope: EventScope | None = None
    ) -> list[QueryKey]:
        """Send an invalidation signal for every affected read-model."""

        keys = self.keys_for(resource_type, scope)
        if resource_type not in self._read_models:
            logger.debug(
                "Unknown resource type %r; invalidating default read-models", resource_type
            )
        for key in keys:
            try:
                result = self._cache_manager.invalidate(key)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Failed to invalidate cached read-model %s", key)
        return keys


__all__ = [
    "CacheInvalidationRouter",
    "FALLBACK_READ_MODELS",
    "READ_MODELS_BY_RESOURCE",
    "SUMMARY_READ_MODELS",
]
