"""Client-side read-model cache consumed through ``invalidate``."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Hashable, Protocol

from dashboard_sync.utils import now_utc

QueryKey = tuple[Hashable, ...]

logger = logging.getLogger(__name__)


class CacheManager(Protocol):
    """Capability used to mark cached read-models as stale."""

    def invalidate(self, query_key: QueryKey) -> Awaitable[None] | None:
        ...


@dataclass
class CachedQuery:
    """A cached read-model and whether it must be refetched."""

    data: Any
    stale: bool = False
    updated_at: datetime = field(default_factory=now_utc)


class InMemoryQueryCache:
    """Keyed read-model cache with prefix invalidation.

    Invalidating ``("transactions",)`` marks every entry whose key starts with
    ``"transactions"`` as stale, including branch-scoped variants such as
    ``("transactions", "B1")``.
    """

    def __init__(self) -> None:
        self._entries: dict[QueryKey, CachedQuery] = {}
        self._invalidations: list[QueryKey] = []

    def set(self, query_key: QueryKey, data: Any) -> None:
        self._entries[tuple(query_key)] = CachedQuery(data=data)

    def get(self, query_key: QueryKey) -> CachedQuery | None:
        return self._entries.get(tuple(query_key))

    def is_stale(self, query_key: QueryKey) -> bool:
        entry = self.get(query_key)
        return entry is None or entry.stale

    def invalidate(self, query_key: QueryKey) -> None:
        prefix = tuple(query_key)
        self._invalidations.append(prefix)
        matched = 0
        for key, entry in self._entries.items():
            if key[: len(prefix)] == prefix:
                entry.stale = True
                matched += 1
        logger.debug("Invalidated %s (%d cached entries)", prefix, matched)

    @property
    def invalidations(self) -> list[QueryKey]:
        """Every key passed to :meth:`invalidate`, in call order."""

        return list(self._invalidations)


__all__ = ["CacheManager", "CachedQuery", "InMemoryQueryCache", "QueryKey"]
