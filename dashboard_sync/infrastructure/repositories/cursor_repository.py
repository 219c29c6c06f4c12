"""Persistence helpers for reconciliation cursors."""

from __future__ import annotations

import logging

from dashboard_sync.domain.entities import Cursor, cursor_key

from .key_value_store import KeyValueStore

logger = logging.getLogger(__name__)


class CursorRepository:
    """Read and write :class:`Cursor` objects through a key-value store."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def get(self, viewer_id: str) -> Cursor | None:
        value = self.store.get(cursor_key(viewer_id))
        if not value:
            return None
        return Cursor(viewer_id=viewer_id, last_seen_event_id=value)

    def save(self, cursor: Cursor) -> Cursor:
        self.store.set(cursor.storage_key, cursor.last_seen_event_id)
        logger.debug("Saved cursor %s for viewer %s", cursor.last_seen_event_id, cursor.viewer_id)
        return cursor

    def clear(self, viewer_id: str) -> None:
        self.store.delete(cursor_key(viewer_id))
        logger.debug("Cleared cursor for viewer %s", viewer_id)


__all__ = ["CursorRepository"]
