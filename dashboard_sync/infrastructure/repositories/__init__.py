"""Repository implementations for infrastructure layer."""

from .cursor_repository import CursorRepository
from .key_value_store import InMemoryKeyValueStore, KeyValueStore, SqlKeyValueStore
from .notification_store import NotificationStore, StoreListener

__all__ = [
    "CursorRepository",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "NotificationStore",
    "SqlKeyValueStore",
    "StoreListener",
]
