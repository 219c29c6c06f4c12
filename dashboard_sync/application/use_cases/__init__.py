"""Aggregate application use cases."""

from .activity import entry_to_event, resource_type_for, sort_entries
from .invalidation import CacheInvalidationRouter
from .notifications import NOTIFICATION_RULES, build_notification
from .push_events import PUSH_EVENT_NAMES, build_push_registry
from .reconciliation import ActivityLogReconciler
from .sync_session import SESSION_EXPIRED_MESSAGE, SyncSession

__all__ = [
    "ActivityLogReconciler",
    "CacheInvalidationRouter",
    "NOTIFICATION_RULES",
    "PUSH_EVENT_NAMES",
    "SESSION_EXPIRED_MESSAGE",
    "SyncSession",
    "build_notification",
    "build_push_registry",
    "entry_to_event",
    "resource_type_for",
    "sort_entries",
]
