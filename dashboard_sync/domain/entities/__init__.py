"""Domain entities exposed by the synchronization engine."""

from .activity_log_entry import ActivityLogEntry
from .connection_state import ConnectionState
from .cursor import CURSOR_KEY_PREFIX, Cursor, cursor_key
from .event import (
    EVENT_SOURCE_POLL,
    EVENT_SOURCE_PUSH,
    EventActor,
    EventScope,
    SyncEvent,
    normalize_action,
)
from .notification import (
    SEVERITIES,
    SEVERITY_ERROR,
    SEVERITY_INFO,
    SEVERITY_SUCCESS,
    Notification,
)
from .viewer import (
    ALL_ROLES,
    ORGANIZATION_WIDE_ROLES,
    ROLE_ADMIN,
    ROLE_MAINTAINER,
    ROLE_STAFF,
    ROLE_SUPER_ADMIN,
    Viewer,
)

__all__ = [
    "ActivityLogEntry",
    "ConnectionState",
    "CURSOR_KEY_PREFIX",
    "Cursor",
    "cursor_key",
    "EVENT_SOURCE_POLL",
    "EVENT_SOURCE_PUSH",
    "EventActor",
    "EventScope",
    "SyncEvent",
    "normalize_action",
    "Notification",
    "SEVERITIES",
    "SEVERITY_ERROR",
    "SEVERITY_INFO",
    "SEVERITY_SUCCESS",
    "ALL_ROLES",
    "ORGANIZATION_WIDE_ROLES",
    "ROLE_ADMIN",
    "ROLE_MAINTAINER",
    "ROLE_STAFF",
    "ROLE_SUPER_ADMIN",
    "Viewer",
]
