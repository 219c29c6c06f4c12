"""Use cases for turning activity log entries into synchronization events."""

from __future__ import annotations

from typing import Any, Final, Iterable, Mapping

from dashboard_sync.domain.entities import (
    EVENT_SOURCE_POLL,
    ActivityLogEntry,
    EventActor,
    EventScope,
    SyncEvent,
    normalize_action,
)

from .notifications import parse_activity_details

RESOURCE_TRANSACTION: Final = "transaction"
RESOURCE_CLIENT: Final = "client"
RESOURCE_PRODUCT: Final = "product"
RESOURCE_CATEGORY: Final = "category"
RESOURCE_USER: Final = "user"
RESOURCE_BRANCH: Final = "branch"
RESOURCE_SETTINGS: Final = "settings"
RESOURCE_SESSION: Final = "session"
RESOURCE_SUPPORT: Final = "support_request"

ACTION_RESOURCE_TYPES: Final[dict[str, str]] = {
    "transaction_created": RESOURCE_TRANSACTION,
    "transaction_updated": RESOURCE_TRANSACTION,
    "client_transaction_added": RESOURCE_CLIENT,
    "client_created": RESOURCE_CLIENT,
    "client_updated": RESOURCE_CLIENT,
    "product_created": RESOURCE_PRODUCT,
    "product_updated": RESOURCE_PRODUCT,
    "price_updated": RESOURCE_PRODUCT,
    "stock_updated": RESOURCE_PRODUCT,
    "category_created": RESOURCE_CATEGORY,
    "user_created": RESOURCE_USER,
    "user_updated": RESOURCE_USER,
    "user_blocked": RESOURCE_USER,
    "user_unblocked": RESOURCE_USER,
    "password_reset_sent": RESOURCE_USER,
    "branch_created": RESOURCE_BRANCH,
    "branch_updated": RESOURCE_BRANCH,
    "settings_updated": RESOURCE_SETTINGS,
    "login": RESOURCE_SESSION,
    "logout": RESOURCE_SESSION,
    "support_request": RESOURCE_SUPPORT,
    "support_request_created": RESOURCE_SUPPORT,
    "login_assistance_request": RESOURCE_SUPPORT,
}

# Parsed detail fields naming the mutated resource, in order of preference.
# Emails and product names stand in for ids the wording never carries.
_RESOURCE_ID_FIELDS: Final = (
    "transactionId",
    "productId",
    "clientId",
    "userId",
    "email",
    "productName",
)


def resource_type_for(action: str) -> str:
    """Return the resource type mutated by a normalized ``action``."""

    known = ACTION_RESOURCE_TYPES.get(action)
    if known is not None:
        return known
    head = action.split("_", 1)[0]
    return head or "unknown"


def resource_id_from_details(parsed: Mapping[str, Any]) -> str | None:
    """Return the resource named by parsed ``details`` fields, if any.

    Both channels derive ids through this helper so that a pushed event and
    the logged entry describing it share a notification id.
    """

    for field in _RESOURCE_ID_FIELDS:
        value = parsed.get(field)
        if value:
            return str(value)
    return None


def entry_to_event(entry: ActivityLogEntry) -> SyncEvent:
    """Normalize an activity log ``entry`` into the shared event shape."""

    action = normalize_action(entry.action)
    parsed = parse_activity_details(action, entry.details)

    resource_id = entry.resource_id or resource_id_from_details(parsed) or entry.id

    payload = {
        **entry.extra,
        **parsed,
        "details": entry.details,
        "device": entry.device,
        "logId": entry.id,
    }
    return SyncEvent(
        action=action,
        resource_type=entry.resource_type or resource_type_for(action),
        resource_id=resource_id,
        occurred_at=entry.timestamp,
        scope=EventScope(branch_id=entry.branch_id, branch=entry.branch),
        actor=EventActor(email=entry.performed_by, role=entry.role),
        payload=payload,
        source=EVENT_SOURCE_POLL,
        log_id=entry.id,
    )


def sort_entries(entries: Iterable[ActivityLogEntry]) -> list[ActivityLogEntry]:
    """Return ``entries`` ordered by server timestamp, oldest first.

    The sort is stable, so entries sharing a timestamp keep the server order.
    """

    return sorted(entries, key=lambda entry: entry.timestamp)


__all__ = [
    "ACTION_RESOURCE_TYPES",
    "RESOURCE_BRANCH",
    "RESOURCE_CATEGORY",
    "RESOURCE_CLIENT",
    "RESOURCE_PRODUCT",
    "RESOURCE_SESSION",
    "RESOURCE_SETTINGS",
    "RESOURCE_SUPPORT",
    "RESOURCE_TRANSACTION",
    "RESOURCE_USER",
    "entry_to_event",
    "resource_id_from_details",
    "resource_type_for",
    "sort_entries",
]
