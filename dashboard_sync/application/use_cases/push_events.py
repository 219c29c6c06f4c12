"""Normalizers turning push channel frames into synchronization events."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Final, Mapping

from dashboard_sync.domain.entities import (
    EVENT_SOURCE_PUSH,
    EventActor,
    EventScope,
    SyncEvent,
    normalize_action,
)
from dashboard_sync.utils import now_utc, parse_timestamp

from .activity import resource_id_from_details, resource_type_for
from .notifications import parse_activity_details

PushNormalizer = Callable[[Mapping[str, Any]], SyncEvent]

# Business events broadcast by the server over the push channel.
PUSH_EVENT_NAMES: Final[tuple[str, ...]] = (
    "transaction_created",
    "client_created",
    "product_created",
    "product_updated",
    "stock_updated",
    "price_updated",
    "category_created",
    "user_created",
    "user_updated",
    "branch_updated",
    "support_request_created",
    "password_reset_sent",
)


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _occurred_at(data: Mapping[str, Any]) -> datetime:
    return parse_timestamp(data.get("timestamp")) or now_utc()


def _business_normalizer(event_name: str) -> PushNormalizer:
    action = normalize_action(event_name)

    def normalize(data: Mapping[str, Any]) -> SyncEvent:
        body = data.get("data")
        payload = dict(body) if isinstance(body, Mapping) else {}
        details = _optional_str(data.get("details")) or _optional_str(payload.get("details"))
        parsed = parse_activity_details(action, details or "")
        resource_id = (
            _optional_str(data.get("resourceId"))
            or _optional_str(payload.get("_id"))
            or _optional_str(payload.get("id"))
            or resource_id_from_details(parsed)
            or action
        )
        resource_type = _optional_str(data.get("resourceType"))
        return SyncEvent(
            action=action,
            resource_type=resource_type.lower() if resource_type else resource_type_for(action),
            resource_id=resource_id,
            occurred_at=_occurred_at(data),
            scope=EventScope(
                branch_id=_optional_str(data.get("branchId")),
                branch=_optional_str(data.get("branch")),
            ),
            actor=EventActor(
                email=str(data.get("actorEmail") or ""),
                role=str(data.get("actorRole") or ""),
            ),
            payload={**parsed, **payload},
            source=EVENT_SOURCE_PUSH,
        )

    return normalize


def _normalize_support_request(data: Mapping[str, Any]) -> SyncEvent:
    email = str(data.get("email") or "")
    payload = {
        "userEmail": email,
        "issueType": data.get("issueType"),
        "description": data.get("message") or "",
        "urgent": True,
    }
    return SyncEvent(
        action="support_request_created",
        resource_type=resource_type_for("support_request_created"),
        resource_id=email or "support_request",
        occurred_at=_occurred_at(data),
        actor=EventActor(email=email),
        payload=payload,
        source=EVENT_SOURCE_PUSH,
    )


def _normalize_password_reset(data: Mapping[str, Any]) -> SyncEvent:
    payload = {
        key: data[key]
        for key in ("temporaryPassword", "userName", "branchAdminName", "branchAdminEmail")
        if data.get(key)
    }
    payload["urgent"] = True
    resource_id = (
        _optional_str(data.get("userId"))
        or _optional_str(data.get("userName"))
        or "password_reset"
    )
    return SyncEvent(
        action="password_reset_sent",
        resource_type=resource_type_for("password_reset_sent"),
        resource_id=resource_id,
        occurred_at=_occurred_at(data),
        scope=EventScope(
            branch_id=_optional_str(data.get("branchId")),
            branch=_optional_str(data.get("branch")),
        ),
        payload=payload,
        source=EVENT_SOURCE_PUSH,
    )


_SPECIAL_NORMALIZERS: Final[dict[str, PushNormalizer]] = {
    "support_request_created": _normalize_support_request,
    "password_reset_sent": _normalize_password_reset,
}


def build_push_registry() -> dict[str, PushNormalizer]:
    """Return the push event name to normalizer mapping."""

    return {
        name: _SPECIAL_NORMALIZERS.get(name) or _business_normalizer(name)
        for name in PUSH_EVENT_NAMES
    }


__all__ = ["PUSH_EVENT_NAMES", "PushNormalizer", "build_push_registry"]
