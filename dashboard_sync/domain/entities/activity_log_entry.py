"""Domain entity describing an item of the server activity log."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from dashboard_sync.utils import parse_timestamp


@dataclass(frozen=True)
class ActivityLogEntry:
    """Represents a single append-only entry of the activity log."""

    id: str
    action: str
    timestamp: datetime
    details: str = ""
    performed_by: str = ""
    role: str = ""
    device: str = ""
    resource_id: str | None = None
    resource_type: str | None = None
    branch_id: str | None = None
    branch: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ActivityLogEntry":
        """Build an entry from the JSON document served by the API.

        Raises ``ValueError`` when the identifier, action or timestamp are
        missing or malformed.
        """

        entry_id = payload.get("_id") or payload.get("id")
        action = payload.get("action")
        timestamp = parse_timestamp(payload.get("timestamp") or payload.get("createdAt"))
        if not entry_id or not action or timestamp is None:
            raise ValueError(f"Malformed activity log entry: {dict(payload)!r}")

        known = {
            "_id",
            "id",
            "action",
            "timestamp",
            "details",
            "performedBy",
            "role",
            "device",
            "resourceId",
            "resourceType",
            "branchId",
            "branch",
        }
        return cls(
            id=str(entry_id),
            action=str(action),
            timestamp=timestamp,
            details=str(payload.get("details") or ""),
            performed_by=str(payload.get("performedBy") or ""),
            role=str(payload.get("role") or ""),
            device=str(payload.get("device") or ""),
            resource_id=_optional_str(payload.get("resourceId")),
            resource_type=_optional_str(payload.get("resourceType")),
            branch_id=_optional_str(payload.get("branchId")),
            branch=_optional_str(payload.get("branch")),
            extra={key: value for key, value in payload.items() if key not in known},
        )


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


__all__ = ["ActivityLogEntry"]
