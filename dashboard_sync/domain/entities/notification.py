"""Domain entity representing a dashboard notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .viewer import Viewer

SEVERITY_INFO = "info"
SEVERITY_SUCCESS = "success"
SEVERITY_ERROR = "error"

SEVERITIES = frozenset({SEVERITY_INFO, SEVERITY_SUCCESS, SEVERITY_ERROR})


@dataclass(frozen=True)
class Notification:
    """Information message shown to every viewer whose role is a recipient.

    Instances are immutable; marking a notification as read replaces it with a
    copy whose ``read`` flag is set.
    """

    id: str
    title: str
    message: str
    severity: str
    recipients: frozenset[str]
    created_at: datetime
    viewer_id: str | None = None
    read: bool = False
    action_type: str = ""
    meta: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.severity not in SEVERITIES:
            raise ValueError(f"Unknown notification severity: {self.severity!r}")
        if not isinstance(self.recipients, frozenset):
            object.__setattr__(self, "recipients", frozenset(self.recipients))

    def is_broadcast(self) -> bool:
        """Return ``True`` when every viewer with a recipient role may see it."""

        return self.viewer_id is None

    def is_visible_to(self, viewer: Viewer) -> bool:
        """Return ``True`` when ``viewer`` is allowed to read the notification."""

        if viewer.role.upper() not in self.recipients:
            return False
        return self.viewer_id is None or self.viewer_id == viewer.id


__all__ = [
    "Notification",
    "SEVERITIES",
    "SEVERITY_ERROR",
    "SEVERITY_INFO",
    "SEVERITY_SUCCESS",
]
