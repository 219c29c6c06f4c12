"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class NotificationMarkReadRequest(BaseModel):
    """Payload used to mark a batch of notifications as read."""

    ids: list[str] = Field(..., min_length=1, description="Notification identifiers")

    def unique_ids(self) -> list[str]:
        """Return the list of identifiers without duplicates preserving order."""

        return list(dict.fromkeys(self.ids))


class NotificationMarkReadResponse(BaseModel):
    """Number of notifications whose state changed."""

    updated: int = Field(..., ge=0)


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the local UI."""

    id: str
    title: str
    message: str
    severity: str
    recipients: list[str]
    viewer_id: str | None = None
    read: bool
    action_type: str
    meta: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class UnreadCountRead(BaseModel):
    """Unread notifications visible to the signed-in viewer."""

    unread: int = Field(..., ge=0)


__all__ = [
    "NotificationMarkReadRequest",
    "NotificationMarkReadResponse",
    "NotificationRead",
    "UnreadCountRead",
]
