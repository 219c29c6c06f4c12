"""Pydantic models describing the synchronization session."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ConnectionStatusRead(BaseModel):
    connected: bool
    status: str
    auth_failures: int
    attempts: int


class PollingStatusRead(BaseModel):
    polling: bool
    in_flight: bool
    last_cursor: str | None = None
    consecutive_failures: int
    interval: float


class SyncStatusRead(BaseModel):
    """Snapshot of the push channel and the activity log poller."""

    viewer_id: str
    active: bool
    logout_reason: str | None = None
    connection: ConnectionStatusRead
    polling: PollingStatusRead


class ReconcileResult(BaseModel):
    emitted: int = Field(..., ge=0, description="Activity log entries processed")


class SupportRequestCreate(BaseModel):
    """Support request relayed to maintainers over the push channel."""

    email: str = Field(..., min_length=3)
    issue_type: str = Field(..., min_length=1, description="Category of the problem")
    message: str = Field(..., min_length=1)


class PasswordResetCreate(BaseModel):
    """Temporary password relayed to a branch administrator."""

    branch_admin_email: str = Field(..., min_length=3)
    temporary_password: str = Field(..., min_length=1)
    user_name: str = Field(..., min_length=1)


class EmitResult(BaseModel):
    sent: bool


__all__ = [
    "ConnectionStatusRead",
    "EmitResult",
    "PasswordResetCreate",
    "PollingStatusRead",
    "ReconcileResult",
    "SupportRequestCreate",
    "SyncStatusRead",
]
