from .notification import (
    NotificationMarkReadRequest,
    NotificationMarkReadResponse,
    NotificationRead,
    UnreadCountRead,
)
from .sync import (
    ConnectionStatusRead,
    EmitResult,
    PasswordResetCreate,
    PollingStatusRead,
    ReconcileResult,
    SupportRequestCreate,
    SyncStatusRead,
)

__all__ = [
    "ConnectionStatusRead",
    "EmitResult",
    "NotificationMarkReadRequest",
    "NotificationMarkReadResponse",
    "NotificationRead",
    "PasswordResetCreate",
    "PollingStatusRead",
    "ReconcileResult",
    "SupportRequestCreate",
    "SyncStatusRead",
    "UnreadCountRead",
]
