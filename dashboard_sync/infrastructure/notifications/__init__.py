"""Push channel infrastructure."""

from .manager import ConnectionManager, EventDispatcher, EventNormalizer, SessionExpiredCallback
from .transport import (
    AuthenticationError,
    PushConnector,
    PushTransport,
    TransportError,
    WebSocketConnector,
    WebSocketTransport,
)

__all__ = [
    "AuthenticationError",
    "ConnectionManager",
    "EventDispatcher",
    "EventNormalizer",
    "PushConnector",
    "PushTransport",
    "SessionExpiredCallback",
    "TransportError",
    "WebSocketConnector",
    "WebSocketTransport",
]
