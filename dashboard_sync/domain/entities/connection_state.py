"""Lifecycle states of the push-channel connection."""

from __future__ import annotations

from enum import Enum


class ConnectionState(str, Enum):
    """State of the single push-channel connection owned by a session."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


__all__ = ["ConnectionState"]
