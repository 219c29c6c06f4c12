"""Domain entity describing a server-side mutation delivered to the client."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

EVENT_SOURCE_PUSH = "push"
EVENT_SOURCE_POLL = "poll"


@dataclass(frozen=True)
class EventScope:
    """Branch boundary of an event; an empty scope reaches every branch."""

    branch_id: str | None = None
    branch: str | None = None


@dataclass(frozen=True)
class EventActor:
    """User that performed the mutation on the server."""

    email: str = ""
    role: str = ""


@dataclass(frozen=True)
class SyncEvent:
    """Normalized event shared by the push channel and the activity log.

    ``occurred_at`` is assigned by the server and is the only ordering key used
    while reconciling. ``action`` is always lower snake case so both channels
    agree on the name of the same occurrence.
    """

    action: str
    resource_type: str
    resource_id: str
    occurred_at: datetime
    scope: EventScope = field(default_factory=EventScope)
    actor: EventActor = field(default_factory=EventActor)
    payload: dict[str, Any] = field(default_factory=dict)
    source: str = EVENT_SOURCE_PUSH
    log_id: str | None = None


def normalize_action(action: str) -> str:
    """Return ``action`` in the lower snake case used as routing key."""

    return action.strip().lower().replace("-", "_").replace(" ", "_")


__all__ = [
    "EVENT_SOURCE_POLL",
    "EVENT_SOURCE_PUSH",
    "EventActor",
    "EventScope",
    "SyncEvent",
    "normalize_action",
]
