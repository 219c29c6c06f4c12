"""Domain entity holding the reconciliation progress of a viewer."""

from __future__ import annotations

from dataclasses import dataclass

CURSOR_KEY_PREFIX = "notification-last-processed-"


@dataclass(frozen=True)
class Cursor:
    """Identifier of the last activity log entry a viewer has processed."""

    viewer_id: str
    last_seen_event_id: str

    @property
    def storage_key(self) -> str:
        return cursor_key(self.viewer_id)


def cursor_key(viewer_id: str) -> str:
    """Return the key-value store key holding ``viewer_id``'s cursor."""

    return f"{CURSOR_KEY_PREFIX}{viewer_id}"


__all__ = ["CURSOR_KEY_PREFIX", "Cursor", "cursor_key"]
