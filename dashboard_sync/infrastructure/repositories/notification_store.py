"""In-memory store holding the notifications shown by the dashboard."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence
from typing import Callable, Iterable

from dashboard_sync.domain.entities import Notification, Viewer

logger = logging.getLogger(__name__)

StoreListener = Callable[["NotificationStore"], None]


class NotificationStore:
    """Provide idempotent insertion and per-viewer reads of :class:`Notification`.

    The store never holds two notifications with the same id. Reads are pure
    filters and safe to call on every render.
    """

    def __init__(self) -> None:
        self._notifications: dict[str, Notification] = {}
        self._listeners: list[StoreListener] = []

    def __len__(self) -> int:
        return len(self._notifications)

    def __contains__(self, notification_id: object) -> bool:
        return notification_id in self._notifications

    def get(self, notification_id: str) -> Notification | None:
        return self._notifications.get(notification_id)

    def add(self, notification: Notification) -> bool:
        """Insert ``notification`` unless its id is already stored.

        Returns ``True`` when the notification was inserted.
        """

        if notification.id in self._notifications:
            return False
        self._notifications[notification.id] = notification
        self._notify()
        return True

    def visible_to(self, viewer: Viewer) -> Sequence[Notification]:
        """Return the notifications ``viewer`` may read, newest first."""

        visible = [
            notification
            for notification in self._notifications.values()
            if notification.is_visible_to(viewer)
        ]
        visible.sort(key=lambda notification: notification.created_at, reverse=True)
        return visible

    def list_unread_for(self, viewer: Viewer) -> Sequence[Notification]:
        return [notification for notification in self.visible_to(viewer) if not notification.read]

    def unread_count(self, viewer: Viewer) -> int:
        return len(self.list_unread_for(viewer))

    def mark_read(self, notification_id: str) -> bool:
        """Flag a single notification as read. Returns ``False`` when unknown."""

        changed = self._mark_read([notification_id])
        if changed:
            self._notify()
        return bool(changed)

    def mark_many_read(self, notification_ids: Iterable[str], *, viewer: Viewer) -> int:
        """Flag the listed notifications visible to ``viewer`` as read."""

        visible_ids = {notification.id for notification in self.visible_to(viewer)}
        changed = self._mark_read(
            notification_id for notification_id in notification_ids if notification_id in visible_ids
        )
        if changed:
            self._notify()
        return changed

    def mark_all_read(self, viewer: Viewer) -> int:
        """Flag every notification visible to ``viewer`` as read."""

        changed = self._mark_read(notification.id for notification in self.visible_to(viewer))
        if changed:
            self._notify()
        return changed

    def remove(self, notification_id: str) -> bool:
        removed = self._notifications.pop(notification_id, None)
        if removed is None:
            return False
        self._notify()
        return True

    def clear_viewer(self, viewer_id: str) -> int:
        """Drop the notifications addressed to ``viewer_id`` (used on logout)."""

        doomed = [
            notification.id
            for notification in self._notifications.values()
            if notification.viewer_id == viewer_id
        ]
        for notification_id in doomed:
            del self._notifications[notification_id]
        if doomed:
            self._notify()
        return len(doomed)

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Call ``listener`` after every mutation; returns an unsubscribe hook."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _mark_read(self, notification_ids: Iterable[str]) -> int:
        changed = 0
        for notification_id in notification_ids:
            current = self._notifications.get(notification_id)
            if current is None or current.read:
                continue
            self._notifications[notification_id] = dataclasses.replace(current, read=True)
            changed += 1
        return changed

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Notification store listener failed")


__all__ = ["NotificationStore", "StoreListener"]
