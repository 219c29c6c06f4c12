"""Tests for the in-memory notification store."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from conftest import make_viewer

from dashboard_sync.domain.entities import Notification
from dashboard_sync.infrastructure.repositories import NotificationStore

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _notification(notification_id, *, recipients=("ADMIN",), viewer_id=None, minutes=0):
    return Notification(
        id=notification_id,
        title="New Transaction Created",
        message="Sale created",
        severity="success",
        recipients=frozenset(recipients),
        created_at=NOW + timedelta(minutes=minutes),
        viewer_id=viewer_id,
    )


def test_add_is_idempotent_by_id():
    store = NotificationStore()

    assert store.add(_notification("n-1")) is True
    assert store.add(_notification("n-1")) is False
    assert len(store) == 1


def test_visible_to_filters_role_and_addressee_newest_first():
    store = NotificationStore()
    admin = make_viewer("admin-1", "ADMIN")
    other_admin = make_viewer("admin-2", "ADMIN")
    staff = make_viewer("staff-1", "STAFF")

    store.add(_notification("broadcast", minutes=1))
    store.add(_notification("mine", viewer_id="admin-1", minutes=2))
    store.add(_notification("theirs", viewer_id="admin-2", minutes=3))

    assert [n.id for n in store.visible_to(admin)] == ["mine", "broadcast"]
    assert [n.id for n in store.visible_to(other_admin)] == ["theirs", "broadcast"]
    assert store.visible_to(staff) == []


def test_mark_read_updates_unread_count():
    store = NotificationStore()
    admin = make_viewer("admin-1", "ADMIN")
    store.add(_notification("n-1"))
    store.add(_notification("n-2"))

    assert store.unread_count(admin) == 2
    assert store.mark_read("n-1") is True
    assert store.mark_read("n-1") is False
    assert store.mark_read("unknown") is False
    assert store.unread_count(admin) == 1
    assert store.get("n-1").read is True


def test_mark_all_read_only_touches_visible_notifications():
    store = NotificationStore()
    admin = make_viewer("admin-1", "ADMIN")
    store.add(_notification("admin", recipients=("ADMIN",)))
    store.add(_notification("maintainer", recipients=("MAINTAINER",)))

    assert store.mark_all_read(admin) == 1
    assert store.get("admin").read is True
    assert store.get("maintainer").read is False


def test_mark_many_read_ignores_ids_not_visible_to_viewer():
    store = NotificationStore()
    admin = make_viewer("admin-1", "ADMIN")
    store.add(_notification("visible"))
    store.add(_notification("hidden", viewer_id="admin-2"))

    assert store.mark_many_read(["visible", "hidden", "missing"], viewer=admin) == 1
    assert store.get("hidden").read is False


def test_remove_and_clear_viewer():
    store = NotificationStore()
    store.add(_notification("broadcast"))
    store.add(_notification("a", viewer_id="admin-1"))
    store.add(_notification("b", viewer_id="admin-1"))

    assert store.remove("a") is True
    assert store.remove("a") is False
    assert store.clear_viewer("admin-1") == 1
    assert "broadcast" in store
    assert len(store) == 1


def test_listeners_are_notified_and_failures_are_isolated():
    store = NotificationStore()
    calls = []

    def broken(_store):
        raise RuntimeError("boom")

    store.subscribe(broken)
    unsubscribe = store.subscribe(lambda current: calls.append(len(current)))

    store.add(_notification("n-1"))
    store.add(_notification("n-1"))
    unsubscribe()
    store.add(_notification("n-2"))

    assert calls == [1]
