"""Integration tests for the local companion API."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[4]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from conftest import FakeActivityLog, FakeConnector, make_entries, make_viewer
from dashboard_sync.application.use_cases import SyncSession
from dashboard_sync.domain.entities import Notification
from dashboard_sync.infrastructure.repositories import CursorRepository, InMemoryKeyValueStore

VIEWER = make_viewer("admin-1", "ADMIN", "B1")
NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _notification(notification_id, *, viewer_id=None, recipients=("ADMIN",), minutes=0):
    return Notification(
        id=notification_id,
        title="New Client Registered",
        message=f"Client {notification_id} registered",
        severity="success",
        recipients=frozenset(recipients),
        created_at=NOW + timedelta(minutes=minutes),
        viewer_id=viewer_id,
        action_type="client_added",
    )


@pytest.fixture()
def session():
    sync_session = SyncSession(
        VIEWER,
        connector=FakeConnector(),
        activity_log=FakeActivityLog(make_entries(4, branchId="B1")),
        cursors=CursorRepository(InMemoryKeyValueStore()),
        poll_interval=60,
        fetch_timeout=5,
    )
    sync_session.store.add(_notification("n-1", minutes=1))
    sync_session.store.add(_notification("n-2", viewer_id="admin-1", minutes=2))
    sync_session.store.add(_notification("n-3", recipients=("MAINTAINER",), minutes=3))
    return sync_session


@pytest.fixture()
def client(session):
    from main import create_app

    app = create_app(session)
    with TestClient(app) as test_client:
        yield test_client


def test_list_and_count_visible_notifications(client: TestClient) -> None:
    response = client.get("/notifications/")
    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body] == ["n-2", "n-1"]
    assert body[0]["viewer_id"] == "admin-1"
    assert body[0]["recipients"] == ["ADMIN"]

    count = client.get("/notifications/unread-count")
    assert count.json() == {"unread": 2}


def test_mark_read_and_read_all(client: TestClient) -> None:
    response = client.post("/notifications/read", json={"ids": ["n-1", "n-1", "n-3"]})
    assert response.status_code == 200
    assert response.json() == {"updated": 1}

    unread = client.get("/notifications/", params={"unread_only": True}).json()
    assert [item["id"] for item in unread] == ["n-2"]

    assert client.post("/notifications/read-all").json() == {"updated": 1}
    assert client.get("/notifications/unread-count").json() == {"unread": 0}

    assert client.post("/notifications/read", json={"ids": []}).status_code == 422


def test_delete_notification(client: TestClient, session: SyncSession) -> None:
    assert client.delete("/notifications/n-1").status_code == 204
    assert "n-1" not in session.store

    assert client.delete("/notifications/n-1").status_code == 404
    assert client.delete("/notifications/n-3").status_code == 404


def test_reconcile_and_status(client: TestClient, session: SyncSession) -> None:
    response = client.post("/sync/reconcile")
    assert response.status_code == 200
    assert response.json() == {"emitted": 4}
    assert session.store.unread_count(VIEWER) == 6

    status = client.get("/sync/status").json()
    assert status["viewer_id"] == "admin-1"
    assert status["connection"]["status"] == "disconnected"
    assert status["polling"]["last_cursor"] == "log-003"


def test_emits_report_offline_channel(client: TestClient) -> None:
    support = client.post(
        "/support-requests",
        json={"email": "owner@example.com", "issue_type": "Billing", "message": "Invoice missing"},
    )
    assert support.status_code == 202
    assert support.json() == {"sent": False}

    reset = client.post(
        "/password-resets",
        json={"branch_admin_email": "admin@example.com", "temporary_password": "Tmp123", "user_name": "Jane"},
    )
    assert reset.json() == {"sent": False}


def test_routes_are_unavailable_without_session() -> None:
    from main import create_app

    with TestClient(create_app()) as test_client:
        response = test_client.get("/notifications/unread-count")

    assert response.status_code == 503
