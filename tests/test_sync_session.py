"""End-to-end tests for the synchronization session."""

from __future__ import annotations

import json

import pytest
from conftest import (
    FakeActivityLog,
    FakeConnector,
    FakeTransport,
    make_entries,
    make_entry,
    make_viewer,
    wait_until,
)

from dashboard_sync.application.use_cases import SESSION_EXPIRED_MESSAGE, SyncSession, entry_to_event
from dashboard_sync.domain.entities import ActivityLogEntry, Cursor
from dashboard_sync.infrastructure.activity_log import ActivityLogFetchError
from dashboard_sync.infrastructure.cache import InMemoryQueryCache
from dashboard_sync.infrastructure.notifications import AuthenticationError
from dashboard_sync.infrastructure.repositories import CursorRepository, InMemoryKeyValueStore

VIEWER = make_viewer("admin-1", "ADMIN", "B1")


def _session(outcomes, entries=(), **kwargs):
    source = FakeActivityLog(entries)
    cursors = CursorRepository(InMemoryKeyValueStore())
    session = SyncSession(
        VIEWER,
        connector=FakeConnector(outcomes),
        activity_log=source,
        cursors=cursors,
        cache_manager=InMemoryQueryCache(),
        poll_interval=60,
        fetch_timeout=1,
        reconnect_delay=0,
        **kwargs,
    )
    return session, source, cursors


@pytest.mark.anyio
async def test_push_then_poll_of_same_occurrence_yields_one_notification():
    transport = FakeTransport()
    session, source, cursors = _session([transport])

    await session.start()
    await wait_until(session.connection.is_connected)
    transport.push(
        json.dumps(
            {
                "type": "transaction_created",
                "data": {
                    "resourceId": "TX007",
                    "resourceType": "transaction",
                    "actorEmail": "cashier@example.com",
                    "branchId": "B1",
                    "data": {"invoiceNumber": "INV-7", "totalPrice": 700},
                    "timestamp": "2024-05-01T10:07:00.000Z",
                },
            }
        )
    )
    await wait_until(lambda: len(session.store) == 1)

    source.entries = [ActivityLogEntry.from_payload(make_entry(7, resourceId="TX007", branchId="B1"))]
    assert await session.reconcile_now() == 1

    notifications = session.store.visible_to(VIEWER)
    assert len(notifications) == 1
    assert notifications[0].id == "transaction_created:TX007:1714558020000"
    assert notifications[0].meta["source"] == "push"
    assert session.cache.invalidations.count(("transactions",)) == 2
    assert cursors.get(VIEWER.id).last_seen_event_id == "log-007"
    await session.stop()


@pytest.mark.anyio
async def test_events_without_notification_rule_still_invalidate_cache():
    session, _, _ = _session([])
    entry = ActivityLogEntry.from_payload(make_entry(1, action="PRODUCT_UPDATED", details="Price changed"))

    await session.dispatch(entry_to_event(entry))

    assert len(session.store) == 0
    assert ("products",) in session.cache.invalidations
    assert ("inventory",) in session.cache.invalidations


@pytest.mark.anyio
async def test_repeated_auth_failures_log_the_viewer_out():
    reasons = []
    session, _, cursors = _session(
        [AuthenticationError("401")] * 3,
        entries=make_entries(3),
        on_logout=reasons.append,
    )
    cursors.save(Cursor(VIEWER.id, "log-002"))

    await session.start()
    await wait_until(lambda: reasons)

    assert reasons == [SESSION_EXPIRED_MESSAGE]
    assert session.active is False
    assert session.logout_reason == SESSION_EXPIRED_MESSAGE
    assert cursors.get(VIEWER.id) is None
    assert session.reconciler.is_polling() is False


@pytest.mark.anyio
async def test_poll_failures_never_reach_the_caller():
    session, source, _ = _session([FakeTransport()])
    source.error = ActivityLogFetchError("HTTP 500")

    assert await session.reconcile_now() == 0
    status = session.status()

    assert status["polling"]["consecutive_failures"] == 1
    assert status["connection"]["status"] == "disconnected"


@pytest.mark.anyio
async def test_logout_clears_cursor_and_viewer_notifications():
    session, _, cursors = _session([FakeTransport()], entries=make_entries(3, branchId="B1"))

    await session.start()
    await wait_until(lambda: len(session.store) == 3)
    assert cursors.get(VIEWER.id) is not None

    await session.logout()

    assert len(session.store) == 0
    assert cursors.get(VIEWER.id) is None
    assert session.logout_reason is None
    assert session.status()["active"] is False
