"""Tests for turning events into role and branch scoped notifications."""

from __future__ import annotations

from datetime import datetime, timezone

from conftest import make_entry, make_viewer

from dashboard_sync.application.use_cases import build_notification, build_push_registry, entry_to_event
from dashboard_sync.application.use_cases.notifications import notification_id_for, parse_activity_details
from dashboard_sync.domain.entities import ActivityLogEntry, EventActor, EventScope, SyncEvent


def _event(action="transaction_created", *, branch_id=None, payload=None, occurred_at=None):
    return SyncEvent(
        action=action,
        resource_type="transaction",
        resource_id="T1",
        occurred_at=occurred_at or datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc),
        scope=EventScope(branch_id=branch_id, branch=branch_id and f"Branch {branch_id}"),
        actor=EventActor(email="cashier@example.com", role="STAFF"),
        payload=payload or {},
    )


def test_branch_scoped_event_is_hidden_from_other_branch_admins():
    event = _event(branch_id="B1", payload={"invoiceNumber": "INV-1", "totalPrice": 2500})

    assert build_notification(event, make_viewer("a2", "ADMIN", "B2")) is None

    own_branch = build_notification(event, make_viewer("a1", "ADMIN", "B1"))
    super_admin = build_notification(event, make_viewer("s1", "SUPER_ADMIN", None))

    assert own_branch is not None and own_branch.viewer_id == "a1"
    assert super_admin is not None
    assert super_admin.message == "Sale INV-1 created by cashier@example.com - ₦2,500"
    assert super_admin.meta["branchId"] == "B1"


def test_role_outside_recipients_gets_nothing():
    assert build_notification(_event(), make_viewer("st", "STAFF")) is None


def test_unknown_action_yields_no_notification():
    assert build_notification(_event("report_exported"), make_viewer("a1", "ADMIN")) is None


def test_same_occurrence_gets_same_id_on_both_channels():
    normalize = build_push_registry()["transaction_created"]
    pushed = normalize(
        {
            "action": "create",
            "resourceType": "transaction",
            "resourceId": "TX007",
            "actorEmail": "cashier@example.com",
            "actorRole": "STAFF",
            "branchId": "B1",
            "data": {"invoiceNumber": "INV-7", "totalPrice": 700},
            "timestamp": "2024-05-01T10:07:00.000Z",
        }
    )
    logged = entry_to_event(
        ActivityLogEntry.from_payload(make_entry(7, resourceId="TX007", branchId="B1"))
    )

    assert pushed.source == "push" and logged.source == "poll"
    assert notification_id_for(pushed) == notification_id_for(logged)
    assert notification_id_for(logged) == "transaction_created:TX007:1714558020000"


def test_log_entry_resource_id_falls_back_to_parsed_details():
    event = entry_to_event(ActivityLogEntry.from_payload(make_entry(3)))

    assert event.resource_id == "TX003"
    assert event.resource_type == "transaction"
    assert event.payload["clientName"] == "Client 3"
    notification = build_notification(event, make_viewer("m1", "MAINTAINER", None))
    assert notification.message == "Transaction TX003 created for Client 3 - ₦300"


def test_unusual_login_condition():
    maintainer = make_viewer("m1", "MAINTAINER", None)
    midday = datetime(2024, 5, 1, 11, 0, tzinfo=timezone.utc)
    late_night = datetime(2024, 5, 1, 22, 30, tzinfo=timezone.utc)

    ordinary = _event("login", payload={"device": "Chrome on Windows"}, occurred_at=midday)
    scripted = _event("login", payload={"device": "API Testing Tool"}, occurred_at=midday)
    after_hours = _event("login", payload={"device": "Chrome on Windows"}, occurred_at=late_night)

    assert build_notification(ordinary, maintainer) is None
    assert build_notification(scripted, maintainer) is not None
    assert build_notification(after_hours, maintainer) is not None


def test_unscoped_support_request_is_broadcast_to_maintainers():
    normalize = build_push_registry()["support_request_created"]
    event = normalize(
        {
            "email": "owner@example.com",
            "issueType": "Cannot log in",
            "message": "Locked out since morning",
            "timestamp": "2024-05-01T09:00:00Z",
        }
    )

    notification = build_notification(event, make_viewer("m1", "MAINTAINER", None))

    assert notification.viewer_id is None
    assert notification.severity == "error"
    assert notification.is_visible_to(make_viewer("m2", "MAINTAINER", None))
    assert "Cannot log in" in notification.message
    assert build_notification(event, make_viewer("a1", "ADMIN")) is None


def test_message_falls_back_to_raw_details():
    event = _event("client_transaction_added", payload={"details": "Balance adjusted manually"})

    notification = build_notification(event, make_viewer("a1", "ADMIN"))

    assert notification.message == "Balance adjusted manually"
    assert "details" not in notification.meta


def test_parse_activity_details_patterns():
    assert parse_activity_details(
        "stock_updated", "Stock decreased for Cement: 5 bags (New stock: 95)"
    ) == {"productName": "Cement", "quantity": 5, "unit": "bags", "newStock": 95}
    assert parse_activity_details(
        "user_blocked", "User blocked: Jane Roe (jane@example.com) - Reason: Fraud"
    ) == {"userName": "Jane Roe", "email": "jane@example.com", "reason": "Fraud"}
    assert parse_activity_details("transaction_created", "free text") == {}
    assert parse_activity_details("unknown_action", "anything") == {}


def test_events_without_resource_ids_match_across_channels_by_details():
    details = "Stock decreased for Cement: 5 bags (New stock: 95)"
    pushed = build_push_registry()["stock_updated"](
        {"details": details, "branchId": "B1", "timestamp": "2024-05-01T10:05:00.000Z"}
    )
    logged = entry_to_event(
        ActivityLogEntry.from_payload(
            make_entry(5, action="STOCK_UPDATED", details=details, branchId="B1")
        )
    )

    assert pushed.resource_id == logged.resource_id == "Cement"
    assert pushed.payload["newStock"] == 95
    assert notification_id_for(pushed) == notification_id_for(logged)


def test_log_entry_without_any_resource_hint_uses_its_log_id():
    logged = entry_to_event(
        ActivityLogEntry.from_payload(make_entry(2, action="LOGIN", details="Signed in"))
    )

    assert logged.resource_id == "log-002"
    assert logged.resource_type == "session"
