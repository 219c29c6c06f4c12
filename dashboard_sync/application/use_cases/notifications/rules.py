"""Static configuration describing which events become notifications."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from dashboard_sync.domain.entities import (
    ROLE_ADMIN,
    ROLE_MAINTAINER,
    ROLE_SUPER_ADMIN,
    SEVERITY_ERROR,
    SEVERITY_INFO,
    SEVERITY_SUCCESS,
    SyncEvent,
)
from dashboard_sync.utils import ensure_app_timezone

MANAGEMENT_ROLES = frozenset({ROLE_ADMIN, ROLE_MAINTAINER, ROLE_SUPER_ADMIN})
MAINTAINERS_ONLY = frozenset({ROLE_MAINTAINER})
ORGANIZATION_ADMINS = frozenset({ROLE_MAINTAINER, ROLE_SUPER_ADMIN})
BRANCH_ADMINS = frozenset({ROLE_ADMIN})

BUSINESS_HOURS_START = 6
BUSINESS_HOURS_END = 22
SUSPICIOUS_DEVICE_MARKERS = ("Unknown", "API Testing")


@dataclass(frozen=True)
class NotificationRule:
    """How a normalized event action is presented to its recipients."""

    title: str
    severity: str
    action_type: str
    recipients: frozenset[str]
    priority: str = "medium"
    condition: Callable[[SyncEvent], bool] | None = None
    broadcast: bool = False
    describe: Callable[[SyncEvent], str | None] | None = None

    def applies_to(self, event: SyncEvent) -> bool:
        """Return ``False`` when the rule's condition suppresses ``event``."""

        return self.condition is None or bool(self.condition(event))

    def render_message(self, event: SyncEvent) -> str:
        """Build the notification body, falling back to the raw details."""

        message = self.describe(event) if self.describe is not None else None
        if message:
            return message
        details = event.payload.get("details")
        if details:
            return str(details)
        return self.title


def _money(value: Any) -> str:
    try:
        return f"₦{int(float(value)):,}"
    except (TypeError, ValueError):
        return "₦0"


def _describe_transaction(event: SyncEvent) -> str | None:
    payload = event.payload
    if payload.get("invoiceNumber"):
        return (
            f"Sale {payload['invoiceNumber']} created by {event.actor.email} - "
            f"{_money(payload.get('totalPrice'))}"
        )
    if payload.get("amount") is not None and payload.get("clientName"):
        return (
            f"Transaction {payload.get('transactionId', event.resource_id)} created for "
            f"{payload['clientName']} - {_money(payload['amount'])}"
        )
    return None


def _describe_client_transaction(event: SyncEvent) -> str | None:
    payload = event.payload
    if not payload.get("clientName"):
        return None
    return (
        f"{payload.get('transactionType', 'A')} transaction of "
        f"{_money(payload.get('amount'))} added for {payload['clientName']}"
    )


def _describe_client_created(event: SyncEvent) -> str | None:
    name = event.payload.get("name") or event.payload.get("clientName")
    if not name:
        return None
    return f'Client "{name}" registered by {event.actor.email}'


def _describe_product_created(event: SyncEvent) -> str | None:
    name = event.payload.get("name") or event.payload.get("productName")
    if not name:
        return None
    return f'Product "{name}" created by {event.actor.email}'


def _describe_user_created(event: SyncEvent) -> str | None:
    payload = event.payload
    if not payload.get("userName"):
        return None
    return f"{payload['userName']} ({payload.get('userRole', 'user')}) has been added to the system"


def _describe_user_blocked(event: SyncEvent) -> str | None:
    payload = event.payload
    if not payload.get("userName"):
        return None
    return f"{payload['userName']} has been blocked. Reason: {payload.get('reason', 'N/A')}"


def _describe_user_unblocked(event: SyncEvent) -> str | None:
    payload = event.payload
    if not payload.get("userName"):
        return None
    return f"{payload['userName']} has been unblocked and can access the system again"


def _describe_stock(event: SyncEvent) -> str | None:
    payload = event.payload
    if not payload.get("productName"):
        return None
    return (
        f"{payload['productName']} stock updated - {payload.get('quantity')} "
        f"{payload.get('unit', '')} used ({payload.get('newStock')} remaining)"
    )


def _describe_login(event: SyncEvent) -> str | None:
    device = event.payload.get("device") or "an unknown device"
    return f"{event.actor.email} logged in from {device}"


def _describe_support_request(event: SyncEvent) -> str | None:
    payload = event.payload
    if not payload.get("issueType"):
        return None
    email = payload.get("userEmail") or payload.get("email") or event.actor.email
    description = payload.get("description") or payload.get("message") or ""
    message = f'Support request: "{payload["issueType"]}" from {email}.'
    if description:
        message += f" Description: {description[:100]}"
    return message


def _describe_login_assistance(event: SyncEvent) -> str | None:
    payload = event.payload
    if not payload.get("userEmail"):
        return None
    return f"Login assistance requested by {payload['userEmail']}. Issue: {payload.get('issueType')}"


def _describe_password_reset(event: SyncEvent) -> str | None:
    payload = event.payload
    if not payload.get("temporaryPassword"):
        return None
    if payload.get("userName") and payload.get("branchAdminName"):
        return (
            f"Temporary password sent to {payload['branchAdminName']} for user "
            f"{payload['userName']}. Password: {payload['temporaryPassword']}"
        )
    return f"Temporary password generated for user. Password: {payload['temporaryPassword']}"


def is_unusual_login(event: SyncEvent) -> bool:
    """Return ``True`` for logins from unrecognized devices or outside business hours."""

    device = str(event.payload.get("device") or "")
    if any(marker in device for marker in SUSPICIOUS_DEVICE_MARKERS):
        return True
    local_time = ensure_app_timezone(event.occurred_at)
    if local_time is None:
        return False
    return local_time.hour < BUSINESS_HOURS_START or local_time.hour > BUSINESS_HOURS_END


NOTIFICATION_RULES: Mapping[str, NotificationRule] = {
    "transaction_created": NotificationRule(
        title="New Transaction Created",
        severity=SEVERITY_SUCCESS,
        action_type="transaction_completed",
        recipients=MANAGEMENT_ROLES,
        priority="high",
        describe=_describe_transaction,
    ),
    "client_transaction_added": NotificationRule(
        title="Client Transaction Updated",
        severity=SEVERITY_INFO,
        action_type="transaction_completed",
        recipients=MANAGEMENT_ROLES,
        describe=_describe_client_transaction,
    ),
    "client_created": NotificationRule(
        title="New Client Registered",
        severity=SEVERITY_SUCCESS,
        action_type="client_added",
        recipients=MANAGEMENT_ROLES,
        describe=_describe_client_created,
    ),
    "product_created": NotificationRule(
        title="New Product Created",
        severity=SEVERITY_INFO,
        action_type="product_added",
        recipients=MANAGEMENT_ROLES,
        describe=_describe_product_created,
    ),
    "user_created": NotificationRule(
        title="New User Created",
        severity=SEVERITY_SUCCESS,
        action_type="user_added",
        recipients=ORGANIZATION_ADMINS,
        describe=_describe_user_created,
    ),
    "user_blocked": NotificationRule(
        title="User Blocked",
        severity=SEVERITY_ERROR,
        action_type="user_status_changed",
        recipients=MANAGEMENT_ROLES,
        priority="high",
        describe=_describe_user_blocked,
    ),
    "user_unblocked": NotificationRule(
        title="User Unblocked",
        severity=SEVERITY_INFO,
        action_type="user_status_changed",
        recipients=MANAGEMENT_ROLES,
        describe=_describe_user_unblocked,
    ),
    "stock_updated": NotificationRule(
        title="Stock Level Changed",
        severity=SEVERITY_INFO,
        action_type="product_added",
        recipients=MANAGEMENT_ROLES,
        priority="low",
        describe=_describe_stock,
    ),
    "login": NotificationRule(
        title="User Login",
        severity=SEVERITY_INFO,
        action_type="security_alert",
        recipients=MAINTAINERS_ONLY,
        priority="low",
        condition=is_unusual_login,
        describe=_describe_login,
    ),
    "support_request": NotificationRule(
        title="New Support Request",
        severity=SEVERITY_ERROR,
        action_type="support_request_received",
        recipients=MAINTAINERS_ONLY,
        priority="high",
        describe=_describe_support_request,
    ),
    "support_request_created": NotificationRule(
        title="New Support Request",
        severity=SEVERITY_ERROR,
        action_type="support_request_received",
        recipients=MAINTAINERS_ONLY,
        priority="high",
        broadcast=True,
        describe=_describe_support_request,
    ),
    "password_reset_sent": NotificationRule(
        title="Password Reset Notification",
        severity=SEVERITY_INFO,
        action_type="password_reset_received",
        recipients=BRANCH_ADMINS,
        priority="high",
        describe=_describe_password_reset,
    ),
    "login_assistance_request": NotificationRule(
        title="Login Assistance Required",
        severity=SEVERITY_ERROR,
        action_type="support_request_received",
        recipients=MAINTAINERS_ONLY,
        priority="high",
        describe=_describe_login_assistance,
    ),
}


__all__ = [
    "BRANCH_ADMINS",
    "MAINTAINERS_ONLY",
    "MANAGEMENT_ROLES",
    "NOTIFICATION_RULES",
    "NotificationRule",
    "ORGANIZATION_ADMINS",
    "is_unusual_login",
]
