"""Translate normalized events into notifications for a viewer."""

from __future__ import annotations

from typing import Mapping

from dashboard_sync.domain.entities import Notification, SyncEvent, Viewer
from dashboard_sync.utils import isoformat_utc, to_epoch_millis

from .rules import NOTIFICATION_RULES, NotificationRule


def notification_id_for(event: SyncEvent) -> str:
    """Return the identifier shared by every delivery of the same occurrence.

    The id combines the normalized action, the resource id and the server
    timestamp in epoch milliseconds, so an event pushed over the websocket and
    the matching activity log entry fetched later collapse into one
    notification.
    """

    return f"{event.action}:{event.resource_id}:{to_epoch_millis(event.occurred_at)}"


def is_recipient(viewer: Viewer, rule: NotificationRule, event: SyncEvent) -> bool:
    """Return ``True`` when ``viewer`` may receive ``event`` under ``rule``.

    The viewer's role must be listed in the rule and, for branch-scoped
    events, the viewer must be organization-wide or belong to that branch.
    """

    if viewer.role.upper() not in rule.recipients:
        return False
    return viewer.can_see_branch(event.scope.branch_id)


def build_notification(
    event: SyncEvent,
    viewer: Viewer,
    rules: Mapping[str, NotificationRule] = NOTIFICATION_RULES,
) -> Notification | None:
    """Return the notification ``viewer`` should see for ``event``, if any."""

    rule = rules.get(event.action)
    if rule is None:
        return None
    if not rule.applies_to(event):
        return None
    if not is_recipient(viewer, rule, event):
        return None

    broadcast = rule.broadcast and not event.scope.branch_id
    meta = {
        "actorEmail": event.actor.email,
        "actorRole": event.actor.role,
        "branch": event.scope.branch,
        "branchId": event.scope.branch_id,
        "resourceType": event.resource_type,
        "resourceId": event.resource_id,
        "source": event.source,
        "priority": rule.priority,
        "timestamp": isoformat_utc(event.occurred_at),
        **{key: value for key, value in event.payload.items() if key != "details"},
    }
    return Notification(
        id=notification_id_for(event),
        title=rule.title,
        message=rule.render_message(event),
        severity=rule.severity,
        recipients=rule.recipients,
        viewer_id=None if broadcast else viewer.id,
        read=False,
        created_at=event.occurred_at,
        action_type=rule.action_type,
        meta=meta,
    )


__all__ = ["build_notification", "is_recipient", "notification_id_for"]
