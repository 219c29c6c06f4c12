"""Public helpers for turning events into notifications."""

from .details import parse_activity_details
from .mapping import build_notification, is_recipient, notification_id_for
from .rules import NOTIFICATION_RULES, NotificationRule, is_unusual_login

__all__ = [
    "NOTIFICATION_RULES",
    "NotificationRule",
    "build_notification",
    "is_recipient",
    "is_unusual_login",
    "notification_id_for",
    "parse_activity_details",
]
