"""Utility helpers for reusable functionality."""

from .datetime import (
    ensure_app_timezone,
    get_app_timezone,
    isoformat_utc,
    now_utc,
    parse_timestamp,
    to_epoch_millis,
)
from .logging import ThrottledLogger

__all__ = [
    "ensure_app_timezone",
    "get_app_timezone",
    "isoformat_utc",
    "now_utc",
    "parse_timestamp",
    "to_epoch_millis",
    "ThrottledLogger",
]
