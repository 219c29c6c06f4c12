"""Tests for settings validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from dashboard_sync.config import Settings


def test_defaults_match_synchronization_tunables():
    settings = Settings(_env_file=None)

    assert settings.poll_interval_seconds == 30
    assert settings.fetch_timeout_seconds == 10
    assert settings.reconnect_attempts == 5
    assert settings.reconnect_delay_seconds == 1
    assert settings.auth_failure_threshold == 3
    assert settings.catch_up_window == 5
    assert settings.initial_backfill_window == 10
    assert settings.activity_log_path == "/system-activity-logs"


def test_viewer_role_is_normalized():
    settings = Settings(_env_file=None, viewer_id="u1", viewer_role=" maintainer ")

    assert settings.viewer_role == "MAINTAINER"


@pytest.mark.parametrize(
    "overrides",
    [
        {"fetch_timeout_seconds": 0},
        {"viewer_role": "OWNER"},
        {"viewer_id": "u1"},
    ],
)
def test_invalid_settings_are_rejected(overrides):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)
