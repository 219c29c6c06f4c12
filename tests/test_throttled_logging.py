"""Tests for the throttled error logger."""

from __future__ import annotations

import logging

from dashboard_sync.utils import ThrottledLogger


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_repeated_messages_are_suppressed_within_interval(caplog):
    clock = FakeClock()
    throttled = ThrottledLogger(logging.getLogger("tests.throttle"), interval=5.0, clock=clock)

    with caplog.at_level(logging.ERROR, logger="tests.throttle"):
        assert throttled.error("Connection failed: %s", "refused") is True
        clock.now += 1
        assert throttled.error("Connection failed: %s", "refused") is False
        clock.now += 1
        assert throttled.error("Connection failed: %s", "refused") is False
        assert throttled.suppressed == 2
        clock.now += 5
        assert throttled.error("Connection failed: %s", "timeout") is True

    messages = [record.getMessage() for record in caplog.records]
    assert messages == [
        "Connection failed: refused",
        "Connection failed: timeout (suppressed 2 similar messages)",
    ]
    assert throttled.suppressed == 0


def test_reset_reopens_the_window():
    clock = FakeClock()
    throttled = ThrottledLogger(logging.getLogger("tests.throttle"), clock=clock)

    throttled.warning("first")
    throttled.reset()

    assert throttled.warning("second") is True
