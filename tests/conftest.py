import asyncio
import os
import pathlib
import sys
from datetime import datetime, timedelta, timezone

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite://")
for _name in ("VIEWER_ID", "VIEWER_ROLE", "APP_TIMEZONE"):
    os.environ.pop(_name, None)

from dashboard_sync.domain.entities import ActivityLogEntry, Viewer  # noqa: E402
from dashboard_sync.infrastructure.notifications import (  # noqa: E402
    TransportError,
)

BASE_TIME = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def anyio_backend():
    return "asyncio"


def make_viewer(viewer_id="u-1", role="ADMIN", branch_id="B1"):
    return Viewer(id=viewer_id, role=role, branch_id=branch_id, branch=f"Branch {branch_id}")


def make_entry(index, *, action="TRANSACTION_CREATED", minutes=None, **extra):
    """Build the activity log document of entry ``index``."""

    payload = {
        "_id": f"log-{index:03d}",
        "action": action,
        "details": f"Transaction TX{index:03d} created for Client {index} (PURCHASE) - Total: {index * 100}",
        "performedBy": "cashier@example.com",
        "role": "STAFF",
        "device": "Chrome on Windows",
        "timestamp": (BASE_TIME + timedelta(minutes=index if minutes is None else minutes))
        .isoformat()
        .replace("+00:00", "Z"),
    }
    payload.update(extra)
    return payload


def make_entries(count, **extra):
    return [ActivityLogEntry.from_payload(make_entry(index, **extra)) for index in range(count)]


class FakeActivityLog:
    """Activity log source returning a configurable list of entries."""

    def __init__(self, entries=None):
        self.entries = list(entries or [])
        self.error: Exception | None = None
        self.delay = 0.0
        self.calls = 0
        self.gate: asyncio.Event | None = None

    async def fetch(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.entries)


class FakeTransport:
    """In-memory push transport fed through :meth:`push`."""

    def __init__(self):
        self.inbox: asyncio.Queue = asyncio.Queue()
        self.sent: list[str] = []
        self.closed = False

    def push(self, item):
        self.inbox.put_nowait(item)

    async def receive(self):
        item = await self.inbox.get()
        if isinstance(item, BaseException):
            raise item
        return item

    async def send(self, message):
        self.sent.append(message)

    async def close(self):
        self.closed = True


class FakeConnector:
    """Connector replaying scripted outcomes: exceptions or transports."""

    def __init__(self, outcomes=None):
        self.outcomes = list(outcomes or [])
        self.calls = 0

    async def connect(self):
        self.calls += 1
        if not self.outcomes:
            raise TransportError("no more scripted outcomes")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class RecordingDispatch:
    """Async dispatch callable remembering every event it received."""

    def __init__(self, fail_on=None):
        self.events = []
        self.fail_on = set(fail_on or ())

    async def __call__(self, event):
        if event.log_id in self.fail_on:
            raise RuntimeError(f"cannot process {event.log_id}")
        self.events.append(event)


async def wait_until(predicate, timeout=2.0):
    """Yield to the event loop until ``predicate`` holds."""

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.001)
