"""Tests for the HTTP activity log client."""

from __future__ import annotations

import httpx
import pytest
from conftest import make_entry

from dashboard_sync.infrastructure.activity_log import ActivityLogClient, ActivityLogFetchError


def _client(handler):
    return ActivityLogClient(
        "https://api.example.com/api/",
        path="/system-activity-logs",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.anyio
async def test_fetch_parses_plain_list_and_skips_malformed_entries():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=[make_entry(1), {"action": "LOGIN"}, "noise", make_entry(2)])

    client = _client(handler)
    entries = await client.fetch()

    assert [entry.id for entry in entries] == ["log-001", "log-002"]
    assert entries[0].performed_by == "cashier@example.com"
    assert str(requests[0].url) == "https://api.example.com/api/system-activity-logs"


@pytest.mark.anyio
async def test_fetch_accepts_data_envelope():
    client = _client(lambda request: httpx.Response(200, json={"data": [make_entry(4, branchId="B2")]}))

    entries = await client.fetch()

    assert entries[0].branch_id == "B2"


@pytest.mark.anyio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={"message": "Unauthorized"}),
        httpx.Response(200, json={"logs": []}),
        httpx.Response(200, text="<html>"),
    ],
)
async def test_fetch_raises_on_unusable_responses(response):
    client = _client(lambda request: response)

    with pytest.raises(ActivityLogFetchError):
        await client.fetch()


@pytest.mark.anyio
async def test_transport_errors_are_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ActivityLogFetchError):
        await _client(handler).fetch()
