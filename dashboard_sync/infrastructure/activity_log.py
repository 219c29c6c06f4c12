"""HTTP client for the server's append-only activity log."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from dashboard_sync.domain.entities import ActivityLogEntry

logger = logging.getLogger(__name__)


class ActivityLogFetchError(RuntimeError):
    """Raised when the activity log cannot be retrieved or understood."""


class ActivityLogClient:
    """Fetch the activity log through an authenticated ``httpx`` client.

    Authentication is ambient: headers or cookies configured on ``client``
    travel with every request.
    """

    def __init__(
        self,
        base_url: str,
        *,
        path: str = "/system-activity-logs",
        timeout: float = 10.0,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = base_url.rstrip("/") + "/" + path.lstrip("/")
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(headers=headers, timeout=timeout)

    @property
    def url(self) -> str:
        return self._url

    async def fetch(self) -> list[ActivityLogEntry]:
        """Return every entry of the activity log in server order.

        Malformed entries are skipped; a transport failure, a non-success
        status or an unexpected document raise :class:`ActivityLogFetchError`.
        """

        try:
            response = await self._client.get(self._url, timeout=self._timeout)
        except httpx.HTTPError as exc:
            raise ActivityLogFetchError(f"Activity log request failed: {exc}") from exc

        if response.status_code >= 400:
            raise ActivityLogFetchError(
                f"Activity log request returned HTTP {response.status_code}"
            )

        try:
            document = response.json()
        except ValueError as exc:
            raise ActivityLogFetchError("Activity log response is not valid JSON") from exc

        return self._parse_entries(_unwrap(document))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _parse_entries(self, items: list[Any]) -> list[ActivityLogEntry]:
        entries: list[ActivityLogEntry] = []
        for item in items:
            if not isinstance(item, dict):
                logger.warning("Skipping activity log item of type %s", type(item).__name__)
                continue
            try:
                entries.append(ActivityLogEntry.from_payload(item))
            except ValueError:
                logger.warning("Skipping malformed activity log entry %r", item.get("_id"))
        return entries


def _unwrap(document: Any) -> list[Any]:
    if isinstance(document, list):
        return document
    if isinstance(document, dict) and isinstance(document.get("data"), list):
        return document["data"]
    raise ActivityLogFetchError("Invalid activity log format")


__all__ = ["ActivityLogClient", "ActivityLogFetchError"]
