"""Poll the activity log and emit the entries a viewer has not seen yet."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Awaitable, Callable, Protocol, Sequence

import anyio
import anyio.to_thread

from dashboard_sync.domain.entities import ActivityLogEntry, Cursor, SyncEvent, Viewer
from dashboard_sync.infrastructure.activity_log import ActivityLogFetchError
from dashboard_sync.infrastructure.repositories import CursorRepository
from dashboard_sync.utils import ThrottledLogger

from .activity import entry_to_event, sort_entries

logger = logging.getLogger(__name__)

EventDispatcher = Callable[[SyncEvent], Awaitable[None]]

TIMEOUT_TO_INTERVAL_RATIO = 0.8


class ActivityLogSource(Protocol):
    """Anything able to return the full activity log."""

    async def fetch(self) -> list[ActivityLogEntry]:
        ...


class ActivityLogReconciler:
    """Diff the activity log against a persisted cursor.

    Only entries the viewer has not processed yet are dispatched. A failed or
    timed-out fetch leaves the cursor untouched; the next poll retries.
    """

    def __init__(
        self,
        source: ActivityLogSource,
        cursors: CursorRepository,
        dispatch: EventDispatcher,
        *,
        poll_interval: float = 30.0,
        fetch_timeout: float = 10.0,
        catch_up_window: int = 5,
        initial_backfill_window: int = 10,
        error_logger: ThrottledLogger | None = None,
    ) -> None:
        self._source = source
        self._cursors = cursors
        self._dispatch = dispatch
        self._poll_interval = poll_interval
        self._fetch_timeout = fetch_timeout
        self._effective_timeout = _bounded_timeout(fetch_timeout, poll_interval)
        self._catch_up_window = catch_up_window
        self._initial_backfill_window = initial_backfill_window
        self._errors = error_logger or ThrottledLogger(logger)

        self._generation = 0
        self._in_flight: set[str] = set()
        self._task: asyncio.Task[None] | None = None
        self._last_cursor: str | None = None
        self._consecutive_failures = 0

    @property
    def fetch_timeout(self) -> float:
        """Timeout applied to each fetch, always below the poll interval."""

        return self._effective_timeout

    def is_polling(self) -> bool:
        return self._task is not None and not self._task.done()

    async def reconcile(self, viewer: Viewer | None) -> int:
        """Fetch the log and dispatch unseen entries for ``viewer``.

        Returns the number of entries dispatched. A call made while another
        reconciliation for the same viewer is running returns ``0`` at once.
        """

        if viewer is None:
            return 0
        if viewer.id in self._in_flight:
            logger.debug("Reconciliation already running for viewer %s", viewer.id)
            return 0

        self._in_flight.add(viewer.id)
        generation = self._generation
        try:
            entries = await self._fetch()
            if entries is None or generation != self._generation:
                return 0
            if not entries:
                return 0

            ordered = sort_entries(entries)
            try:
                cursor = await anyio.to_thread.run_sync(self._cursors.get, viewer.id)
            except Exception as exc:
                self._record_failure("cursor store unavailable: %s" % exc, "Cursor read")
                return 0
            if generation != self._generation:
                return 0
            pending = self._select_unseen(cursor, ordered)

            emitted = 0
            for entry in pending:
                if generation != self._generation:
                    return emitted
                try:
                    await self._dispatch(entry_to_event(entry))
                except Exception:
                    logger.exception("Failed to process activity log entry %s", entry.id)
                    continue
                emitted += 1

            if generation != self._generation:
                return emitted
            latest = Cursor(viewer_id=viewer.id, last_seen_event_id=ordered[-1].id)
            try:
                await anyio.to_thread.run_sync(self._cursors.save, latest)
            except Exception as exc:
                self._record_failure("cursor store unavailable: %s" % exc, "Cursor save")
                return emitted
            self._last_cursor = latest.last_seen_event_id
            if emitted:
                logger.info("Processed %d new activity log entries for viewer %s", emitted, viewer.id)
            return emitted
        finally:
            self._in_flight.discard(viewer.id)

    def start_polling(self, viewer: Viewer | None, interval: float | None = None) -> None:
        """Reconcile now and then every ``interval`` seconds until stopped."""

        if viewer is None:
            return
        if interval is not None:
            self._poll_interval = interval
        self._effective_timeout = _bounded_timeout(self._fetch_timeout, self._poll_interval)

        self._generation += 1
        previous, self._task = self._task, None
        if previous is not None and not previous.done():
            previous.cancel()
        self._task = asyncio.create_task(self._poll(viewer, self._poll_interval, self._generation))
        logger.info(
            "Polling activity log every %.1fs for viewer %s", self._poll_interval, viewer.id
        )

    async def stop_polling(self) -> None:
        """Cancel the polling task. Idempotent."""

        self._generation += 1
        task, self._task = self._task, None
        if task is None:
            return
        if task is not asyncio.current_task() and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        logger.info("Stopped polling activity log")

    async def clear_cursor(self, viewer: Viewer) -> None:
        await anyio.to_thread.run_sync(self._cursors.clear, viewer.id)
        self._last_cursor = None

    def get_status(self) -> dict[str, Any]:
        return {
            "polling": self.is_polling(),
            "in_flight": bool(self._in_flight),
            "last_cursor": self._last_cursor,
            "consecutive_failures": self._consecutive_failures,
            "interval": self._poll_interval,
        }

    async def _poll(self, viewer: Viewer, interval: float, generation: int) -> None:
        while generation == self._generation:
            try:
                await self.reconcile(viewer)
            except Exception as exc:
                self._record_failure(str(exc) or type(exc).__name__, "Reconciliation")
            await anyio.sleep(interval)

    async def _fetch(self) -> list[ActivityLogEntry] | None:
        try:
            with anyio.fail_after(self._effective_timeout):
                entries = await self._source.fetch()
        except TimeoutError:
            reason = "timed out after %.1fs" % self._effective_timeout
            self._record_failure(reason, "Activity log fetch")
            return None
        except ActivityLogFetchError as exc:
            self._record_failure(str(exc), "Activity log fetch")
            return None
        if self._consecutive_failures:
            logger.info(
                "Activity log reachable again after %d failed polls", self._consecutive_failures
            )
        self._consecutive_failures = 0
        self._errors.reset()
        return entries

    def _record_failure(self, reason: str, stage: str) -> None:
        self._consecutive_failures += 1
        self._errors.error(
            "%s failed (%d consecutive): %s", stage, self._consecutive_failures, reason
        )

    def _select_unseen(
        self, cursor: Cursor | None, ordered: Sequence[ActivityLogEntry]
    ) -> Sequence[ActivityLogEntry]:
        if cursor is None:
            return ordered[-self._initial_backfill_window :]

        for index, entry in enumerate(ordered):
            if entry.id == cursor.last_seen_event_id:
                return ordered[index + 1 :]

        logger.info(
            "Cursor %s no longer in activity log; catching up on the latest %d entries",
            cursor.last_seen_event_id,
            self._catch_up_window,
        )
        return ordered[-self._catch_up_window :]


def _bounded_timeout(fetch_timeout: float, interval: float) -> float:
    if fetch_timeout < interval:
        return fetch_timeout
    bounded = interval * TIMEOUT_TO_INTERVAL_RATIO
    logger.warning(
        "Fetch timeout %.1fs is not below the poll interval %.1fs; using %.1fs",
        fetch_timeout,
        interval,
        bounded,
    )
    return bounded


__all__ = ["ActivityLogReconciler", "ActivityLogSource", "TIMEOUT_TO_INTERVAL_RATIO"]
