"""Connection management for the push notification channel."""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import json
import logging
from typing import Any, Awaitable, Callable, Mapping

import anyio

from dashboard_sync.domain.entities import ConnectionState, SyncEvent, Viewer
from dashboard_sync.utils import ThrottledLogger, isoformat_utc, now_utc

from .transport import AuthenticationError, PushConnector, PushTransport, TransportError

logger = logging.getLogger(__name__)

EventNormalizer = Callable[[Mapping[str, Any]], SyncEvent]
EventDispatcher = Callable[[SyncEvent], Awaitable[None]]
SessionExpiredCallback = Callable[[], Awaitable[None] | None]


class ConnectionManager:
    """Own a single push channel connection for the signed-in viewer.

    The manager opens the transport through ``connector``, normalizes every
    known inbound event with the registry and awaits ``dispatch`` for it, one
    message at a time. Lost connections are retried a bounded number of times
    with a fixed delay. Repeated authentication failures end the session
    through ``on_session_expired``.
    """

    def __init__(
        self,
        connector: PushConnector,
        dispatch: EventDispatcher,
        registry: Mapping[str, EventNormalizer],
        *,
        on_session_expired: SessionExpiredCallback | None = None,
        reconnect_attempts: int = 5,
        reconnect_delay: float = 1.0,
        auth_failure_threshold: int = 3,
        error_logger: ThrottledLogger | None = None,
    ) -> None:
        self._connector = connector
        self._dispatch = dispatch
        self._registry: Mapping[str, EventNormalizer] = dict(registry)
        self._on_session_expired = on_session_expired
        self._reconnect_attempts = reconnect_attempts
        self._reconnect_delay = reconnect_delay
        self._auth_failure_threshold = auth_failure_threshold
        self._errors = error_logger or ThrottledLogger(logger)

        self._state = ConnectionState.DISCONNECTED
        self._auth_failures = 0
        self._attempts = 0
        self._session_expired = False
        self._generation = 0
        self._task: asyncio.Task[None] | None = None
        self._transport: PushTransport | None = None
        self._viewer: Viewer | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def auth_failure_count(self) -> int:
        return self._auth_failures

    @property
    def subscribed_events(self) -> tuple[str, ...]:
        return tuple(self._registry)

    def connect(self, viewer: Viewer | None) -> None:
        """Start the connection task for ``viewer``.

        Does nothing when no viewer is signed in or a connection task is
        already running.
        """

        if viewer is None:
            logger.warning("No signed-in viewer; push channel not started")
            return
        if self._task is not None and not self._task.done():
            return

        self._generation += 1
        self._viewer = viewer
        self._attempts = 0
        self._session_expired = False
        self._state = ConnectionState.CONNECTING
        logger.info("Connecting push channel for viewer %s (%s)", viewer.id, viewer.role)
        self._task = asyncio.create_task(self._run(self._generation))

    async def disconnect(self) -> None:
        """Stop the connection task and close the transport. Idempotent."""

        self._generation += 1
        task, self._task = self._task, None
        transport, self._transport = self._transport, None

        if transport is not None:
            await _close_quietly(transport)
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        if self._state is not ConnectionState.DISCONNECTED:
            logger.info("Push channel disconnected")
        self._state = ConnectionState.DISCONNECTED
        self._auth_failures = 0
        self._attempts = 0
        self._viewer = None

    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED and self._transport is not None

    async def wait_closed(self) -> None:
        """Wait until the connection task stops on its own."""

        task = self._task
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def emit_support_request(self, email: str, issue_type: str, message: str) -> bool:
        """Send a ``support_request`` frame; returns ``False`` when offline."""

        return await self._emit(
            "support_request",
            {
                "email": email,
                "issueType": issue_type,
                "message": message,
                "timestamp": isoformat_utc(now_utc()),
            },
        )

    async def emit_password_reset(
        self, branch_admin_email: str, temporary_password: str, user_name: str
    ) -> bool:
        """Send a ``password_reset`` frame; returns ``False`` when offline."""

        return await self._emit(
            "password_reset",
            {
                "branchAdminEmail": branch_admin_email,
                "temporaryPassword": temporary_password,
                "userName": user_name,
                "timestamp": isoformat_utc(now_utc()),
            },
        )

    def get_status(self) -> dict[str, Any]:
        return {
            "connected": self.is_connected(),
            "status": self._state.value,
            "auth_failures": self._auth_failures,
            "attempts": self._attempts,
        }

    async def _emit(self, event_type: str, data: dict[str, Any]) -> bool:
        transport = self._transport
        if transport is None or not self.is_connected():
            logger.warning("Push channel not connected; cannot emit %s", event_type)
            return False
        try:
            await transport.send(json.dumps({"type": event_type, "data": data}))
        except TransportError as exc:
            self._errors.error("Failed to emit %s: %s", event_type, exc)
            return False
        logger.debug("Emitted %s over push channel", event_type)
        return True

    async def _run(self, generation: int) -> None:
        while generation == self._generation:
            self._state = ConnectionState.CONNECTING
            try:
                transport = await self._connector.connect()
            except AuthenticationError as exc:
                if generation != self._generation:
                    return
                if self._record_auth_failure(exc):
                    await self._expire_session()
                    return
            except TransportError as exc:
                if generation != self._generation:
                    return
                self._state = ConnectionState.DISCONNECTED
                self._errors.error("Push channel connection failed: %s", exc)
            else:
                if generation != self._generation:
                    await _close_quietly(transport)
                    return
                self._on_connected(transport)
                try:
                    await self._consume(transport, generation)
                except AuthenticationError as exc:
                    if generation != self._generation:
                        return
                    self._transport = None
                    if self._record_auth_failure(exc):
                        await self._expire_session()
                        return
                except TransportError as exc:
                    if generation != self._generation:
                        return
                    self._transport = None
                    self._state = ConnectionState.DISCONNECTED
                    self._errors.error("Push channel lost: %s", exc)
                finally:
                    if self._transport is transport:
                        self._transport = None
                    await _close_quietly(transport)

            if generation != self._generation:
                return
            self._attempts += 1
            if self._attempts > self._reconnect_attempts:
                logger.error(
                    "Giving up on push channel after %d reconnection attempts",
                    self._reconnect_attempts,
                )
                self._state = ConnectionState.DISCONNECTED
                return
            await anyio.sleep(self._reconnect_delay)

    def _on_connected(self, transport: PushTransport) -> None:
        self._transport = transport
        self._state = ConnectionState.CONNECTED
        logger.info("Push channel connected")

    def _on_healthy(self) -> None:
        """Forget past failures once the server has delivered a frame."""

        if self._auth_failures or self._attempts:
            logger.debug("Push channel healthy; resetting failure counters")
        self._auth_failures = 0
        self._attempts = 0
        self._errors.reset()

    async def _consume(self, transport: PushTransport, generation: int) -> None:
        while generation == self._generation:
            raw = await transport.receive()
            if generation != self._generation:
                return
            self._on_healthy()
            await self._handle_message(raw)

    async def _handle_message(self, raw: str) -> None:
        try:
            message = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring non-JSON push frame")
            return
        if not isinstance(message, dict):
            logger.warning("Ignoring push frame of type %s", type(message).__name__)
            return

        event_type = message.get("type")
        normalizer = self._registry.get(event_type) if isinstance(event_type, str) else None
        if normalizer is None:
            logger.debug("Dropping unsubscribed push event %r", event_type)
            return

        data = message.get("data")
        try:
            event = normalizer(data if isinstance(data, dict) else {})
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed %s push event", event_type, exc_info=True)
            return

        try:
            await self._dispatch(event)
        except Exception:
            logger.exception("Failed to dispatch %s push event", event_type)

    def _record_auth_failure(self, exc: AuthenticationError) -> bool:
        """Count an authentication failure; return ``True`` at the threshold."""

        self._auth_failures += 1
        logger.warning(
            "Push channel authentication failed (%d/%d): %s",
            self._auth_failures,
            self._auth_failure_threshold,
            exc,
        )
        if self._auth_failures < self._auth_failure_threshold:
            self._state = ConnectionState.CONNECTING
            return False
        self._state = ConnectionState.DISCONNECTED
        return True

    async def _expire_session(self) -> None:
        if self._session_expired:
            return
        self._session_expired = True
        logger.error("Push channel authentication failed repeatedly; ending session")
        if self._on_session_expired is None:
            return
        try:
            result = self._on_session_expired()
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Session expiry handler failed")


async def _close_quietly(transport: PushTransport) -> None:
    try:
        await transport.close()
    except Exception:
        logger.debug("Error while closing push transport", exc_info=True)


__all__ = [
    "ConnectionManager",
    "EventDispatcher",
    "EventNormalizer",
    "SessionExpiredCallback",
]
