"""Per-viewer synchronization lifecycle combining push and polling."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping

from sqlalchemy.orm import sessionmaker

from dashboard_sync.config import Settings
from dashboard_sync.domain.entities import SyncEvent, Viewer
from dashboard_sync.infrastructure.activity_log import ActivityLogClient
from dashboard_sync.infrastructure.cache import CacheManager, InMemoryQueryCache
from dashboard_sync.infrastructure.database import build_engine, initialize_database
from dashboard_sync.infrastructure.notifications import (
    ConnectionManager,
    PushConnector,
    WebSocketConnector,
)
from dashboard_sync.infrastructure.repositories import (
    CursorRepository,
    KeyValueStore,
    NotificationStore,
    SqlKeyValueStore,
)
from dashboard_sync.utils import ThrottledLogger

from .invalidation import CacheInvalidationRouter
from .notifications import NOTIFICATION_RULES, NotificationRule, build_notification
from .push_events import build_push_registry
from .reconciliation import ActivityLogReconciler, ActivityLogSource

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Your session has ended, please log in again."

LogoutCallback = Callable[[str | None], Awaitable[None] | None]


class SyncSession:
    """Keep a viewer's notifications and cached read-models in sync.

    The session owns one :class:`ConnectionManager` and one
    :class:`ActivityLogReconciler`. Both feed :meth:`dispatch`, which stores
    the user-facing notification (if any) and always invalidates the affected
    read-models.
    """

    def __init__(
        self,
        viewer: Viewer,
        *,
        connector: PushConnector,
        activity_log: ActivityLogSource,
        cursors: CursorRepository,
        store: NotificationStore | None = None,
        cache_manager: CacheManager | None = None,
        rules: Mapping[str, NotificationRule] = NOTIFICATION_RULES,
        on_logout: LogoutCallback | None = None,
        poll_interval: float = 30.0,
        fetch_timeout: float = 10.0,
        reconnect_attempts: int = 5,
        reconnect_delay: float = 1.0,
        auth_failure_threshold: int = 3,
        catch_up_window: int = 5,
        initial_backfill_window: int = 10,
        error_log_interval: float = 5.0,
    ) -> None:
        self.viewer = viewer
        self.store = store if store is not None else NotificationStore()
        self.cache = cache_manager if cache_manager is not None else InMemoryQueryCache()
        self.router = CacheInvalidationRouter(self.cache)
        self._rules = rules
        self._activity_log = activity_log
        self._on_logout = on_logout
        self._poll_interval = poll_interval
        self._active = False
        self._logout_reason: str | None = None

        self.connection = ConnectionManager(
            connector,
            self.dispatch,
            build_push_registry(),
            on_session_expired=self._handle_session_expired,
            reconnect_attempts=reconnect_attempts,
            reconnect_delay=reconnect_delay,
            auth_failure_threshold=auth_failure_threshold,
            error_logger=ThrottledLogger(logger, interval=error_log_interval),
        )
        self.reconciler = ActivityLogReconciler(
            activity_log,
            cursors,
            self.dispatch,
            poll_interval=poll_interval,
            fetch_timeout=fetch_timeout,
            catch_up_window=catch_up_window,
            initial_backfill_window=initial_backfill_window,
            error_logger=ThrottledLogger(logger, interval=error_log_interval),
        )

    @classmethod
    def from_settings(
        cls,
        viewer: Viewer,
        settings: Settings,
        *,
        headers: dict[str, str] | None = None,
        key_value_store: KeyValueStore | None = None,
        store: NotificationStore | None = None,
        cache_manager: CacheManager | None = None,
        on_logout: LogoutCallback | None = None,
    ) -> "SyncSession":
        """Wire a session to the websocket, HTTP and SQL adapters."""

        if key_value_store is None:
            engine = build_engine(settings.database_url)
            initialize_database(bind=engine)
            key_value_store = SqlKeyValueStore(
                sessionmaker(autocommit=False, autoflush=False, bind=engine)
            )

        return cls(
            viewer,
            connector=WebSocketConnector(
                settings.push_url,
                headers=headers,
                open_timeout=settings.fetch_timeout_seconds,
            ),
            activity_log=ActivityLogClient(
                settings.api_base_url,
                path=settings.activity_log_path,
                timeout=settings.fetch_timeout_seconds,
                headers=headers,
            ),
            cursors=CursorRepository(key_value_store),
            store=store,
            cache_manager=cache_manager,
            on_logout=on_logout,
            poll_interval=settings.poll_interval_seconds,
            fetch_timeout=settings.fetch_timeout_seconds,
            reconnect_attempts=settings.reconnect_attempts,
            reconnect_delay=settings.reconnect_delay_seconds,
            auth_failure_threshold=settings.auth_failure_threshold,
            catch_up_window=settings.catch_up_window,
            initial_backfill_window=settings.initial_backfill_window,
            error_log_interval=settings.error_log_interval_seconds,
        )

    @property
    def active(self) -> bool:
        return self._active

    @property
    def logout_reason(self) -> str | None:
        return self._logout_reason

    async def start(self) -> None:
        """Open the push channel and start polling the activity log."""

        if self._active:
            return
        self._active = True
        self._logout_reason = None
        logger.info("Starting synchronization for viewer %s", self.viewer.id)
        self.connection.connect(self.viewer)
        self.reconciler.start_polling(self.viewer, self._poll_interval)

    async def stop(self) -> None:
        """Stop polling and close the push channel. Idempotent."""

        await self.reconciler.stop_polling()
        await self.connection.disconnect()
        if self._active:
            logger.info("Stopped synchronization for viewer %s", self.viewer.id)
        self._active = False

    async def logout(self, reason: str | None = None) -> None:
        """Stop the session and forget everything held for the viewer."""

        await self.stop()
        await self.reconciler.clear_cursor(self.viewer)
        self.store.clear_viewer(self.viewer.id)
        self._logout_reason = reason
        if self._on_logout is None:
            return
        result = self._on_logout(reason)
        if inspect.isawaitable(result):
            await result

    async def aclose(self) -> None:
        """Stop the session and release the HTTP client it owns."""

        await self.stop()
        if isinstance(self._activity_log, ActivityLogClient):
            await self._activity_log.aclose()

    async def dispatch(self, event: SyncEvent) -> None:
        """Route ``event`` to the notification store and the cache."""

        notification = build_notification(event, self.viewer, self._rules)
        if notification is not None and self.store.add(notification):
            logger.debug("Stored notification %s", notification.id)
        await self.router.invalidate(event.resource_type, event.scope)

    async def reconcile_now(self) -> int:
        return await self.reconciler.reconcile(self.viewer)

    async def emit_support_request(self, email: str, issue_type: str, message: str) -> bool:
        return await self.connection.emit_support_request(email, issue_type, message)

    async def emit_password_reset(
        self, branch_admin_email: str, temporary_password: str, user_name: str
    ) -> bool:
        return await self.connection.emit_password_reset(
            branch_admin_email, temporary_password, user_name
        )

    def status(self) -> dict[str, Any]:
        return {
            "viewer_id": self.viewer.id,
            "active": self._active,
            "logout_reason": self._logout_reason,
            "connection": self.connection.get_status(),
            "polling": self.reconciler.get_status(),
        }

    async def _handle_session_expired(self) -> None:
        logger.warning("Session expired for viewer %s", self.viewer.id)
        await self.logout(SESSION_EXPIRED_MESSAGE)


__all__ = ["LogoutCallback", "SESSION_EXPIRED_MESSAGE", "SyncSession"]
