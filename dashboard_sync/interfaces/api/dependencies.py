"""FastAPI dependency utilities."""

from fastapi import HTTPException, Request, status

from dashboard_sync.application.use_cases import SyncSession


def get_sync_session(request: Request) -> SyncSession:
    """Return the synchronization session attached to the application."""

    session: SyncSession | None = getattr(request.app.state, "sync_session", None)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="No synchronization session is active",
        )
    return session
