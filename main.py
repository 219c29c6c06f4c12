import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dashboard_sync.application.use_cases import SyncSession
from dashboard_sync.config import Settings, get_settings
from dashboard_sync.domain.entities import Viewer
from dashboard_sync.infrastructure.database import engine, initialize_database
from dashboard_sync.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


def build_viewer(settings: Settings) -> Viewer | None:
    """Return the locally signed-in viewer described by ``settings``."""

    if not settings.viewer_id or not settings.viewer_role:
        return None
    return Viewer(
        id=settings.viewer_id,
        role=settings.viewer_role,
        branch_id=settings.viewer_branch_id,
        branch=settings.viewer_branch,
        name=settings.viewer_name,
        email=settings.viewer_email,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start a session for the configured viewer and stop it on shutdown."""

    settings = get_settings()
    owned: SyncSession | None = None
    if app.state.sync_session is None:
        initialize_database()
        viewer = build_viewer(settings)
        if viewer is None:
            logger.warning("VIEWER_ID is not configured; synchronization is idle")
        else:
            owned = SyncSession.from_settings(viewer, settings)
            await owned.start()
            app.state.sync_session = owned
    try:
        yield
    finally:
        if owned is not None:
            await owned.aclose()
            app.state.sync_session = None
        engine.dispose()


def create_app(sync_session: SyncSession | None = None) -> FastAPI:
    """Create and configure the local companion FastAPI application."""

    app = FastAPI(title="Dashboard Sync", lifespan=lifespan)
    app.state.sync_session = sync_session

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
