from fastapi import FastAPI

from .notifications import router as notifications_router
from .sync import router as sync_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(notifications_router)
    app.include_router(sync_router)
