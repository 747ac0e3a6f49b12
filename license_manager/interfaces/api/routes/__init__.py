from fastapi import FastAPI

from .health import router as health_router
from .notification_settings import router as notification_settings_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(health_router)
    app.include_router(notification_settings_router)
