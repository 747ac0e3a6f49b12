"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session, sessionmaker

from license_manager.application.use_cases.notifications import (
    DeliveryOptions,
    ExpirationNotifier,
)
from license_manager.config import Settings, get_settings
from license_manager.infrastructure.database import build_engine, initialize_database
from license_manager.infrastructure.email import (
    EmailConfigurationError,
    EmailTransport,
    build_email_transport,
)
from license_manager.infrastructure.scheduling import NotificationScheduler
from license_manager.interfaces.api.routes import register_routes
from license_manager.utils import configure_logging

logger = logging.getLogger(__name__)


def create_app(
    *,
    settings: Settings | None = None,
    session_factory: sessionmaker[Session] | None = None,
    transport: EmailTransport | None = None,
) -> FastAPI:
    """Create the API application.

    ``settings`` defaults to the environment. ``session_factory`` and
    ``transport`` default to the ones built from it when the application starts.
    """

    app_settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(app_settings.log_level, app_settings.log_file)

        engine = None
        factory = session_factory
        if factory is None:
            engine = build_engine(app_settings)
            factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        initialize_database(factory.kw["bind"])

        email_transport = transport
        if email_transport is None and app_settings.email_enabled:
            try:
                email_transport = build_email_transport(app_settings)
            except EmailConfigurationError:
                logger.error("Email transport is misconfigured; refusing to start")
                raise

        notifier = None
        if email_transport is not None:
            notifier = ExpirationNotifier(
                factory, email_transport, DeliveryOptions.from_settings(app_settings)
            )
        else:
            logger.warning("Email delivery disabled; expiration notifications will not be sent")

        scheduler = None
        if app_settings.scheduler_enabled and notifier is not None:
            scheduler = NotificationScheduler(
                notifier, factory, timezone=notifier.options.timezone
            )
            await scheduler.start(run_immediately=app_settings.run_notifications_on_startup)

        app.state.settings = app_settings
        app.state.session_factory = factory
        app.state.notifier = notifier
        app.state.scheduler = scheduler
        try:
            yield
        finally:
            if scheduler is not None:
                await scheduler.shutdown()
            if engine is not None:
                engine.dispose()

    app = FastAPI(title="License Management System", lifespan=lifespan)

    if app_settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=app_settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_routes(app)
    return app


app = create_app()
