"""Diagnosis API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map every failure to the {success: false, ...} envelope
    - CORS configured from settings (not hardcoded)
    - The storage handle lives on app.state.db_manager; create_app() accepts one
      so tests and scripts inject their own

Design Decisions:
    - Lifespan over @app.on_event: builds the session manager on startup and
      disposes the engine on shutdown (only when the app created it)
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from diagnosis_api.api.error_handlers import register_error_handlers
from diagnosis_api.api.routes import diagnoses, health
from diagnosis_api.config import Settings, get_settings
from diagnosis_api.infrastructure.database import DatabaseSessionManager
from diagnosis_api.infrastructure.observability import log_requests, setup_logging

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    db_manager: DatabaseSessionManager | None = None,
) -> FastAPI:
    """Build the application. Pass db_manager to bypass settings.database_url."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        setup_logging(settings.log_level, settings.log_format)
        owns_manager = app.state.db_manager is None
        if owns_manager:
            app.state.db_manager = DatabaseSessionManager(
                settings.database_url,
                pool_size=settings.database_pool_size,
                max_overflow=settings.database_max_overflow,
            )
        logger.info("Diagnosis API started")
        yield
        logger.info("Diagnosis API shutting down")
        if owns_manager:
            await app.state.db_manager.dispose()
            app.state.db_manager = None

    app = FastAPI(
        title="Diagnostic Support API",
        version=settings.service_version,
        lifespan=lifespan,
    )
    app.state.db_manager = db_manager
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )
    app.middleware("http")(log_requests)

    # Routes — explicit registration
    app.include_router(health.router)
    app.include_router(diagnoses.router)

    register_error_handlers(app)
    return app


app = create_app()
