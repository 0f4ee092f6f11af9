"""
Application factory: one FastAPI app around one Database handle.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from cryptoapp.core.config import Settings, get_settings
from cryptoapp.core.database import Database, KeepAlive
from cryptoapp.core.errors import register_exception_handlers
from cryptoapp.core.logging_config import configure_logging
from cryptoapp.routers import auth, health, operations

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    if settings.uses_fallback_secret:
        logger.warning("SECRET_KEY is not set, tokens are signed with the built-in development key")

    # --- 1. STARTUP / SHUTDOWN ---
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db: Database = app.state.db

        # Tables are created on boot, like the old /api/init-db did on demand
        try:
            db.create_all()
            db.mark_reachable()
            logger.info("Database ready")
        except SQLAlchemyError as exc:
            # Keep serving: store calls will answer 503 until it wakes up
            db.mark_unreachable(str(exc))
            logger.error("Database initialisation failed: %s", exc.__class__.__name__)

        keepalive = None
        if settings.KEEPALIVE_ENABLED:
            keepalive = KeepAlive(db, settings.KEEPALIVE_INTERVAL_SECONDS)
            keepalive.start()

        yield

        if keepalive is not None:
            keepalive.stop()
        db.dispose()
        logger.info("Database connections closed")

    # --- 2. API ---
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Users, authentication and crypto/fiat operations",
        version=settings.VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.db = Database(
        settings.database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        retry_after=settings.RETRY_AFTER_SECONDS,
    )

    # --- 3. CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- 4. REQUEST LOG ---
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    # --- 5. ERRORS ---
    register_exception_handlers(app)

    # --- 6. ROUTERS ---
    app.include_router(health.router)
    app.include_router(auth.router, prefix=settings.API_PREFIX)
    app.include_router(operations.router, prefix=settings.API_PREFIX)

    return app

