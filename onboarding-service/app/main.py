"""
Investor Onboarding API — Application entry-point.

Initializes the FastAPI application, registers middleware, exception handlers,
routers, and manages the application lifecycle (DB table creation on startup).
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.openapi.docs import get_redoc_html
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.api.v1.api import api_router
from app.core.config import settings
from app.core.exceptions import add_exception_handlers
from app.core.logging import setup_logging
from app.core.resilience import db_circuit_breaker
from app.db.base import metadata
from app.db.session import engine, session_scope
from app.middleware import RequestIDMiddleware, RequestTimingMiddleware

setup_logging()
logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────────────────────────
# Application lifespan
# ────────────────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: create the tables, retrying with exponential back-off.  If the
    database stays unreachable the app starts in degraded mode and
    ``/health`` reports ``database: false``.

    Shutdown: dispose of the connection pool.
    """
    max_retries = 5
    retry_delay = 2  # seconds (doubles each attempt)

    for attempt in range(1, max_retries + 1):
        try:
            logger.info("Connecting to database (attempt %d/%d)…", attempt, max_retries)
            async with engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
            logger.info("Database tables ready")
            break
        except (SQLAlchemyError, OSError) as exc:
            if attempt < max_retries:
                logger.warning(
                    "Database connection failed (attempt %d/%d): %s; retrying in %ds…",
                    attempt,
                    max_retries,
                    exc,
                    retry_delay,
                )
                await asyncio.sleep(retry_delay)
                retry_delay *= 2
            else:
                logger.error(
                    "Could not connect to database after %d attempts. "
                    "Starting in DEGRADED mode; database-dependent endpoints "
                    "will fail until it becomes available. Last error: %s",
                    max_retries,
                    exc,
                )

    yield

    logger.info("Shutting down, disposing connection pool")
    await engine.dispose()


# ────────────────────────────────────────────────────────────────────────────
# FastAPI application instance
# ────────────────────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description=(
        "Investor onboarding: investor-type selection, type-specific general "
        "info, beneficiary allocations and accreditation review."
    ),
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    redoc_url=None,  # Disabled default; custom route below uses a working CDN
    lifespan=lifespan,
)


@app.get("/redoc", include_in_schema=False)
async def custom_redoc_html():
    """Serve ReDoc using the unpkg CDN which has proper CORS headers."""
    return get_redoc_html(
        openapi_url=app.openapi_url or f"{settings.API_V1_STR}/openapi.json",
        title=f"{settings.PROJECT_NAME} — ReDoc",
        redoc_js_url="https://unpkg.com/redoc@latest/bundles/redoc.standalone.js",
    )


# ── Middleware (last added = outermost) ──
app.add_middleware(GZipMiddleware, minimum_size=500)
app.add_middleware(RequestTimingMiddleware)
# Outside the timing middleware so timing logs carry the request ID.
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

app.include_router(api_router, prefix=settings.API_V1_STR)


# ── Health check ──


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Liveness / readiness probe.

    Runs ``SELECT 1`` so a pod that lost its database is reported as
    ``degraded``, and exposes the circuit breaker state.
    """
    db_healthy = True
    try:
        async with session_scope() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Health check database probe failed: %s", exc)
        db_healthy = False

    return {
        "status": "ok" if db_healthy else "degraded",
        "version": "1.0.0",
        "database": db_healthy,
        "circuit_breaker": db_circuit_breaker.get_status(),
    }
