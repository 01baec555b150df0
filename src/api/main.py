"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures routes and lifespan events.
"""

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator
from datetime import timedelta

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository import create_repository
from src.api.v1 import router as v1_router
from src.config.settings import get_settings
from src.domain.codec import TokenCodec
from src.domain.lifecycle import TokenLifecycle
from src.domain.wordlist import load_word_list

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Form anti-spam gate API v1 - Issue form tokens and validate submissions",
    },
]


async def sweep_periodically(lifecycle: TokenLifecycle, interval_seconds: float) -> None:
    """Purge expired tokens every ``interval_seconds`` without blocking the event loop."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await asyncio.to_thread(lifecycle.on_scheduled_sweep)
        except Exception:
            logger.exception("Scheduled token sweep failed")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool on startup (postgres store)
    - Ensures the token table exists
    - Loads the keyword blacklist
    - Sweeps expired tokens once, then periodically in the background
    - Cancels the sweep and closes the connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")

    pool = None
    if settings.token_store.lower() == "postgres":
        logger.info("Connecting to database...")
        # Create connection pool with explicit sizing
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            open=True,
        )

    sweeper = None
    try:
        repository = create_repository(settings, pool)
        if not repository.ensure_schema():
            logger.error("Token store is not usable; submissions will fail open on token checks")

        if not settings.secret_key:
            logger.warning("SECRET_KEY is not set; forms will be rendered without tokens")

        lifecycle = TokenLifecycle(
            codec=TokenCodec(secret_key=settings.secret_key),
            repository=repository,
            retention=timedelta(hours=settings.token_ttl_hours),
        )
        await asyncio.to_thread(lifecycle.on_scheduled_sweep)

        # Store shared resources in app state for dependency injection
        app.state.pool = pool
        app.state.repository = repository
        app.state.blacklist = load_word_list(settings.blacklist_path)

        sweeper = asyncio.create_task(
            sweep_periodically(lifecycle, settings.sweep_interval_seconds)
        )

        logger.info("Application startup complete")

        yield
    finally:
        # Shutdown
        logger.info("Shutting down application...")
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
        if pool is not None:
            pool.close()
            logger.info("Database connection pool closed")


app = FastAPI(
    title="formguard",
    description="Form anti-spam gate - single-use form tokens, honeypots and content heuristics",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    # Validate database connectivity (the memory store has none)
    pool = getattr(request.app.state, "pool", None)
    if pool is not None:
        with pool.connection() as conn:
            conn.execute("SELECT 1")

    return {"status": "healthy"}
