"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (logging, cache, DB engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from authz.core.config import get_settings
from authz.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: logging, Redis cache (if enabled). Shutdown: cache disconnect,
    SQL engine dispose.
    """
    settings = get_settings()
    setup_logging()

    if settings.redis_enabled:
        from authz.infrastructure.cache.redis_cache import CacheService

        cache = CacheService()
        await cache.connect()
        # Never connected: run uncached rather than fail every invalidation.
        app.state.cache = cache if cache.is_available() else None
    else:
        app.state.cache = None
        logger.info("Redis disabled; permission checks read from the database")

    yield

    if getattr(app.state, "cache", None) is not None:
        await app.state.cache.disconnect()
        logger.info("Cache disconnected")

    from authz.infrastructure.persistence import database

    if getattr(database, "engine", None) is not None:
        await database.engine.dispose()
        logger.info("Database engine disposed")
