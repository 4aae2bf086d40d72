"""Database engine and request-scoped connection management."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from geocache.core.config import settings
from geocache.core.exceptions import StoreConnectionError
from geocache.core.logging import get_logger

logger = get_logger()

# Lazy database initialization - don't create engine at import time
engine: AsyncEngine | None = None


def _initialize_database() -> AsyncEngine:
    """Initialize the database engine on first use."""
    global engine

    if engine is not None:
        return engine  # Already initialized

    url = settings.database_url
    options: dict[str, Any] = {"echo": False, "pool_pre_ping": True}
    if url.get_backend_name() != "sqlite":
        options.update(pool_size=settings.MAX_CONNECTIONS, max_overflow=0)

    engine = create_async_engine(url, **options)
    return engine


def get_engine() -> AsyncEngine:
    """Get the shared engine.

    Returns:
        AsyncEngine: Engine for the configured store
    """
    return _initialize_database()


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""
    global engine

    if engine is not None:
        await engine.dispose()
        engine = None


@asynccontextmanager
async def open_connection(
    db_engine: AsyncEngine, timeout: float | None = None
) -> AsyncIterator[AsyncConnection]:
    """Acquire one store connection for the lifetime of a request.

    Args:
        db_engine: Engine to connect with
        timeout: Seconds to wait for the connection, defaults to
            ``DB_CONNECT_TIMEOUT``

    Yields:
        AsyncConnection: Open connection, closed on every exit path

    Raises:
        StoreConnectionError: If the store is unreachable, rejects the
            credentials, or does not answer within ``timeout``
    """
    timeout = settings.DB_CONNECT_TIMEOUT if timeout is None else timeout
    try:
        connection = await asyncio.wait_for(db_engine.connect().start(), timeout)
    except asyncio.TimeoutError as e:
        logger.error("store_connection_failed", reason="timeout", timeout=timeout)
        raise StoreConnectionError(
            detail=f"Connection attempt timed out after {timeout}s"
        ) from e
    except (SQLAlchemyError, OSError) as e:
        logger.error("store_connection_failed", reason=str(e))
        raise StoreConnectionError(detail=str(e)) from e

    try:
        yield connection
    finally:
        await connection.close()
