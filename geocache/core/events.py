"""Application lifespan and shared Prometheus metrics."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import Counter, Histogram

from geocache.core.config import settings
from geocache.core.db import dispose_engine
from geocache.core.logging import configure_logging

# Prometheus metrics
REQUESTS_TOTAL = Counter(
    "geocache_http_requests_total",
    "Total number of HTTP requests",
    labelnames=["method", "path"],
)

RESPONSES_TOTAL = Counter(
    "geocache_http_responses_total",
    "Total number of HTTP responses",
    labelnames=["status_code"],
)

REQUEST_DURATION = Histogram(
    "geocache_http_request_duration_seconds",
    "HTTP request duration in seconds",
    labelnames=["method", "path"],
)

SEARCH_ERRORS_TOTAL = Counter(
    "geocache_search_errors_total",
    "Requests terminated by an error, by error kind",
    labelnames=["kind"],
)

logger: logging.Logger = logging.getLogger("geocache.core.events")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging on startup and release pooled connections on shutdown.

    Args:
        app: FastAPI application instance
    """
    configure_logging(level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)
    logger.info(
        "Application startup complete - "
        f"Store: {settings.database_url.render_as_string(hide_password=True)}, "
        f"Photo search: {'enabled' if settings.FLICKR_API_KEY else 'disabled'}"
    )
    try:
        yield
    finally:
        await dispose_engine()
        logger.info("Application shutdown complete")
