"""Main FastAPI application module."""

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette import status

from geocache.api.v1.router import router as v1_router
from geocache.core.config import settings
from geocache.core.events import lifespan
from geocache.middleware.correlation import CorrelationMiddleware
from geocache.middleware.errors import (
    ErrorHandlingMiddleware,
    register_exception_handlers,
)
from geocache.middleware.metrics import MetricsMiddleware
from geocache.middleware.security import SecurityHeadersMiddleware

app = FastAPI(
    title=settings.app_name,
    description="Radius search over a geocache dataset",
    version=settings.version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    default_response_class=JSONResponse,
    lifespan=lifespan,
)

register_exception_handlers(app)

# Starlette wraps each added middleware around the previous ones, so the
# last one added runs first:
# 1. CORS (outermost)
# 2. Security headers
# 3. Correlation (adds request ID)
# 4. Metrics (tracks all requests)
# 5. Error handling (innermost - handles unexpected errors)
app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(CorrelationMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
    max_age=600,
)


@app.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Expose Prometheus metrics."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/", include_in_schema=False)
async def root_redirect() -> Response:
    """Redirect root path to docs."""
    return RedirectResponse(url="/docs", status_code=status.HTTP_307_TEMPORARY_REDIRECT)


# Include routers - mount v1 routes under prefix
app.include_router(v1_router, prefix=settings.api_prefix)
