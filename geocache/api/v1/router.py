"""API v1 router module."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from geocache.api.v1.geocaches.router import router as geocaches_router
from geocache.api.v1.photos.router import router as photos_router
from geocache.core.config import settings
from geocache.core.db import get_engine, open_connection
from geocache.models.response import ErrorResponse

router = APIRouter(default_response_class=JSONResponse)

router.include_router(geocaches_router)
router.include_router(photos_router)


@router.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint.

    Returns
    -------
        Dict containing health status information
    """
    return {
        "status": "healthy",
        "version": settings.version,
        "correlation_id": request.state.correlation_id,
    }


@router.get("/health/db", responses={503: {"model": ErrorResponse}})
async def database_health_check(request: Request) -> dict[str, str]:
    """Open and release one store connection; 503 if the store is down."""
    async with open_connection(get_engine()):
        pass
    return {
        "status": "healthy",
        "database": "reachable",
        "correlation_id": request.state.correlation_id,
    }
