"""Geocache search endpoint."""

import json
from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from geocache.api.v1.geocaches.search_service import GeocacheQueryService
from geocache.core.config import settings
from geocache.core.db import get_engine
from geocache.core.exceptions import InputError
from geocache.models.query import GeocacheSearchRequest
from geocache.models.response import ErrorResponse, GeocacheRecord

router = APIRouter(prefix="/geocaches", tags=["geocaches"])


def get_query_service() -> GeocacheQueryService:
    """Create the query service for one request."""
    return GeocacheQueryService(
        get_engine(), connect_timeout=settings.DB_CONNECT_TIMEOUT
    )


def parse_search_request(body: bytes) -> GeocacheSearchRequest:
    """
    Validate a raw search body.

    Raises:
        InputError: If the body is absent, not JSON, not a non-empty object,
            or has missing/invalid fields
    """
    if not body.strip():
        raise InputError()

    try:
        payload: Any = json.loads(body)
    except ValueError as e:
        raise InputError(detail=f"Body is not valid JSON: {e}") from e

    if not isinstance(payload, dict) or not payload:
        raise InputError()

    try:
        return GeocacheSearchRequest.model_validate(payload)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in err["loc"]) or "body" for err in e.errors()
        )
        raise InputError(
            message=f"Invalid search parameters: {fields}", detail=str(e)
        ) from e


@router.post(
    "/search",
    response_model=list[GeocacheRecord],
    responses={
        400: {"model": ErrorResponse, "description": "Missing or malformed input"},
        500: {"model": ErrorResponse, "description": "Query execution failed"},
        503: {"model": ErrorResponse, "description": "Store unreachable"},
    },
)
async def search_geocaches(
    request: Request,
    service: GeocacheQueryService = Depends(get_query_service),
) -> list[GeocacheRecord]:
    """
    Search geocaches inside a bounding box.

    The body carries the box as ``minLat``, ``maxLat``, ``minLng`` and
    ``maxLng`` plus optional ``type`` (id or label) and ``difficulty``
    filters. Blank filters are ignored. Supplying ``centerLat``,
    ``centerLng`` and ``radius`` (meters) additionally drops records in the
    box corners that lie outside the circle.

    The body is validated before the store is contacted, so malformed
    requests never open a connection.
    """
    search_request = parse_search_request(await request.body())
    return await service.search(search_request)
