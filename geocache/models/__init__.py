"""Request, response and geographic models."""

from geocache.models.query import (
    GeoBoundingBox,
    GeocacheSearchRequest,
    GeoPoint,
)
from geocache.models.response import (
    ErrorResponse,
    GeocacheRecord,
    Photo,
    PhotoSearchResponse,
    SearchFailure,
    SearchOutcome,
    SearchSuccess,
    search_outcome_adapter,
)

__all__ = [
    "ErrorResponse",
    "GeoBoundingBox",
    "GeoPoint",
    "GeocacheRecord",
    "GeocacheSearchRequest",
    "Photo",
    "PhotoSearchResponse",
    "SearchFailure",
    "SearchOutcome",
    "SearchSuccess",
    "search_outcome_adapter",
]
