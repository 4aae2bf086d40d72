"""Nearby photo proxy endpoint."""

from fastapi import APIRouter, Depends, Query

from geocache.api.v1.photos.service import PhotoSearchService
from geocache.core.config import settings
from geocache.models.query import GeoPoint
from geocache.models.response import PhotoSearchResponse

router = APIRouter(prefix="/photos", tags=["photos"])


def get_photo_service() -> PhotoSearchService:
    return PhotoSearchService(
        api_key=settings.FLICKR_API_KEY,
        base_url=settings.FLICKR_API_URL,
        timeout=settings.PHOTO_SEARCH_TIMEOUT,
        per_page=settings.PHOTO_SEARCH_PER_PAGE,
    )


@router.get("/nearby", response_model=PhotoSearchResponse)
async def nearby_photos(
    lat: float = Query(..., ge=-90, le=90, description="Latitude"),
    lng: float = Query(..., ge=-180, le=180, description="Longitude"),
    service: PhotoSearchService = Depends(get_photo_service),
) -> PhotoSearchResponse:
    """
    Thumbnails of photos taken near a point.

    Always answers 200; ``available`` is false when the photo service could
    not be reached, so the caller can show a "no photos" state.
    """
    return await service.search_nearby(GeoPoint(latitude=lat, longitude=lng))
