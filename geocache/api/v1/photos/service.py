"""Best-effort nearby photo lookup through the Flickr REST API."""

from typing import Any

import httpx

from geocache.core.logging import get_logger
from geocache.models.query import GeoPoint
from geocache.models.response import Photo, PhotoSearchResponse

logger = get_logger()


class PhotoSearchService:
    """Find photos taken near a point.

    The API key stays on the server. Any failure degrades to an empty,
    ``available=False`` result so the map never waits on photos.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str,
        timeout: float = 5.0,
        per_page: int = 12,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.per_page = per_page
        self.transport = transport

    def _params(self, point: GeoPoint) -> dict[str, Any]:
        return {
            "method": "flickr.photos.search",
            "api_key": self.api_key,
            "lat": point.latitude,
            "lon": point.longitude,
            "per_page": self.per_page,
            "format": "json",
            "nojsoncallback": 1,
        }

    async def search_nearby(self, point: GeoPoint) -> PhotoSearchResponse:
        """Look up thumbnails near ``point``."""
        if not self.api_key:
            logger.warning(
                "photo_search_failed", reason="FLICKR_API_KEY not configured"
            )
            return PhotoSearchResponse(available=False)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(self.base_url, params=self._params(point))
                response.raise_for_status()
                data = response.json()

            if data.get("stat") != "ok":
                logger.warning(
                    "photo_search_failed",
                    reason=data.get("message", "unexpected reply"),
                    code=data.get("code"),
                )
                return PhotoSearchResponse(available=False)

            photos = [Photo.from_flickr(item) for item in data["photos"]["photo"]]
        except httpx.HTTPError as e:
            logger.warning("photo_search_failed", reason=f"{e.__class__.__name__}: {e}")
            return PhotoSearchResponse(available=False)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("photo_search_failed", reason=f"malformed reply: {e!r}")
            return PhotoSearchResponse(available=False)

        return PhotoSearchResponse(photos=photos, available=True)
