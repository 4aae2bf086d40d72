"""HTTP client for the geocache search API."""

from typing import Any

import httpx
from pydantic import ValidationError

from geocache.client.criteria import SearchCriteria
from geocache.core.logging import get_logger
from geocache.models.query import GeoPoint
from geocache.models.response import (
    PhotoSearchResponse,
    SearchFailure,
    SearchSuccess,
    search_outcome_adapter,
)

logger = get_logger()

DEFAULT_TIMEOUT = httpx.Timeout(10.0, connect=5.0)
SEARCH_PATH = "/api/v1/geocaches/search"
PHOTOS_PATH = "/api/v1/photos/nearby"


def parse_search_response(response: httpx.Response) -> SearchSuccess | SearchFailure:
    """Validate a search reply into the success/failure envelope.

    Anything other than a 2xx JSON array of records is a failure; error
    payloads keep their ``error`` kind so callers can tell them apart.
    """
    try:
        body = response.json()
    except ValueError:
        return _failure(response, "MalformedResponse", "Response body is not JSON")

    if response.is_success and isinstance(body, list):
        envelope: dict[str, Any] = {"kind": "success", "records": body}
    elif isinstance(body, dict) and body.get("error"):
        message = body.get("message")
        envelope = {
            "kind": "error",
            "error": str(body["error"]),
            "message": str(message) if message is not None else None,
            "status_code": response.status_code,
        }
    else:
        return _failure(response, "MalformedResponse", "Expected a list of geocaches")

    try:
        return search_outcome_adapter.validate_python(envelope)
    except ValidationError as e:
        return _failure(
            response,
            "MalformedResponse",
            f"Unexpected record shape: {e.error_count()} errors",
        )


def _failure(response: httpx.Response, error: str, message: str) -> SearchFailure:
    return SearchFailure(
        error=error, message=message, status_code=response.status_code
    )


class GeocacheClient:
    """Talks to the search API; never raises for transport problems."""

    def __init__(
        self,
        base_url: str,
        timeout: httpx.Timeout | float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        exact_circle: bool = False,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport
        self.exact_circle = exact_circle

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self.transport
        )

    async def search(self, criteria: SearchCriteria) -> SearchSuccess | SearchFailure:
        """Run one search for ``criteria``."""
        payload = criteria.to_request_payload(exact_circle=self.exact_circle)
        logger.debug("search_request", params=payload)

        try:
            async with self._client() as client:
                response = await client.post(SEARCH_PATH, json=payload)
        except httpx.TimeoutException:
            return SearchFailure(error="ConnectionError", message="Search timed out")
        except httpx.HTTPError as e:
            return SearchFailure(
                error="ConnectionError", message=f"{e.__class__.__name__}: {e}"
            )

        outcome = parse_search_response(response)
        logger.debug("search_response", kind=outcome.kind, status=response.status_code)
        return outcome

    async def nearby_photos(self, point: GeoPoint) -> PhotoSearchResponse:
        """Photos near ``point``; unavailable rather than raising on failure."""
        try:
            async with self._client() as client:
                response = await client.get(
                    PHOTOS_PATH,
                    params={"lat": point.latitude, "lng": point.longitude},
                )
                response.raise_for_status()
            return PhotoSearchResponse.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("photo_search_failed", reason=str(e))
            return PhotoSearchResponse(available=False)
