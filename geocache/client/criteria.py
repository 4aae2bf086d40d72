"""Search criteria built from raw form input."""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from geocache.core.geo import BoundingBoxCalculator, miles_to_meters
from geocache.models.query import GeoBoundingBox, GeoPoint

# Tucson, AZ
DEFAULT_CENTER = GeoPoint(latitude=32.253, longitude=-110.912)
DEFAULT_DISTANCE_MILES = 10.0


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _as_filter(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class SearchCriteria(BaseModel):
    """One search: a circle plus optional type and difficulty filters."""

    center: GeoPoint = DEFAULT_CENTER
    radius_meters: float = Field(
        default=miles_to_meters(DEFAULT_DISTANCE_MILES), gt=0
    )
    cache_type: str | None = None
    difficulty: str | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_form(
        cls,
        lat: Any = None,
        lng: Any = None,
        distance_miles: Any = None,
        cache_type: Any = None,
        difficulty: Any = None,
    ) -> "SearchCriteria":
        """Build criteria from user-entered values.

        A missing or unusable coordinate pair falls back to the default
        center; a missing, non-numeric or non-positive distance falls back to
        ten miles. Blank filters mean "any".
        """
        latitude = _as_float(lat)
        longitude = _as_float(lng)
        if (
            latitude is None
            or longitude is None
            or not -90 <= latitude <= 90
            or not -180 <= longitude <= 180
        ):
            center = DEFAULT_CENTER
        else:
            center = GeoPoint(latitude=latitude, longitude=longitude)

        miles = _as_float(distance_miles)
        if miles is None or miles <= 0:
            miles = DEFAULT_DISTANCE_MILES

        return cls(
            center=center,
            radius_meters=miles_to_meters(miles),
            cache_type=_as_filter(cache_type),
            difficulty=_as_filter(difficulty),
        )

    def bounding_box(self) -> GeoBoundingBox:
        return BoundingBoxCalculator.calculate(self.center, self.radius_meters)

    def to_request_payload(self, exact_circle: bool = False) -> dict[str, Any]:
        """JSON body for ``POST /geocaches/search``.

        Args:
            exact_circle: Also send the circle so the server drops results
                in the box corners
        """
        box = self.bounding_box()
        payload: dict[str, Any] = {
            "minLat": box.min_latitude,
            "maxLat": box.max_latitude,
            "minLng": box.min_longitude,
            "maxLng": box.max_longitude,
            "type": self.cache_type or "",
            "difficulty": self.difficulty or "",
        }
        if exact_circle:
            payload.update(
                centerLat=self.center.latitude,
                centerLng=self.center.longitude,
                radius=self.radius_meters,
            )
        return payload
