"""Query parameter models for the geocache search API."""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class GeoPoint(BaseModel):
    """Geographic point coordinates."""

    latitude: float = Field(
        ...,
        title="Latitude",
        description="Latitude coordinate",
        examples=[32.253],
    )
    longitude: float = Field(
        ...,
        title="Longitude",
        description="Longitude coordinate",
        examples=[-110.912],
    )

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_coordinates(self) -> "GeoPoint":
        """Validate coordinate ranges."""
        if not -90 <= self.latitude <= 90:
            raise ValueError("Latitude must be between -90 and 90 degrees")
        if not -180 <= self.longitude <= 180:
            raise ValueError("Longitude must be between -180 and 180 degrees")
        return self


class GeoBoundingBox(BaseModel):
    """Geographic bounding box."""

    min_latitude: float = Field(
        ...,
        title="Minimum Latitude",
        description="Southern boundary of the box",
        examples=[32.0],
    )
    max_latitude: float = Field(
        ...,
        title="Maximum Latitude",
        description="Northern boundary of the box",
        examples=[32.5],
    )
    min_longitude: float = Field(
        ...,
        title="Minimum Longitude",
        description="Western boundary of the box",
        examples=[-111.0],
    )
    max_longitude: float = Field(
        ...,
        title="Maximum Longitude",
        description="Eastern boundary of the box",
        examples=[-110.5],
    )

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_coordinates(self) -> "GeoBoundingBox":
        """Validate coordinate ranges and relationships."""
        if not -90 <= self.min_latitude <= 90:
            raise ValueError("Minimum latitude must be between -90 and 90 degrees")
        if not -90 <= self.max_latitude <= 90:
            raise ValueError("Maximum latitude must be between -90 and 90 degrees")
        if not -180 <= self.min_longitude <= 180:
            raise ValueError("Minimum longitude must be between -180 and 180 degrees")
        if not -180 <= self.max_longitude <= 180:
            raise ValueError("Maximum longitude must be between -180 and 180 degrees")
        if self.min_latitude > self.max_latitude:
            raise ValueError("Minimum latitude cannot be greater than maximum latitude")
        if self.min_longitude > self.max_longitude:
            raise ValueError(
                "Minimum longitude cannot be greater than maximum longitude"
            )
        return self


class GeocacheSearchRequest(BaseModel):
    """JSON body of ``POST /geocaches/search``.

    Field aliases follow the wire names used by the map page
    (``minLat``, ``type`` ...). Empty strings in the optional filters mean
    "no filter".
    """

    min_lat: float = Field(..., alias="minLat", ge=-90, le=90)
    max_lat: float = Field(..., alias="maxLat", ge=-90, le=90)
    min_lng: float = Field(..., alias="minLng", ge=-180, le=180)
    max_lng: float = Field(..., alias="maxLng", ge=-180, le=180)
    cache_type: int | str | None = Field(
        default=None,
        alias="type",
        description="Cache type id, or a cache type label such as 'Traditional'",
    )
    difficulty: str | None = Field(
        default=None,
        description="Difficulty rating to match, compared as the store compares it",
    )
    # Optional exact-circle refinement of the bounding box
    center_lat: float | None = Field(default=None, alias="centerLat", ge=-90, le=90)
    center_lng: float | None = Field(
        default=None, alias="centerLng", ge=-180, le=180
    )
    radius_meters: float | None = Field(default=None, alias="radius", gt=0)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("cache_type", mode="before")
    @classmethod
    def normalize_cache_type(cls, value: Any) -> Any:
        """Blank means no filter; digit strings are type ids."""
        if value is None:
            return None
        if isinstance(value, bool):
            raise ValueError("Cache type must be an id or a label")
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
            if value.isdigit():
                return int(value)
        return value

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, value: Any) -> Any:
        """Blank means no filter; numbers are matched by their text form."""
        if value is None:
            return None
        if isinstance(value, bool):
            raise ValueError("Difficulty must be a rating, not a boolean")
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError("Difficulty must be a finite number")
            return str(int(value)) if value.is_integer() else str(value)
        if isinstance(value, int):
            return str(value)
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("center_lat", "center_lng", "radius_meters", mode="before")
    @classmethod
    def blank_as_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def validate_bounds(self) -> "GeocacheSearchRequest":
        """Validate box ordering and that the circle fields come together."""
        if self.min_lat > self.max_lat:
            raise ValueError("minLat cannot be greater than maxLat")
        if self.min_lng > self.max_lng:
            raise ValueError("minLng cannot be greater than maxLng")
        circle = (self.center_lat, self.center_lng, self.radius_meters)
        if any(v is not None for v in circle) and not all(
            v is not None for v in circle
        ):
            raise ValueError("centerLat, centerLng and radius must be given together")
        return self

    @property
    def bbox(self) -> GeoBoundingBox:
        return GeoBoundingBox(
            min_latitude=self.min_lat,
            max_latitude=self.max_lat,
            min_longitude=self.min_lng,
            max_longitude=self.max_lng,
        )

    @property
    def center(self) -> GeoPoint | None:
        """Center of the exact-circle filter, if one was requested."""
        if self.center_lat is None or self.center_lng is None:
            return None
        return GeoPoint(latitude=self.center_lat, longitude=self.center_lng)
