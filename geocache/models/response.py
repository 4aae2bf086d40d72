"""Response models for the geocache search API."""

from decimal import Decimal
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

# Thumbnail ("_t") variant of Flickr's static photo URL
FLICKR_THUMBNAIL_TEMPLATE = (
    "https://farm{farm}.staticflickr.com/{server}/{id}_{secret}_t.jpg"
)


class GeocacheRecord(BaseModel):
    """A stored geocache with its cache type label resolved.

    Columns beyond the documented ones are passed through unchanged.
    """

    id: int | None = Field(default=None, description="Geocache id")
    latitude: float = Field(..., description="Latitude in decimal degrees")
    longitude: float = Field(..., description="Longitude in decimal degrees")
    cache_type_id: int | None = Field(default=None, description="Cache type id")
    cache_type: str = Field(
        ..., description="Human readable cache type label", examples=["Traditional"]
    )
    difficulty_rating: int | float | str | None = Field(
        default=None, description="Difficulty rating", examples=[2]
    )

    model_config = ConfigDict(extra="allow")

    @field_validator("latitude", "longitude", "difficulty_rating", mode="before")
    @classmethod
    def decimal_to_float(cls, value: Any) -> Any:
        # DECIMAL columns come back as Decimal from most drivers
        if isinstance(value, Decimal):
            return float(value)
        return value


class ErrorResponse(BaseModel):
    """Error payload returned with every non-2xx response."""

    error: str = Field(..., description="Stable error kind", examples=["InputError"])
    message: str = Field(..., description="Human readable message")
    status_code: int
    correlation_id: str = "unknown"
    detail: str | None = Field(
        default=None, description="Raw diagnostic text, when enabled"
    )


class SearchSuccess(BaseModel):
    """Successful search envelope."""

    kind: Literal["success"] = "success"
    records: list[GeocacheRecord]


class SearchFailure(BaseModel):
    """Failed search envelope."""

    kind: Literal["error"] = "error"
    error: str
    message: str | None = None
    status_code: int | None = None


SearchOutcome = Annotated[
    Union[SearchSuccess, SearchFailure], Field(discriminator="kind")
]

# Replies are validated into one of the two envelopes by their "kind"
search_outcome_adapter: TypeAdapter[SearchOutcome] = TypeAdapter(SearchOutcome)


class Photo(BaseModel):
    """A nearby photo thumbnail."""

    id: str
    title: str = ""
    url: str

    @classmethod
    def from_flickr(cls, item: dict[str, Any]) -> "Photo":
        """Build a thumbnail from a ``flickr.photos.search`` result item.

        Raises:
            KeyError: If the item lacks an URL component
        """
        url = FLICKR_THUMBNAIL_TEMPLATE.format(
            farm=item["farm"],
            server=item["server"],
            id=item["id"],
            secret=item["secret"],
        )
        return cls(id=str(item["id"]), title=str(item.get("title") or ""), url=url)


class PhotoSearchResponse(BaseModel):
    """Photos near a point; ``available`` is False when the lookup failed."""

    photos: list[Photo] = Field(default_factory=list)
    available: bool = True
