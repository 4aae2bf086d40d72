"""Search view: map markers, results table and the photo popup."""

from collections.abc import Callable
from dataclasses import dataclass, field
from html import escape

import folium

from geocache.client.api import GeocacheClient
from geocache.client.criteria import DEFAULT_CENTER, SearchCriteria
from geocache.core.logging import get_logger
from geocache.models.query import GeoPoint
from geocache.models.response import GeocacheRecord, Photo, SearchFailure

logger = get_logger()

INITIAL_ZOOM = 8
RESULTS_ZOOM = 7
ERROR_ALERT = "Something went wrong. Please check the server response."


@dataclass(frozen=True)
class MapMarker:
    """A marker for one geocache."""

    position: GeoPoint
    title: str
    record: GeocacheRecord


@dataclass(frozen=True)
class TableRow:
    """One row of the results table."""

    cache_type: str
    difficulty: str
    location: str


@dataclass
class Popup:
    """The single open popup and its photo state."""

    record: GeocacheRecord
    photos: list[Photo] = field(default_factory=list)
    photos_loaded: bool = False

    def html(self, include_gallery: bool = True) -> str:
        record = self.record
        body = (
            f"<strong>{escape(record.cache_type)}</strong><br>"
            f"Difficulty: {escape(str(record.difficulty_rating))}<br>"
            f"Location: {record.latitude}, {record.longitude}"
        )
        if not include_gallery:
            return f"<div>{body}</div>"

        if not self.photos_loaded:
            gallery = "<p>Loading photos...</p>"
        elif self.photos:
            gallery = "".join(
                f'<img src="{escape(photo.url)}" alt="{escape(photo.title or "Photo")}"'
                ' style="margin:2px;">'
                for photo in self.photos
            )
        else:
            gallery = "<p>No photos available.</p>"
        return (
            f"<div>{body}"
            f'<div class="photos" style="margin-top:10px;">{gallery}</div>'
            "</div>"
        )


def marker_title(record: GeocacheRecord) -> str:
    return f"{record.cache_type}, Difficulty: {record.difficulty_rating}"


class SearchView:
    """
    All mutable map state for one page.

    Each search gets a generation number; a reply that is not for the most
    recent search is dropped. On failure the diagnostic is logged, ``alert``
    is called and the current markers and rows stay as they are.
    """

    def __init__(
        self,
        client: GeocacheClient,
        alert: Callable[[str], None] | None = None,
        center: GeoPoint = DEFAULT_CENTER,
    ):
        self.client = client
        self.alert = alert
        self.center = center
        self.zoom = INITIAL_ZOOM
        self.markers: list[MapMarker] = []
        self.rows: list[TableRow] = []
        self.popup: Popup | None = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def search(self, criteria: SearchCriteria) -> bool:
        """Run a search and show its results.

        Returns:
            True if the results were displayed, False if the reply failed or
            was superseded by a newer search
        """
        self._generation += 1
        generation = self._generation

        outcome = await self.client.search(criteria)

        if generation != self._generation:
            logger.info(
                "stale_search_response_dropped",
                generation=generation,
                latest=self._generation,
            )
            return False

        if isinstance(outcome, SearchFailure):
            logger.error(
                "search_failed",
                error=outcome.error,
                message=outcome.message,
                status_code=outcome.status_code,
            )
            if self.alert is not None:
                self.alert(ERROR_ALERT)
            return False

        self.replace_markers(outcome.records)
        self.center = criteria.center
        self.zoom = RESULTS_ZOOM
        return True

    def replace_markers(self, records: list[GeocacheRecord]) -> None:
        """Swap the current markers and table rows for ``records``."""
        self.popup = None
        self.markers = [
            MapMarker(
                position=GeoPoint(latitude=record.latitude, longitude=record.longitude),
                title=marker_title(record),
                record=record,
            )
            for record in records
        ]
        self.rows = [
            TableRow(
                cache_type=record.cache_type,
                difficulty=str(record.difficulty_rating),
                location=f"{record.latitude}, {record.longitude}",
            )
            for record in records
        ]

    async def open_popup(self, index: int) -> Popup:
        """Open the popup for marker/row ``index`` and load nearby photos.

        Raises:
            IndexError: If there is no marker at ``index``
        """
        marker = self.markers[index]
        popup = Popup(record=marker.record)
        self.popup = popup
        self.center = marker.position

        photos = await self.client.nearby_photos(marker.position)
        if self.popup is not popup:
            # Another popup was opened meanwhile
            return popup

        popup.photos = photos.photos if photos.available else []
        popup.photos_loaded = True
        return popup

    def render_map(self) -> folium.Map:
        """Render the current state as a folium map."""
        fmap = folium.Map(
            location=[self.center.latitude, self.center.longitude],
            zoom_start=self.zoom,
        )
        for marker in self.markers:
            popup_html = (
                self.popup.html()
                if self.popup is not None and self.popup.record is marker.record
                else Popup(record=marker.record).html(include_gallery=False)
            )
            folium.Marker(
                location=[marker.position.latitude, marker.position.longitude],
                tooltip=marker.title,
                popup=folium.Popup(popup_html, max_width=280),
            ).add_to(fmap)
        return fmap
