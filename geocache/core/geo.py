"""Geographic helpers: radius to bounding box, distances, containment."""

import math

from geocache.models.query import GeoBoundingBox, GeoPoint

# Mean Earth radius (IUGG)
EARTH_RADIUS_METERS = 6371008.8
METERS_PER_MILE = 1609.34

_HALF_PI = math.pi / 2


def miles_to_meters(miles: float) -> float:
    """Convert miles to meters."""
    return miles * METERS_PER_MILE


def meters_to_miles(meters: float) -> float:
    """Convert meters to miles."""
    return meters / METERS_PER_MILE


def _normalize_longitude(longitude: float) -> float:
    return (longitude + 180.0) % 360.0 - 180.0


def haversine_meters(origin: GeoPoint, target: GeoPoint) -> float:
    """Great-circle distance between two points in meters."""
    phi1 = math.radians(origin.latitude)
    phi2 = math.radians(target.latitude)
    d_phi = phi2 - phi1
    d_lambda = math.radians(target.longitude - origin.longitude)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def destination_point(
    origin: GeoPoint, bearing_degrees: float, distance_meters: float
) -> GeoPoint:
    """Point reached by travelling ``distance_meters`` on a great circle.

    Args:
        origin: Starting point
        bearing_degrees: Initial bearing, clockwise from north
        distance_meters: Distance along the surface

    Returns:
        The destination, longitude normalized to [-180, 180)
    """
    delta = distance_meters / EARTH_RADIUS_METERS
    theta = math.radians(bearing_degrees)
    phi1 = math.radians(origin.latitude)
    lambda1 = math.radians(origin.longitude)

    sin_phi2 = math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(
        delta
    ) * math.cos(theta)
    phi2 = math.asin(max(-1.0, min(1.0, sin_phi2)))
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )

    return GeoPoint(
        latitude=max(-90.0, min(90.0, math.degrees(phi2))),
        longitude=_normalize_longitude(math.degrees(lambda2)),
    )


def is_point_in_bbox(point: GeoPoint, bbox: GeoBoundingBox) -> bool:
    """Check if point is within bounding box (edges inclusive)."""
    return (
        bbox.min_latitude <= point.latitude <= bbox.max_latitude
        and bbox.min_longitude <= point.longitude <= bbox.max_longitude
    )


class BoundingBoxCalculator:
    """Smallest lat/lng box enclosing a circle on the sphere.

    Latitude extends by the angular radius ``r / R``. Longitude extends by
    ``asin(sin(r / R) / cos(lat))``, the meridian of the circle's tangent
    point, so the box shrinks in latitude-dependent fashion and still holds
    every point at distance ``r``. Circles that reach a pole or cross the
    antimeridian get the full longitude range.
    """

    @staticmethod
    def calculate(center: GeoPoint, radius_meters: float) -> GeoBoundingBox:
        """Calculate the bounding box of a circle.

        Args:
            center: Circle center
            radius_meters: Circle radius; non-positive or non-finite values
                yield a zero-size box at the center

        Returns:
            GeoBoundingBox with min <= max on both axes
        """
        if not math.isfinite(radius_meters) or radius_meters <= 0:
            radius_meters = 0.0

        delta = radius_meters / EARTH_RADIUS_METERS
        phi = math.radians(center.latitude)
        lam = math.radians(center.longitude)

        min_phi = phi - delta
        max_phi = phi + delta

        if min_phi > -_HALF_PI and max_phi < _HALF_PI:
            d_lambda = math.asin(min(1.0, math.sin(delta) / math.cos(phi)))
            min_lam = lam - d_lambda
            max_lam = lam + d_lambda
            if min_lam < -math.pi or max_lam > math.pi:
                # Crosses the antimeridian
                min_lam, max_lam = -math.pi, math.pi
        else:
            # A pole lies inside the circle
            min_phi = max(min_phi, -_HALF_PI)
            max_phi = min(max_phi, _HALF_PI)
            min_lam, max_lam = -math.pi, math.pi

        return GeoBoundingBox(
            min_latitude=max(-90.0, math.degrees(min_phi)),
            max_latitude=min(90.0, math.degrees(max_phi)),
            min_longitude=max(-180.0, math.degrees(min_lam)),
            max_longitude=min(180.0, math.degrees(max_lam)),
        )
