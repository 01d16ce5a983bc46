"""Service-area bounding box and coordinate validation."""

import math
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, model_validator
from shapely.geometry import Point, Polygon, box

from ridepool.core.exceptions import InvalidCoordinateError

from .types import GeoPoint


class ServiceArea(BaseModel):
    """Lon/lat rectangle that all matched coordinates must fall inside.

    Defaults to a box around India (lon 68-97 E, lat 6-37 N).
    """

    model_config = ConfigDict(frozen=True)

    min_lon: float = Field(default=68.0, ge=-180.0, le=180.0)
    max_lon: float = Field(default=97.0, ge=-180.0, le=180.0)
    min_lat: float = Field(default=6.0, ge=-90.0, le=90.0)
    max_lat: float = Field(default=37.0, ge=-90.0, le=90.0)

    @model_validator(mode="after")
    def check_bounds(self) -> "ServiceArea":
        if self.min_lon >= self.max_lon:
            raise ValueError(f"min_lon ({self.min_lon}) must be below max_lon ({self.max_lon})")
        if self.min_lat >= self.max_lat:
            raise ValueError(f"min_lat ({self.min_lat}) must be below max_lat ({self.max_lat})")
        return self

    @property
    def polygon(self) -> Polygon:
        return _bounding_box(self.min_lon, self.min_lat, self.max_lon, self.max_lat)

    def contains(self, point: GeoPoint) -> bool:
        """True when the point is inside the box or on its edge."""
        return bool(self.polygon.covers(Point(point.lon, point.lat)))


@lru_cache(maxsize=32)
def _bounding_box(min_lon: float, min_lat: float, max_lon: float, max_lat: float) -> Polygon:
    # Shapely uses (x, y) = (lon, lat)
    return box(min_lon, min_lat, max_lon, max_lat)


def is_valid_lon_lat(lon: float, lat: float) -> bool:
    """Check finite values within the global lon/lat ranges."""
    return (
        math.isfinite(lon)
        and math.isfinite(lat)
        and -180.0 <= lon <= 180.0
        and -90.0 <= lat <= 90.0
    )


def validate_point(
    point: GeoPoint,
    service_area: ServiceArea | None = None,
    label: str = "coordinate",
) -> GeoPoint:
    """Reject coordinates that must never reach a distance computation.

    Args:
        point: Candidate (lon, lat) point
        service_area: Box the point must fall inside; skipped when None
        label: Name used in the error message (e.g. "passenger source")

    Returns:
        The same point, for chaining

    Raises:
        InvalidCoordinateError: If the point is non-finite, outside the
            global ranges, the (0, 0) placeholder, or outside the service area
    """
    lon, lat = point.lon, point.lat
    details = {"label": label, "lon": lon, "lat": lat}

    if not is_valid_lon_lat(lon, lat):
        raise InvalidCoordinateError(
            f"{label} ({lon}, {lat}) is outside the valid lon/lat range",
            {**details, "reason": "out_of_range"},
        )

    # (0, 0) is the usual unset default from clients, not a real pickup
    if lon == 0.0 and lat == 0.0:
        raise InvalidCoordinateError(
            f"{label} is the (0, 0) placeholder coordinate",
            {**details, "reason": "null_island"},
        )

    if service_area is not None and not service_area.contains(point):
        raise InvalidCoordinateError(
            f"{label} ({lon}, {lat}) is outside the service area",
            {**details, "reason": "outside_service_area"},
        )

    return point
