"""Immutable geometry types shared by the matching core.

Coordinates are always held as (lon, lat) internally, matching GeoJSON. The
order a stored geometry was produced in is carried as metadata on the
Polyline so that consumers never have to guess it again.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


class GeoPoint(NamedTuple):
    """A (longitude, latitude) pair in decimal degrees."""

    lon: float
    lat: float


class CoordinateOrder(str, Enum):
    """Component order of raw coordinate pairs."""

    LON_LAT = "lon_lat"
    LAT_LON = "lat_lon"
    AUTO = "auto"


class PolylineSource(str, Enum):
    """Where a polyline came from."""

    STORED = "stored"
    SYNTHETIC = "synthetic"


@dataclass(frozen=True)
class Polyline:
    """Ordered sequence of points; insertion order is the direction of travel.

    A SYNTHETIC polyline is an approximation built on demand and must never be
    persisted as the driver's road path.
    """

    points: tuple[GeoPoint, ...] = ()
    source: PolylineSource = PolylineSource.STORED
    order: CoordinateOrder = CoordinateOrder.LON_LAT
    orientation_ambiguous: bool = False

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[GeoPoint]:
        return iter(self.points)

    def __getitem__(self, index: int) -> GeoPoint:
        return self.points[index]

    @property
    def is_empty(self) -> bool:
        return not self.points

    @property
    def has_segments(self) -> bool:
        return len(self.points) >= 2

    @property
    def first(self) -> GeoPoint | None:
        return self.points[0] if self.points else None

    @property
    def last(self) -> GeoPoint | None:
        return self.points[-1] if self.points else None

    @classmethod
    def empty(cls, source: PolylineSource = PolylineSource.STORED) -> "Polyline":
        return cls(points=(), source=source)

    def to_lon_lat_pairs(self) -> list[list[float]]:
        """Serialize as GeoJSON-style [[lon, lat], ...]."""
        return [[point.lon, point.lat] for point in self.points]
