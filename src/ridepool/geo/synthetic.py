"""Synthetic route polylines for rides without stored geometry."""

import logging

from .distance import slerp
from .types import CoordinateOrder, GeoPoint, Polyline, PolylineSource

logger = logging.getLogger(__name__)

DEFAULT_WAYPOINT_COUNT = 5


class SyntheticPolylineBuilder:
    """Builds a coarse great-circle substitute for a driver's road path.

    The result follows Earth's curvature between the two endpoints, which is
    better than a planar straight line but not road-accurate. It is tagged
    PolylineSource.SYNTHETIC and is never meant to be persisted.
    """

    def __init__(self, waypoint_count: int = DEFAULT_WAYPOINT_COUNT):
        if waypoint_count < 1:
            raise ValueError(f"waypoint_count must be at least 1, got {waypoint_count}")
        self.waypoint_count = waypoint_count

    def build(self, source: GeoPoint, destination: GeoPoint) -> Polyline:
        """Return [source, slerp(1/n), ..., slerp((n-1)/n), destination]."""
        return build_synthetic_polyline(source, destination, self.waypoint_count)


def build_synthetic_polyline(
    source: GeoPoint,
    destination: GeoPoint,
    waypoint_count: int = DEFAULT_WAYPOINT_COUNT,
) -> Polyline:
    """Interpolate n-1 intermediate points between the endpoints.

    The endpoints are copied verbatim so the polyline starts and ends exactly
    at the driver's posted coordinates.

    Args:
        source: Driver's start point
        destination: Driver's end point
        waypoint_count: n, the number of segments; must be >= 1

    Returns:
        Polyline with n + 1 points
    """
    if waypoint_count < 1:
        raise ValueError(f"waypoint_count must be at least 1, got {waypoint_count}")

    points = [source]
    points.extend(slerp(source, destination, i / waypoint_count) for i in range(1, waypoint_count))
    points.append(destination)

    logger.debug(f"Built synthetic polyline with {len(points)} points")
    return Polyline(
        points=tuple(points),
        source=PolylineSource.SYNTHETIC,
        order=CoordinateOrder.LON_LAT,
    )
