"""Polyline parsing and point-to-route measurements.

Stored route geometry arrives as a JSON array of 2-element arrays (or an
already decoded sequence). Malformed geometry never aborts a search: it
degrades to an empty Polyline, which callers treat as "geometry unavailable"
and answer with a lower matching tier.
"""

import json
import logging
import math
from collections.abc import Sequence
from itertools import pairwise
from typing import Any

import polyline as polyline_codec

from ridepool.core.exceptions import GeometryParseError

from .distance import distance_to_segment_km, haversine_km, haversine_m
from .service_area import is_valid_lon_lat
from .types import CoordinateOrder, GeoPoint, Polyline, PolylineSource

logger = logging.getLogger(__name__)

RawGeometry = str | Sequence[Sequence[Any]] | None


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _resolve_pair(first: float, second: float, order: CoordinateOrder) -> tuple[GeoPoint, bool]:
    """Turn a raw pair into a GeoPoint; the flag is True when AUTO had to guess."""
    if order is CoordinateOrder.LON_LAT:
        return GeoPoint(lon=first, lat=second), False
    if order is CoordinateOrder.LAT_LON:
        return GeoPoint(lon=second, lat=first), False

    # A magnitude above 90 can only be a longitude
    if -90.0 <= first <= 90.0 and abs(second) > 90.0:
        return GeoPoint(lon=second, lat=first), False
    if abs(first) > 90.0 and -90.0 <= second <= 90.0:
        return GeoPoint(lon=first, lat=second), False
    return GeoPoint(lon=first, lat=second), True


def _reject(message: str, strict: bool, **details: Any) -> Polyline:
    if strict:
        raise GeometryParseError(message, details)
    logger.warning(f"{message}; treating route geometry as unavailable")
    return Polyline.empty()


def parse_polyline(
    raw: RawGeometry,
    order: CoordinateOrder = CoordinateOrder.AUTO,
    strict: bool = False,
) -> Polyline:
    """Parse stored route geometry into a Polyline of (lon, lat) points.

    Args:
        raw: JSON string or sequence of coordinate pairs; None means no geometry
        order: Component order declared by the producer. AUTO infers it per
            vertex and flags the result when any vertex is ambiguous.
        strict: Raise GeometryParseError instead of degrading

    Returns:
        Polyline in travel order; empty when the geometry is missing or unusable
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return Polyline.empty()

    nodes: Any = raw
    if isinstance(raw, str):
        try:
            nodes = json.loads(raw)
        except json.JSONDecodeError as e:
            return _reject(f"Route geometry is not valid JSON: {e}", strict, length=len(raw))

    if not isinstance(nodes, list | tuple):
        return _reject(
            f"Route geometry root must be an array, got {type(nodes).__name__}",
            strict,
        )

    points: list[GeoPoint] = []
    ambiguous = False
    skipped = 0

    for index, node in enumerate(nodes):
        if (
            not isinstance(node, list | tuple)
            or len(node) < 2
            or not (_is_number(node[0]) and _is_number(node[1]))
        ):
            if strict:
                raise GeometryParseError(
                    f"Invalid coordinate node at index {index}", {"index": index}
                )
            skipped += 1
            continue

        point, guessed = _resolve_pair(float(node[0]), float(node[1]), order)
        if not is_valid_lon_lat(point.lon, point.lat):
            if strict:
                raise GeometryParseError(
                    f"Coordinate at index {index} is out of range: {list(node[:2])}",
                    {"index": index},
                )
            skipped += 1
            continue

        if guessed and not ambiguous:
            logger.warning(
                f"Ambiguous coordinate order at vertex {index} ({node[0]}, {node[1]}); "
                "assuming (lon, lat)"
            )
        ambiguous = ambiguous or guessed
        points.append(point)

    if skipped:
        logger.warning(f"Skipped {skipped} invalid coordinate nodes out of {len(nodes)}")
    if not points:
        logger.warning("Parsed route geometry is empty")

    return Polyline(
        points=tuple(points),
        source=PolylineSource.STORED,
        order=order,
        orientation_ambiguous=ambiguous,
    )


def decode_encoded_polyline(encoded: str | None, precision: int = 5) -> Polyline:
    """Decode a Google/OSRM encoded polyline string.

    Encoded polylines are (lat, lon) by definition, so no inference happens.
    """
    if not encoded:
        return Polyline.empty()

    try:
        coords = polyline_codec.decode(encoded, precision)
    except (ValueError, IndexError, TypeError) as e:
        logger.warning(f"Failed to decode encoded polyline: {e}")
        return Polyline.empty()

    points = tuple(
        GeoPoint(lon=lon, lat=lat) for lat, lon in coords if is_valid_lon_lat(lon, lat)
    )
    return Polyline(points=points, source=PolylineSource.STORED, order=CoordinateOrder.LAT_LON)


def min_distance_to_polyline_m(point: GeoPoint, route: Polyline) -> float:
    """Minimum distance in meters from a point to any segment of the route.

    Returns +inf when the route has fewer than two points.
    """
    if not route.has_segments:
        return math.inf

    return min(
        distance_to_segment_km(point, start, end) * 1000.0 for start, end in pairwise(route)
    )


def nearest_vertex_index(point: GeoPoint, route: Polyline) -> int:
    """Index of the route vertex closest to the point, or -1 for an empty route.

    Vertex-based rather than segment-based so that indices grow monotonically
    along the route, which is what order comparisons rely on.
    """
    nearest_index = -1
    min_distance = math.inf

    for index, vertex in enumerate(route):
        distance = haversine_km(point, vertex)
        if distance < min_distance:
            min_distance = distance
            nearest_index = index

    return nearest_index


def nearest_segment_index(point: GeoPoint, route: Polyline) -> int:
    """Index of the first vertex of the closest segment, or -1 without segments."""
    nearest_index = -1
    min_distance = math.inf

    for index, (start, end) in enumerate(pairwise(route)):
        distance = distance_to_segment_km(point, start, end)
        if distance < min_distance:
            min_distance = distance
            nearest_index = index

    return nearest_index


def approx_distance_along_polyline_m(point: GeoPoint, route: Polyline) -> float:
    """Approximate distance in meters traveled from the route start to the point.

    Sums full segment lengths up to the segment nearest the point, then adds
    the straight distance from that segment's start to the point (not the
    exact projection). Good enough to break ties between close vertex indices.
    """
    segment_index = nearest_segment_index(point, route)
    if segment_index < 0:
        return 0.0

    points = route.points
    along_m = sum(haversine_m(points[i], points[i + 1]) for i in range(segment_index))
    return along_m + haversine_m(points[segment_index], point)


def polyline_length_m(route: Polyline) -> float:
    """Total Haversine length of the route in meters."""
    return sum(haversine_m(start, end) for start, end in pairwise(route))
