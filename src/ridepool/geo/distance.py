"""Centralized great-circle calculations.

This module provides Haversine distances, point-to-segment distances on a
locally flattened plane, and spherical linear interpolation along great
circles. All functions are pure; range validation is the caller's job (see
geo.service_area), invalid input only propagates NaN.
"""

from math import asin, atan2, cos, degrees, radians, sin, sqrt

from .types import GeoPoint

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_M = 6_371_000

# Meters per degree of latitude, used for the local equirectangular projection
METERS_PER_DEGREE = 111_320.0

# Segments shorter than this are treated as a single point
_MIN_SEGMENT_KM = 0.001

# Below this central angle two points are considered coincident for slerp
_SLERP_EPSILON_RAD = 1e-12


def haversine_distance_m(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate the great-circle distance between two points in meters.

    Args:
        lat1: Latitude of first point in degrees
        lon1: Longitude of first point in degrees
        lat2: Latitude of second point in degrees
        lon2: Longitude of second point in degrees

    Returns:
        Distance between the two points in meters
    """
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_M * c


def haversine_distance_km(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate the great-circle distance between two points in kilometers.

    Convenience wrapper around haversine_distance_m for route-scale checks.
    """
    return haversine_distance_m(lat1, lon1, lat2, lon2) / 1000.0


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in kilometers between two (lon, lat) points."""
    return haversine_distance_km(a.lat, a.lon, b.lat, b.lon)


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters between two (lon, lat) points."""
    return haversine_distance_m(a.lat, a.lon, b.lat, b.lon)


def distance_to_segment_km(point: GeoPoint, seg_start: GeoPoint, seg_end: GeoPoint) -> float:
    """Distance in kilometers from a point to the closest point of a segment.

    The projection parameter is computed on an equirectangular plane centered
    on the segment (longitude scaled by cos of the midpoint latitude) and
    clamped to [0, 1]. The result is the Haversine distance to the clamped
    closest point, never more than the distance to either endpoint.

    Args:
        point: The point to measure from
        seg_start: First vertex of the segment
        seg_end: Second vertex of the segment

    Returns:
        Distance in kilometers
    """
    dist_to_start = haversine_km(point, seg_start)
    dist_to_end = haversine_km(point, seg_end)

    if haversine_km(seg_start, seg_end) < _MIN_SEGMENT_KM:
        return min(dist_to_start, dist_to_end)

    lat_to_m = METERS_PER_DEGREE
    lon_to_m = METERS_PER_DEGREE * cos(radians((seg_start.lat + seg_end.lat) / 2.0))

    seg_dx = (seg_end.lon - seg_start.lon) * lon_to_m
    seg_dy = (seg_end.lat - seg_start.lat) * lat_to_m
    pt_dx = (point.lon - seg_start.lon) * lon_to_m
    pt_dy = (point.lat - seg_start.lat) * lat_to_m

    length_sq = seg_dx * seg_dx + seg_dy * seg_dy
    if length_sq <= 0.0:
        return min(dist_to_start, dist_to_end)

    t = max(0.0, min(1.0, (seg_dx * pt_dx + seg_dy * pt_dy) / length_sq))
    closest = GeoPoint(
        lon=seg_start.lon + t * (seg_end.lon - seg_start.lon),
        lat=seg_start.lat + t * (seg_end.lat - seg_start.lat),
    )

    # The planar projection can disagree with Haversine by a hair near the ends
    return min(haversine_km(point, closest), dist_to_start, dist_to_end)


def central_angle_rad(a: GeoPoint, b: GeoPoint) -> float:
    """Angular separation of two points on the unit sphere, in radians."""
    lat1, lon1, lat2, lon2 = map(radians, [a.lat, a.lon, b.lat, b.lon])
    h = sin((lat2 - lat1) / 2) ** 2 + cos(lat1) * cos(lat2) * sin((lon2 - lon1) / 2) ** 2
    return 2 * asin(min(1.0, sqrt(h)))


def slerp(a: GeoPoint, b: GeoPoint, fraction: float) -> GeoPoint:
    """Interpolate along the great circle from a to b.

    Args:
        a: Start point
        b: End point
        fraction: 0.0 returns a, 1.0 returns b

    Returns:
        The interpolated (lon, lat) point
    """
    d = central_angle_rad(a, b)
    if d < _SLERP_EPSILON_RAD:
        return a

    lat1, lon1, lat2, lon2 = map(radians, [a.lat, a.lon, b.lat, b.lon])
    sin_d = sin(d)
    wa = sin((1.0 - fraction) * d) / sin_d
    wb = sin(fraction * d) / sin_d

    x = wa * cos(lat1) * cos(lon1) + wb * cos(lat2) * cos(lon2)
    y = wa * cos(lat1) * sin(lon1) + wb * cos(lat2) * sin(lon2)
    z = wa * sin(lat1) + wb * sin(lat2)

    lat = atan2(z, sqrt(x * x + y * y))
    lon = atan2(y, x)
    return GeoPoint(lon=degrees(lon), lat=degrees(lat))
