from .distance import (
    EARTH_RADIUS_KM,
    EARTH_RADIUS_M,
    distance_to_segment_km,
    haversine_distance_km,
    haversine_distance_m,
    haversine_km,
    haversine_m,
    slerp,
)
from .polyline import (
    approx_distance_along_polyline_m,
    decode_encoded_polyline,
    min_distance_to_polyline_m,
    nearest_vertex_index,
    parse_polyline,
    polyline_length_m,
)
from .service_area import ServiceArea, validate_point
from .synthetic import SyntheticPolylineBuilder, build_synthetic_polyline
from .types import CoordinateOrder, GeoPoint, Polyline, PolylineSource

__all__ = [
    "EARTH_RADIUS_KM",
    "EARTH_RADIUS_M",
    "GeoPoint",
    "CoordinateOrder",
    "Polyline",
    "PolylineSource",
    "ServiceArea",
    "SyntheticPolylineBuilder",
    "approx_distance_along_polyline_m",
    "build_synthetic_polyline",
    "decode_encoded_polyline",
    "distance_to_segment_km",
    "haversine_distance_km",
    "haversine_distance_m",
    "haversine_km",
    "haversine_m",
    "min_distance_to_polyline_m",
    "nearest_vertex_index",
    "parse_polyline",
    "polyline_length_m",
    "slerp",
    "validate_point",
]
