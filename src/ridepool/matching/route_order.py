"""Direction-of-travel check for a passenger along a driver's route."""

import logging
from enum import Enum
from typing import NamedTuple

from ridepool.geo.distance import haversine_m
from ridepool.geo.polyline import approx_distance_along_polyline_m, polyline_length_m
from ridepool.geo.types import GeoPoint, Polyline

from .config import MatchConfig

logger = logging.getLogger(__name__)


class OrderReason(str, Enum):
    """Which rule produced the ordering verdict."""

    SPARSE_GEOMETRY = "sparse_geometry"
    INDEX_ORDER = "index_order"
    DISTANCE_ALONG = "distance_along"
    SHORT_REVERSE = "short_reverse"
    REVERSED = "reversed"


class OrderCheck(NamedTuple):
    accepted: bool
    reason: OrderReason


class RouteOrderValidator:
    """Decides whether the passenger source precedes the destination on the route.

    Rules, in order:
      1. Either vertex index is -1: accept, the geometry is too sparse to judge.
      2. Indices more than close_index_window apart: accept iff source < destination.
      3. Otherwise compare approximate distance along the route, accepting when
         source_along < destination_along + order_tolerance_m.
      4. A rejected pair is still accepted when the passenger's straight-line
         hop is shorter than both reverse_segment_fraction_limit of the route
         length and reverse_segment_absolute_limit_m (a short road backtrack).
    """

    def __init__(self, config: MatchConfig):
        self.config = config

    def check(
        self,
        source: GeoPoint,
        destination: GeoPoint,
        source_index: int,
        destination_index: int,
        route: Polyline,
    ) -> OrderCheck:
        if source_index < 0 or destination_index < 0:
            return OrderCheck(True, OrderReason.SPARSE_GEOMETRY)

        if abs(source_index - destination_index) > self.config.close_index_window:
            if source_index < destination_index:
                return OrderCheck(True, OrderReason.INDEX_ORDER)
            logger.debug(f"Index order reversed: source={source_index} dest={destination_index}")
        else:
            source_along = approx_distance_along_polyline_m(source, route)
            destination_along = approx_distance_along_polyline_m(destination, route)
            if source_along < destination_along + self.config.order_tolerance_m:
                return OrderCheck(True, OrderReason.DISTANCE_ALONG)
            logger.debug(
                f"Distance-along order reversed: source={source_along:.1f}m "
                f"dest={destination_along:.1f}m"
            )

        if self._is_short_reverse(source, destination, route):
            return OrderCheck(True, OrderReason.SHORT_REVERSE)

        return OrderCheck(False, OrderReason.REVERSED)

    def is_same_direction(
        self,
        source: GeoPoint,
        destination: GeoPoint,
        source_index: int,
        destination_index: int,
        route: Polyline,
    ) -> bool:
        return self.check(source, destination, source_index, destination_index, route).accepted

    def _is_short_reverse(self, source: GeoPoint, destination: GeoPoint, route: Polyline) -> bool:
        hop_m = haversine_m(source, destination)
        route_m = polyline_length_m(route)
        allowed = (
            hop_m < route_m * self.config.reverse_segment_fraction_limit
            and hop_m < self.config.reverse_segment_absolute_limit_m
        )
        if allowed:
            logger.debug(
                f"Accepting short reverse hop of {hop_m:.1f}m on a {route_m:.1f}m route"
            )
        return allowed
