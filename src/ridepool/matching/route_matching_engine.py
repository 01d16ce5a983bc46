"""Route matching engine: does a passenger trip lie along a driver's route?

Three tiers are tried per candidate ride, the first that is available and
accepts wins:

1. STORED_GEOMETRY: the driver's road-following polyline.
2. SYNTHETIC_POLYLINE: a great-circle polyline between the driver's endpoints,
   used when stored geometry is missing or rejects the passenger.
3. COORDINATE_FALLBACK: a triangle-inequality detour check on the raw
   endpoints. Only valid for near-straight routes; kept as a last-resort
   coarse filter.

The engine holds no state between calls and performs no I/O, so one instance
can evaluate many candidate rides concurrently.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum

from ridepool.geo.distance import haversine_m
from ridepool.geo.polyline import min_distance_to_polyline_m, nearest_vertex_index
from ridepool.geo.service_area import validate_point
from ridepool.geo.synthetic import build_synthetic_polyline
from ridepool.geo.types import GeoPoint, Polyline
from ridepool.match_logging import log_context

from .config import DEFAULT_MATCH_CONFIG, MatchConfig
from .route_order import OrderReason, RouteOrderValidator

logger = logging.getLogger(__name__)


class MatchTier(str, Enum):
    """Which matching strategy produced a verdict."""

    STORED_GEOMETRY = "stored_geometry"
    SYNTHETIC_POLYLINE = "synthetic_polyline"
    COORDINATE_FALLBACK = "coordinate_fallback"
    NONE = "none"


@dataclass(frozen=True)
class RouteMatchQuery:
    """One passenger trip checked against one driver ride."""

    driver_polyline: Polyline
    passenger_source: GeoPoint
    passenger_destination: GeoPoint
    max_distance_m: float
    synthetic_waypoint_count: int
    driver_source: GeoPoint | None = None
    driver_destination: GeoPoint | None = None

    @classmethod
    def from_config(
        cls,
        config: MatchConfig,
        driver_polyline: Polyline,
        passenger_source: GeoPoint,
        passenger_destination: GeoPoint,
        driver_source: GeoPoint | None = None,
        driver_destination: GeoPoint | None = None,
    ) -> "RouteMatchQuery":
        return cls(
            driver_polyline=driver_polyline,
            passenger_source=passenger_source,
            passenger_destination=passenger_destination,
            max_distance_m=config.max_distance_m,
            synthetic_waypoint_count=config.synthetic_waypoint_count,
            driver_source=driver_source,
            driver_destination=driver_destination,
        )

    @property
    def has_driver_endpoints(self) -> bool:
        return self.driver_source is not None and self.driver_destination is not None


@dataclass(frozen=True)
class MatchResult:
    """Verdict for one query plus the distances it was based on."""

    is_match: bool
    source_distance_m: float
    destination_distance_m: float
    source_index: int
    destination_index: int
    tier: MatchTier = MatchTier.NONE
    threshold_m: float | None = None
    order_reason: OrderReason | None = None
    orientation_suspect: bool = False
    fallback_slack_m: float | None = None
    evaluated_polyline: Polyline | None = None

    @classmethod
    def no_match(cls, tier: MatchTier = MatchTier.NONE) -> "MatchResult":
        return cls(
            is_match=False,
            source_distance_m=math.inf,
            destination_distance_m=math.inf,
            source_index=-1,
            destination_index=-1,
            tier=tier,
        )


class RouteMatchingEngine:
    """Runs the three-tier matching policy for a single candidate ride."""

    def __init__(self, config: MatchConfig | None = None):
        self.config = config or DEFAULT_MATCH_CONFIG
        self._order_validator = RouteOrderValidator(self.config)

    def evaluate(self, query: RouteMatchQuery) -> MatchResult:
        """Evaluate a query through the tiers.

        Raises:
            InvalidCoordinateError: If a passenger or driver endpoint is out
                of range or outside the configured service area
        """
        self._validate_endpoints(query)

        stored_result: MatchResult | None = None
        if query.driver_polyline.has_segments:
            stored_result = self.match_polyline(
                query.driver_polyline,
                query.passenger_source,
                query.passenger_destination,
                query.max_distance_m,
                MatchTier.STORED_GEOMETRY,
            )
            if stored_result.is_match:
                return stored_result
            logger.debug("Stored geometry rejected passenger, trying synthetic polyline")
        else:
            logger.debug("No usable stored geometry, trying synthetic polyline")

        synthetic_result: MatchResult | None = None
        driver_source, driver_destination = query.driver_source, query.driver_destination
        if (
            driver_source is not None
            and driver_destination is not None
            and query.synthetic_waypoint_count >= 1
        ):
            synthetic = build_synthetic_polyline(
                driver_source, driver_destination, query.synthetic_waypoint_count
            )
            synthetic_result = self.match_polyline(
                synthetic,
                query.passenger_source,
                query.passenger_destination,
                query.max_distance_m,
                MatchTier.SYNTHETIC_POLYLINE,
            )
            if synthetic_result.is_match:
                return synthetic_result

        polyline_tiers_ran = stored_result is not None or synthetic_result is not None
        if not polyline_tiers_ran or self.config.coordinate_fallback_on_failure:
            fallback_result = self.match_coordinates(query)
            if fallback_result is not None and (
                fallback_result.is_match or not polyline_tiers_ran
            ):
                return fallback_result

        # Report the authoritative geometry's verdict when both polyline tiers rejected
        return stored_result or synthetic_result or MatchResult.no_match()

    def match_polyline(
        self,
        route: Polyline,
        passenger_source: GeoPoint,
        passenger_destination: GeoPoint,
        max_distance_m: float | None = None,
        tier: MatchTier = MatchTier.STORED_GEOMETRY,
    ) -> MatchResult:
        """Distance and ordering checks of one passenger trip against one polyline.

        Log records emitted while checking carry the tier as a context field.
        """
        with log_context(tier=tier.value):
            return self._check_polyline(
                route, passenger_source, passenger_destination, max_distance_m, tier
            )

    def match_coordinates(self, query: RouteMatchQuery) -> MatchResult | None:
        """Triangle-inequality detour check; None when driver endpoints are unknown.

        slack = |DS->PS| + |PS->PD| + |PD->DD| - |DS->DD|, accepted below the
        configured margin. Deliberately weak: it only holds for near-straight
        roads.
        """
        with log_context(tier=MatchTier.COORDINATE_FALLBACK.value):
            return self._check_coordinates(query)

    def _check_polyline(
        self,
        route: Polyline,
        passenger_source: GeoPoint,
        passenger_destination: GeoPoint,
        max_distance_m: float | None,
        tier: MatchTier,
    ) -> MatchResult:
        base_threshold = self.config.max_distance_m if max_distance_m is None else max_distance_m

        source_distance = min_distance_to_polyline_m(passenger_source, route)
        destination_distance = min_distance_to_polyline_m(passenger_destination, route)

        threshold = base_threshold
        if (
            source_distance <= self.config.lenient_trigger_distance_m
            or destination_distance <= self.config.lenient_trigger_distance_m
        ):
            # One endpoint is practically on the route, relax both
            threshold = self.config.lenient_threshold_m(base_threshold)

        near_route = source_distance <= threshold and destination_distance <= threshold
        suspect = self._orientation_suspect(
            route, source_distance, destination_distance, near_route
        )

        if not near_route:
            logger.debug(
                f"[{tier.value}] passenger off route: source={source_distance:.1f}m "
                f"dest={destination_distance:.1f}m threshold={threshold:.1f}m"
            )
            return MatchResult(
                is_match=False,
                source_distance_m=source_distance,
                destination_distance_m=destination_distance,
                source_index=-1,
                destination_index=-1,
                tier=tier,
                threshold_m=threshold,
                orientation_suspect=suspect,
                evaluated_polyline=route,
            )

        source_index = nearest_vertex_index(passenger_source, route)
        destination_index = nearest_vertex_index(passenger_destination, route)
        order = self._order_validator.check(
            passenger_source, passenger_destination, source_index, destination_index, route
        )

        logger.debug(
            f"[{tier.value}] source={source_distance:.1f}m@{source_index} "
            f"dest={destination_distance:.1f}m@{destination_index} order={order.reason.value}"
        )
        return MatchResult(
            is_match=order.accepted,
            source_distance_m=source_distance,
            destination_distance_m=destination_distance,
            source_index=source_index,
            destination_index=destination_index,
            tier=tier,
            threshold_m=threshold,
            order_reason=order.reason,
            orientation_suspect=suspect,
            evaluated_polyline=route,
        )

    def _check_coordinates(self, query: RouteMatchQuery) -> MatchResult | None:
        driver_source, driver_destination = query.driver_source, query.driver_destination
        if driver_source is None or driver_destination is None:
            return None

        to_pickup = haversine_m(driver_source, query.passenger_source)
        passenger_leg = haversine_m(query.passenger_source, query.passenger_destination)
        from_dropoff = haversine_m(query.passenger_destination, driver_destination)
        direct = haversine_m(driver_source, driver_destination)

        slack = to_pickup + passenger_leg + from_dropoff - direct
        is_match = slack < self.config.coordinate_fallback_margin_m

        logger.debug(
            f"[{MatchTier.COORDINATE_FALLBACK.value}] slack={slack:.1f}m "
            f"margin={self.config.coordinate_fallback_margin_m:.1f}m match={is_match}"
        )
        return MatchResult(
            is_match=is_match,
            source_distance_m=to_pickup,
            destination_distance_m=from_dropoff,
            source_index=-1,
            destination_index=-1,
            tier=MatchTier.COORDINATE_FALLBACK,
            threshold_m=self.config.coordinate_fallback_margin_m,
            fallback_slack_m=slack,
        )

    def _validate_endpoints(self, query: RouteMatchQuery) -> None:
        area = self.config.service_area
        validate_point(query.passenger_source, area, "passenger source")
        validate_point(query.passenger_destination, area, "passenger destination")
        if query.driver_source is not None:
            validate_point(query.driver_source, area, "driver source")
        if query.driver_destination is not None:
            validate_point(query.driver_destination, area, "driver destination")

    def _orientation_suspect(
        self,
        route: Polyline,
        source_distance: float,
        destination_distance: float,
        near_route: bool,
    ) -> bool:
        limit = self.config.orientation_suspect_distance_m
        far = (math.isfinite(source_distance) and source_distance > limit) or (
            math.isfinite(destination_distance) and destination_distance > limit
        )
        if far:
            logger.warning(
                f"Possible lon/lat swap: passenger endpoints are {source_distance / 1000:.1f}km "
                f"and {destination_distance / 1000:.1f}km from a route starting at {route.first}"
            )
            return True
        if route.orientation_ambiguous and not near_route:
            logger.warning(
                "Passenger is off a route whose coordinate order had to be guessed; "
                "the geometry may be stored as (lat, lon)"
            )
            return True
        return False
