"""Evaluates a passenger search against candidate driver rides."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from ridepool.core.exceptions import InvalidCoordinateError
from ridepool.geo.polyline import decode_encoded_polyline, parse_polyline
from ridepool.geo.service_area import validate_point
from ridepool.geo.types import GeoPoint, Polyline
from ridepool.match_logging import log_search_context

from .config import DEFAULT_MATCH_CONFIG, MatchConfig
from .records import RideRecord, SearchRequest
from .route_matching_engine import MatchResult, RouteMatchingEngine, RouteMatchQuery

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RideMatch:
    ride_id: str
    result: MatchResult

    @property
    def is_match(self) -> bool:
        return self.result.is_match


class RouteSearchService:
    """Builds match queries from ride records and evaluates them in parallel.

    Every evaluation is independent, so rides are fanned out to a thread pool
    with no coordination. Filtering and sorting the results is left to the
    caller.
    """

    def __init__(
        self,
        config: MatchConfig | None = None,
        max_workers: int | None = None,
    ):
        self.config = config or DEFAULT_MATCH_CONFIG
        self.max_workers = max_workers
        self._engine = RouteMatchingEngine(self.config)

    def driver_polyline(self, ride: RideRecord) -> Polyline:
        """Stored geometry first, then the encoded polyline; empty when neither parses."""
        route = parse_polyline(ride.route_geometry, ride.geometry_order)
        if route.has_segments:
            return route
        if ride.encoded_polyline:
            decoded = decode_encoded_polyline(ride.encoded_polyline)
            if decoded.has_segments:
                return decoded
        return route

    def build_query(self, ride: RideRecord, request: SearchRequest) -> RouteMatchQuery:
        if request.source_coordinate is None or request.destination_coordinate is None:
            raise ValueError("Route matching requires both passenger coordinates")

        return RouteMatchQuery.from_config(
            self.config,
            driver_polyline=self.driver_polyline(ride),
            passenger_source=request.source_coordinate,
            passenger_destination=request.destination_coordinate,
            driver_source=self._checked_endpoint(ride.source_coordinate, "driver source"),
            driver_destination=self._checked_endpoint(
                ride.destination_coordinate, "driver destination"
            ),
        )

    def evaluate_ride(self, ride: RideRecord, request: SearchRequest) -> RideMatch:
        """Evaluate one ride against the passenger trip."""
        with log_search_context(request.search_id, ride_id=ride.ride_id):
            query = self.build_query(ride, request)
            result = self._engine.evaluate(query)
            logger.debug(f"Ride evaluated: match={result.is_match} tier={result.tier.value}")
            return RideMatch(ride_id=ride.ride_id, result=result)

    def evaluate_rides(
        self, request: SearchRequest, rides: list[RideRecord]
    ) -> list[RideMatch] | None:
        """Evaluate every candidate ride for one search.

        Returns:
            One RideMatch per ride in input order, or None when the request has
            no coordinates and route matching is bypassed

        Raises:
            InvalidCoordinateError: If the passenger coordinates are invalid
        """
        if not request.has_coordinates:
            logger.info("Search has no coordinates, route matching bypassed")
            return None

        self._validate_passenger(request)
        if not rides:
            return []

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            matches = list(executor.map(lambda ride: self.evaluate_ride(ride, request), rides))

        logger.info(
            f"Route matching evaluated {len(matches)} rides, "
            f"{sum(1 for m in matches if m.is_match)} matched"
        )
        return matches

    def matching_ride_ids(self, request: SearchRequest, rides: list[RideRecord]) -> list[str]:
        matches = self.evaluate_rides(request, rides)
        if matches is None:
            return []
        return [match.ride_id for match in matches if match.is_match]

    def _validate_passenger(self, request: SearchRequest) -> None:
        area = self.config.service_area
        if request.source_coordinate is not None:
            validate_point(request.source_coordinate, area, "passenger source")
        if request.destination_coordinate is not None:
            validate_point(request.destination_coordinate, area, "passenger destination")

    def _checked_endpoint(self, point: GeoPoint | None, label: str) -> GeoPoint | None:
        """Drop an invalid driver endpoint so the ride degrades to the tiers it can still use."""
        if point is None:
            return None
        try:
            return validate_point(point, self.config.service_area, label)
        except InvalidCoordinateError as e:
            logger.warning(f"Ignoring {label} of ride: {e.message}")
            return None
