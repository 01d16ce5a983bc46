"""Tests for evaluating a passenger search against candidate rides."""

import json
import logging

import polyline as polyline_codec
import pytest

from ridepool.core.exceptions import InvalidCoordinateError
from ridepool.geo.types import CoordinateOrder, GeoPoint
from ridepool.match_logging import ContextFilter, DefaultCorrelationFilter, JSONFormatter
from ridepool.matching.records import RideRecord, SearchRequest
from ridepool.matching.route_matching_engine import MatchTier
from ridepool.matching.search import RouteSearchService
from tests.landmarks import BENGALURU, CHENNAI, HYDERABAD, VIJAYAWADA


def route_json(*points: GeoPoint) -> str:
    return json.dumps([[p.lon, p.lat] for p in points])


@pytest.fixture
def service() -> RouteSearchService:
    return RouteSearchService(max_workers=2)


@pytest.fixture
def request_hyd_vij() -> SearchRequest:
    return SearchRequest(
        search_id="search-001",
        source_coordinate=HYDERABAD,
        destination_coordinate=VIJAYAWADA,
    )


@pytest.fixture
def rides() -> list[RideRecord]:
    return [
        RideRecord(
            ride_id="ride-stored",
            source_coordinate=HYDERABAD,
            destination_coordinate=VIJAYAWADA,
            route_geometry=route_json(HYDERABAD, VIJAYAWADA),
        ),
        RideRecord(
            ride_id="ride-elsewhere",
            route_geometry=route_json(BENGALURU, CHENNAI),
        ),
        RideRecord(
            ride_id="ride-no-geometry",
            source_coordinate=HYDERABAD,
            destination_coordinate=VIJAYAWADA,
        ),
    ]


@pytest.mark.unit
class TestRouteSearchService:
    """Tests for RouteSearchService."""

    def test_evaluate_rides_keeps_input_order(self, service, request_hyd_vij, rides) -> None:
        matches = service.evaluate_rides(request_hyd_vij, rides)

        assert [m.ride_id for m in matches] == ["ride-stored", "ride-elsewhere", "ride-no-geometry"]
        assert [m.is_match for m in matches] == [True, False, True]
        assert matches[0].result.tier == MatchTier.STORED_GEOMETRY
        assert matches[2].result.tier == MatchTier.SYNTHETIC_POLYLINE

    def test_matching_ride_ids(self, service, request_hyd_vij, rides) -> None:
        assert service.matching_ride_ids(request_hyd_vij, rides) == [
            "ride-stored",
            "ride-no-geometry",
        ]

    def test_no_coordinates_bypasses_matching(self, service, rides) -> None:
        """A search without coordinates is not filtered by route."""
        request = SearchRequest(source_coordinate=HYDERABAD)

        assert service.evaluate_rides(request, rides) is None
        assert service.matching_ride_ids(request, rides) == []

    def test_no_rides(self, service, request_hyd_vij) -> None:
        assert service.evaluate_rides(request_hyd_vij, []) == []

    def test_invalid_passenger_raises(self, service, rides) -> None:
        request = SearchRequest(
            source_coordinate=GeoPoint(lon=0.0, lat=0.0),
            destination_coordinate=VIJAYAWADA,
        )
        with pytest.raises(InvalidCoordinateError):
            service.evaluate_rides(request, rides)

    def test_invalid_driver_endpoint_is_dropped(self, service, request_hyd_vij, caplog) -> None:
        """A bad driver endpoint degrades the ride instead of failing the search."""
        ride = RideRecord(
            ride_id="ride-bad-endpoint",
            source_coordinate=GeoPoint(lon=0.0, lat=0.0),
            destination_coordinate=VIJAYAWADA,
            route_geometry=route_json(HYDERABAD, VIJAYAWADA),
        )

        with caplog.at_level(logging.WARNING):
            query = service.build_query(ride, request_hyd_vij)

        assert query.driver_source is None
        assert query.driver_destination == VIJAYAWADA
        assert "Ignoring driver source" in caplog.text
        assert service.evaluate_ride(ride, request_hyd_vij).is_match is True

    def test_build_query_requires_passenger_coordinates(self, service, rides) -> None:
        with pytest.raises(ValueError):
            service.build_query(rides[0], SearchRequest(destination_coordinate=VIJAYAWADA))

    def test_driver_polyline_prefers_stored_geometry(self, service) -> None:
        ride = RideRecord(
            ride_id="ride-both",
            route_geometry=[[78.47, 17.38], [80.64, 16.50]],
            encoded_polyline=polyline_codec.encode([(12.97, 77.59), (13.08, 80.27)]),
        )
        assert service.driver_polyline(ride).first == HYDERABAD

    def test_driver_polyline_falls_back_to_encoded(self, service) -> None:
        ride = RideRecord(
            ride_id="ride-encoded",
            encoded_polyline=polyline_codec.encode([(17.38, 78.47), (16.50, 80.64)]),
        )
        route = service.driver_polyline(ride)

        assert len(route) == 2
        assert route.order == CoordinateOrder.LAT_LON
        assert route[1].lon == pytest.approx(80.64, abs=1e-5)

    def test_declared_geometry_order(self, service) -> None:
        ride = RideRecord(
            ride_id="ride-lat-lon",
            route_geometry="[[17.38, 78.47], [16.50, 80.64]]",
            geometry_order=CoordinateOrder.LAT_LON,
        )
        route = service.driver_polyline(ride)

        assert route.points == (HYDERABAD, VIJAYAWADA)
        assert route.orientation_ambiguous is False

    def test_search_id_generated(self) -> None:
        assert SearchRequest().search_id != SearchRequest().search_id


@pytest.mark.unit
class TestSearchLogging:
    """Tests for the context carried by records logged during a search."""

    @pytest.fixture
    def json_lines(self):
        """JSON lines written by a handler on the package logger."""
        lines: list[str] = []

        class LineCapture(logging.Handler):
            def emit(self, record: logging.LogRecord) -> None:
                lines.append(self.format(record))

        logger = logging.getLogger("ridepool")
        previous_level = logger.level
        handler = LineCapture()
        handler.setFormatter(JSONFormatter())
        handler.addFilter(DefaultCorrelationFilter())
        handler.addFilter(ContextFilter())
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
        yield lines
        logger.removeHandler(handler)
        logger.setLevel(previous_level)

    def test_engine_records_carry_search_ride_and_tier(
        self, service, request_hyd_vij, rides, json_lines
    ) -> None:
        service.evaluate_rides(request_hyd_vij, rides[:1])

        payloads = [json.loads(line) for line in json_lines]
        tiered = [p for p in payloads if "tier" in p]

        assert tiered
        assert all(p["tier"] == "stored_geometry" for p in tiered)
        assert all(p["search_id"] == "search-001" for p in tiered)
        assert all(p["ride_id"] == "ride-stored" for p in tiered)
        assert all(p["correlation_id"] == "search-001" for p in tiered)
