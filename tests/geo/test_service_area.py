"""Tests for the service area box and coordinate validation."""

import math

import pytest
from pydantic import ValidationError

from ridepool.core.exceptions import InvalidCoordinateError
from ridepool.geo.service_area import ServiceArea, is_valid_lon_lat, validate_point
from ridepool.geo.types import GeoPoint
from tests.landmarks import HYDERABAD


@pytest.mark.unit
class TestServiceArea:
    """Tests for ServiceArea."""

    def test_default_box_covers_india(self) -> None:
        area = ServiceArea()
        assert area.contains(HYDERABAD)
        assert area.contains(GeoPoint(lon=72.88, lat=19.08))  # Mumbai
        assert not area.contains(GeoPoint(lon=-122.42, lat=37.77))  # San Francisco

    def test_edge_is_inside(self) -> None:
        """Points on the boundary are covered."""
        assert ServiceArea().contains(GeoPoint(lon=68.0, lat=20.0))

    def test_custom_bounds(self) -> None:
        area = ServiceArea(min_lon=-47.0, max_lon=-46.0, min_lat=-24.0, max_lat=-23.0)
        assert area.contains(GeoPoint(lon=-46.63, lat=-23.55))
        assert not area.contains(HYDERABAD)

    def test_inverted_bounds_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ServiceArea(min_lon=90.0, max_lon=80.0)

        with pytest.raises(ValidationError):
            ServiceArea(min_lat=30.0, max_lat=30.0)

    def test_polygon_bounds(self) -> None:
        """The shapely polygon uses (lon, lat) axes."""
        assert ServiceArea().polygon.bounds == (68.0, 6.0, 97.0, 37.0)


@pytest.mark.unit
class TestValidatePoint:
    """Tests for validate_point and is_valid_lon_lat."""

    def test_valid_point_is_returned(self) -> None:
        assert validate_point(HYDERABAD, ServiceArea()) is HYDERABAD

    @pytest.mark.parametrize(
        "point",
        [
            GeoPoint(lon=181.0, lat=10.0),
            GeoPoint(lon=78.0, lat=-91.0),
            GeoPoint(lon=math.nan, lat=17.0),
            GeoPoint(lon=78.0, lat=math.inf),
        ],
    )
    def test_out_of_range(self, point) -> None:
        with pytest.raises(InvalidCoordinateError) as exc_info:
            validate_point(point)

        assert exc_info.value.details["reason"] == "out_of_range"

    def test_null_island_rejected(self) -> None:
        """(0, 0) is an unset placeholder, never a real location."""
        with pytest.raises(InvalidCoordinateError) as exc_info:
            validate_point(GeoPoint(lon=0.0, lat=0.0), label="passenger source")

        assert exc_info.value.details["reason"] == "null_island"
        assert "passenger source" in exc_info.value.message

    def test_outside_service_area(self) -> None:
        with pytest.raises(InvalidCoordinateError) as exc_info:
            validate_point(GeoPoint(lon=-122.42, lat=37.77), ServiceArea())

        assert exc_info.value.details["reason"] == "outside_service_area"

    def test_no_service_area_only_checks_ranges(self) -> None:
        point = GeoPoint(lon=-122.42, lat=37.77)
        assert validate_point(point) == point

    def test_is_valid_lon_lat(self) -> None:
        assert is_valid_lon_lat(180.0, -90.0)
        assert not is_valid_lon_lat(180.5, 0.0)
        assert not is_valid_lon_lat(0.0, math.nan)
