import pytest

from ridepool.geo.types import GeoPoint, Polyline
from ridepool.matching.config import MatchConfig
from ridepool.matching.route_matching_engine import RouteMatchingEngine
from tests.landmarks import HYDERABAD, NALGONDA, VIJAYAWADA


@pytest.fixture
def match_config() -> MatchConfig:
    """Default matching thresholds."""
    return MatchConfig()


@pytest.fixture
def engine(match_config: MatchConfig) -> RouteMatchingEngine:
    return RouteMatchingEngine(match_config)


@pytest.fixture
def hyderabad_vijayawada() -> Polyline:
    """Two-point driver route from Hyderabad to Vijayawada."""
    return Polyline(points=(HYDERABAD, VIJAYAWADA))


@pytest.fixture
def hyderabad_nalgonda_vijayawada() -> Polyline:
    """Driver route with an intermediate vertex near Nalgonda."""
    return Polyline(points=(HYDERABAD, NALGONDA, VIJAYAWADA))


@pytest.fixture
def straight_route() -> Polyline:
    """Twelve collinear vertices 0.1 degrees apart along latitude 17."""
    return Polyline(points=tuple(GeoPoint(lon=78.0 + 0.1 * i, lat=17.0) for i in range(12)))
