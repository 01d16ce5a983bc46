from .config import DEFAULT_MATCH_CONFIG, MatchConfig
from .records import RideRecord, SearchRequest
from .route_matching_engine import MatchResult, MatchTier, RouteMatchingEngine, RouteMatchQuery
from .route_order import OrderCheck, OrderReason, RouteOrderValidator
from .search import RideMatch, RouteSearchService

__all__ = [
    "DEFAULT_MATCH_CONFIG",
    "MatchConfig",
    "MatchResult",
    "MatchTier",
    "OrderCheck",
    "OrderReason",
    "RideMatch",
    "RideRecord",
    "RouteMatchQuery",
    "RouteMatchingEngine",
    "RouteOrderValidator",
    "RouteSearchService",
    "SearchRequest",
]
