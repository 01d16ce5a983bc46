from .exceptions import (
    ConfigurationError,
    GeometryParseError,
    InvalidCoordinateError,
    PermanentError,
    RoutePoolError,
    ValidationError,
)

__all__ = [
    "RoutePoolError",
    "PermanentError",
    "ValidationError",
    "InvalidCoordinateError",
    "GeometryParseError",
    "ConfigurationError",
]
