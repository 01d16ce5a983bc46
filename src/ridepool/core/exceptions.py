"""Standardized exception hierarchy for the route matching core."""

from typing import Any


class RoutePoolError(Exception):
    """Base exception for all route matching errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class PermanentError(RoutePoolError):
    """Errors that will not succeed on retry."""

    pass


class ValidationError(PermanentError):
    """Invalid input or data format."""

    pass


class InvalidCoordinateError(ValidationError):
    """Coordinate outside the valid lon/lat range or the configured service area."""

    pass


class GeometryParseError(ValidationError):
    """Stored route geometry could not be parsed (strict parsing only)."""

    pass


class ConfigurationError(PermanentError):
    """Missing or invalid configuration."""

    pass
