"""Immutable thresholds for route matching.

MatchConfig is passed explicitly into every matching call; nothing in the
matching core reads process-wide settings.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ridepool.geo.service_area import ServiceArea


class MatchConfig(BaseModel):
    """Route matching thresholds and leniency rules."""

    model_config = ConfigDict(frozen=True)

    max_distance_m: float = Field(
        default=50_000.0,
        gt=0.0,
        description="Maximum distance from a passenger endpoint to the driver's route",
    )
    lenient_multiplier: float = Field(
        default=1.5,
        ge=1.0,
        description="Threshold multiplier applied when either endpoint is almost on the route",
    )
    lenient_trigger_distance_m: float = Field(
        default=1_000.0,
        ge=0.0,
        description="Endpoint distance at or below which the lenient threshold kicks in",
    )
    close_index_window: int = Field(
        default=5,
        ge=0,
        description="Index gap at or below which ordering uses distance along the route",
    )
    order_tolerance_m: float = Field(default=500.0, ge=0.0)
    reverse_segment_fraction_limit: float = Field(default=0.2, ge=0.0, le=1.0)
    reverse_segment_absolute_limit_m: float = Field(default=50_000.0, ge=0.0)
    synthetic_waypoint_count: int = Field(
        default=5,
        ge=0,
        description="Segments in a synthetic polyline; 0 disables the synthetic tier",
    )
    coordinate_fallback_margin_m: float = Field(
        default=30_000.0,
        ge=0.0,
        description="Maximum detour slack accepted by the raw coordinate tier",
    )
    coordinate_fallback_on_failure: bool = Field(
        default=False,
        description="Also run the coordinate tier after the polyline tiers reject",
    )
    orientation_suspect_distance_m: float = Field(
        default=1_000_000.0,
        gt=0.0,
        description="Endpoint distance beyond which swapped lon/lat is suspected",
    )
    service_area: ServiceArea = Field(default_factory=ServiceArea)

    def with_overrides(self, **overrides: Any) -> "MatchConfig":
        """Return a validated copy with some fields replaced."""
        return MatchConfig.model_validate({**self.model_dump(), **overrides})

    def lenient_threshold_m(self, max_distance_m: float | None = None) -> float:
        base = self.max_distance_m if max_distance_m is None else max_distance_m
        return base * self.lenient_multiplier


DEFAULT_MATCH_CONFIG = MatchConfig()
