from typing import Literal

from pydantic import Field, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ridepool.core.exceptions import ConfigurationError
from ridepool.geo.service_area import ServiceArea
from ridepool.match_logging import setup_logging
from ridepool.matching.config import MatchConfig
from ridepool.matching.search import RouteSearchService


class RouteMatchingSettings(BaseSettings):
    max_distance_m: float = Field(
        default=50_000.0,
        gt=0.0,
        le=500_000.0,
        description="Maximum distance in meters from a passenger endpoint to the driver's route",
    )
    lenient_multiplier: float = Field(default=1.5, ge=1.0, le=5.0)
    lenient_trigger_distance_m: float = Field(default=1_000.0, ge=0.0, le=50_000.0)
    close_index_window: int = Field(default=5, ge=0, le=100)
    order_tolerance_m: float = Field(default=500.0, ge=0.0, le=50_000.0)
    reverse_segment_fraction_limit: float = Field(default=0.2, ge=0.0, le=1.0)
    reverse_segment_absolute_limit_m: float = Field(default=50_000.0, ge=0.0)
    synthetic_waypoint_count: int = Field(
        default=5,
        ge=0,
        le=100,
        description="Segments in a synthetic great-circle polyline. 0 disables the tier.",
    )
    coordinate_fallback_margin_m: float = Field(default=30_000.0, ge=0.0)
    coordinate_fallback_on_failure: bool = Field(
        default=False,
        description="Run the raw coordinate check even after a polyline tier rejected",
    )
    orientation_suspect_distance_m: float = Field(default=1_000_000.0, gt=0.0)

    model_config = SettingsConfigDict(env_prefix="ROUTE_MATCHING_")

    def to_match_config(self, service_area: ServiceArea | None = None) -> MatchConfig:
        return MatchConfig(
            **self.model_dump(),
            service_area=service_area or ServiceArea(),
        )


class ServiceAreaSettings(BaseSettings):
    min_lon: float = Field(default=68.0, ge=-180.0, le=180.0)
    max_lon: float = Field(default=97.0, ge=-180.0, le=180.0)
    min_lat: float = Field(default=6.0, ge=-90.0, le=90.0)
    max_lat: float = Field(default=37.0, ge=-90.0, le=90.0)

    model_config = SettingsConfigDict(env_prefix="SERVICE_AREA_")

    @model_validator(mode="after")
    def validate_bounds(self) -> "ServiceAreaSettings":
        if self.min_lon >= self.max_lon:
            raise ValueError("SERVICE_AREA_MIN_LON must be below SERVICE_AREA_MAX_LON")
        if self.min_lat >= self.max_lat:
            raise ValueError("SERVICE_AREA_MIN_LAT must be below SERVICE_AREA_MAX_LAT")
        return self

    def to_service_area(self) -> ServiceArea:
        return ServiceArea(**self.model_dump())


class LoggingSettings(BaseSettings):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["text", "json"] = "text"
    environment: str = "development"
    mask_locations: bool = Field(
        default=True,
        description="Round coordinates in log messages to two decimals",
    )

    model_config = SettingsConfigDict(env_prefix="LOG_")


class SearchSettings(BaseSettings):
    max_workers: int | None = Field(
        default=None,
        ge=1,
        le=64,
        description="Thread pool size for candidate rides; None uses the executor default",
    )

    model_config = SettingsConfigDict(env_prefix="SEARCH_")


class Settings(BaseSettings):
    route_matching: RouteMatchingSettings = Field(default_factory=RouteMatchingSettings)
    service_area: ServiceAreaSettings = Field(default_factory=ServiceAreaSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
    )


def get_settings() -> Settings:
    """Load and validate settings from environment variables.

    Raises:
        ConfigurationError: If any variable is missing, malformed or out of bounds
    """
    try:
        return Settings()
    except PydanticValidationError as e:
        fields = [".".join(str(part) for part in error["loc"]) for error in e.errors()]
        raise ConfigurationError(
            f"Invalid route matching settings: {', '.join(fields)}",
            {"errors": e.errors(include_url=False)},
        ) from e


def build_match_config(settings: Settings) -> MatchConfig:
    """Freeze the loaded settings into the config passed to the matching core."""
    return settings.route_matching.to_match_config(settings.service_area.to_service_area())


def configure_logging(settings: Settings) -> None:
    """Install the root log handler described by the LOG_* settings."""
    setup_logging(
        level=settings.logging.level,
        json_output=settings.logging.format == "json",
        environment=settings.logging.environment,
        mask_locations=settings.logging.mask_locations,
    )


def build_search_service(settings: Settings) -> RouteSearchService:
    return RouteSearchService(
        config=build_match_config(settings),
        max_workers=settings.search.max_workers,
    )
