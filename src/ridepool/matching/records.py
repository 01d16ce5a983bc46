"""Inputs the matching core consumes from the ride store and the search API."""

from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from ridepool.geo.types import CoordinateOrder, GeoPoint


class RideRecord(BaseModel):
    """A driver's posted ride as exposed by the ride store."""

    ride_id: str
    source_coordinate: GeoPoint | None = None
    destination_coordinate: GeoPoint | None = None
    # JSON string or decoded list of 2-element arrays; validated at parse time
    route_geometry: str | list[Any] | None = None
    encoded_polyline: str | None = None
    geometry_order: CoordinateOrder = Field(
        default=CoordinateOrder.AUTO,
        description="Component order declared by the router that produced route_geometry",
    )


class SearchRequest(BaseModel):
    """A passenger search; coordinates are optional and required together."""

    search_id: str = Field(default_factory=lambda: str(uuid4()))
    source_coordinate: GeoPoint | None = None
    destination_coordinate: GeoPoint | None = None

    @property
    def has_coordinates(self) -> bool:
        return self.source_coordinate is not None and self.destination_coordinate is not None
