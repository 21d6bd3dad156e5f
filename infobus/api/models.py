"""Pydantic models for Infobus API configuration and responses."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generic, NamedTuple, TypeVar

from pydantic import BaseModel, ConfigDict, field_validator

from infobus.api.errors import ApiError

DEFAULT_TIMEOUT_MS = 10_000

T = TypeVar("T")


class ApiConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str
    api_key: str | None = None
    timeout_ms: int | None = None

    @field_validator("base_url")
    @classmethod
    def base_url_not_empty(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("base_url must not be empty.")
        return v

    @property
    def effective_timeout_ms(self) -> int:
        return self.timeout_ms or DEFAULT_TIMEOUT_MS


# --- Stops, routes, trips ---


class StopInfo(BaseModel):
    stop_id: str
    stop_name: str
    stop_desc: str | None = None
    stop_lat: float
    stop_lon: float
    zone_id: str | None = None
    stop_url: str | None = None
    location_type: int | None = None
    parent_station: str | None = None
    stop_timezone: str | None = None
    wheelchair_boarding: int | None = None
    platform_code: str | None = None


class RouteInfo(BaseModel):
    route_id: str
    agency_id: str | None = None
    route_short_name: str
    route_long_name: str
    route_desc: str | None = None
    route_type: int
    route_url: str | None = None
    route_color: str | None = None
    route_text_color: str | None = None
    route_sort_order: int | None = None
    continuous_pickup: int | None = None
    continuous_drop_off: int | None = None


class NextTrip(BaseModel):
    """One arrival event at a stop. Server order (stop sequence) is kept as-is."""

    trip_id: str
    route_id: str
    route_short_name: str
    route_long_name: str
    trip_headsign: str
    arrival_time: str
    departure_time: str
    stop_sequence: int
    pickup_type: int = 0
    drop_off_type: int = 0
    shape_dist_traveled: float | None = None
    timepoint: int | None = None
    estimated_arrival: str | None = None
    estimated_departure: str | None = None
    delay: int | None = None  # seconds; positive = late
    vehicle_id: str | None = None
    block_id: str | None = None
    wheelchair_accessible: int | None = None
    bikes_allowed: int | None = None
    route_color: str | None = None
    route_text_color: str | None = None


class NextTripsResponse(BaseModel):
    stop_info: StopInfo
    trips: list[NextTrip]
    last_updated: str | None = None


# --- Route geometry (GeoJSON) ---


class LineGeometry(BaseModel):
    # Any GeoJSON geometry is accepted; only LineString is read for coordinates.
    type: str
    coordinates: Any = None


class ShapeProperties(BaseModel):
    shape_id: str
    route_id: str
    route_short_name: str | None = None
    route_long_name: str | None = None
    route_color: str | None = None
    direction_id: int | None = None


class RouteShape(BaseModel):
    type: str = "Feature"
    geometry: LineGeometry
    properties: ShapeProperties


class RouteShapeCollection(BaseModel):
    type: str = "FeatureCollection"
    features: list[RouteShape] = []


class RouteShapesResponse(BaseModel):
    route_info: RouteInfo
    shapes: RouteShapeCollection


class Bounds(BaseModel):
    north: float
    south: float
    east: float
    west: float

    @property
    def center(self) -> tuple[float, float]:
        """(lat, lon) midpoint of the box."""
        return ((self.north + self.south) / 2, (self.east + self.west) / 2)


# --- Response envelope ---


class WrappedResponse(NamedTuple):
    """{success, data, error?, message?} as sent by the Infobus server."""

    payload: dict[str, Any]

    def unwrap(self) -> Any:
        if self.payload.get("success") is False:
            raise ApiError(
                self.payload.get("error") or self.payload.get("message") or "API request failed"
            )
        data = self.payload.get("data")
        return data if data is not None else self.payload


class BareResponse(NamedTuple):
    """A response body that is the resource itself."""

    payload: Any

    def unwrap(self) -> Any:
        return self.payload


ApiEnvelope = WrappedResponse | BareResponse


def parse_envelope(payload: Any) -> ApiEnvelope:
    """Pick the envelope variant from the decoded JSON body."""
    if isinstance(payload, dict) and ("success" in payload or "data" in payload):
        return WrappedResponse(payload)
    return BareResponse(payload)


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Snapshot of one successful fetch: the typed response and when it arrived."""

    response: T
    fetched_at: datetime
