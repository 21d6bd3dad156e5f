"""Pytest configuration and fixtures."""
import sys
from pathlib import Path

import httpx
import pytest

# Ensure project root is on path when running pytest from elsewhere
root = Path(__file__).resolve().parent.parent
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from infobus.api import ApiConfig  # noqa: E402

BASE_URL = "https://api.example.com"


class RecordingHandler:
    """httpx.MockTransport handler that remembers every request it served."""

    def __init__(self, responder):
        self.requests: list[httpx.Request] = []
        self._responder = responder

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        return self._responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def mock_api():
    """Factory: mock_api(body, status_code=200) or mock_api(responder=fn)."""

    def make(body=None, status_code: int = 200, responder=None) -> RecordingHandler:
        if responder is None:

            def responder(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status_code, json=body)

        return RecordingHandler(responder)

    return make


@pytest.fixture
def config() -> ApiConfig:
    return ApiConfig(base_url=BASE_URL, timeout_ms=5000)


@pytest.fixture
def config_with_key() -> ApiConfig:
    return ApiConfig(base_url=BASE_URL, api_key="test-key", timeout_ms=5000)


def make_trip(trip_id: str, route_id: str, **overrides) -> dict:
    trip = {
        "trip_id": trip_id,
        "route_id": route_id,
        "route_short_name": route_id,
        "route_long_name": f"Route {route_id}",
        "trip_headsign": "Downtown",
        "arrival_time": "14:05:00",
        "departure_time": "14:05:30",
        "stop_sequence": 3,
        "pickup_type": 0,
        "drop_off_type": 0,
    }
    trip.update(overrides)
    return trip


@pytest.fixture
def trips_payload() -> dict:
    return {
        "success": True,
        "data": {
            "stop_info": {
                "stop_id": "1001",
                "stop_name": "Central Station",
                "stop_lat": 9.9347,
                "stop_lon": -84.0875,
            },
            "trips": [
                make_trip("T1", "R1"),
                make_trip(
                    "T2",
                    "R2",
                    arrival_time="14:10:00",
                    estimated_arrival="2025-03-01T14:12:00",
                    delay=120,
                    route_color="FF0000",
                    wheelchair_accessible=1,
                ),
                make_trip("T3", "R1", arrival_time="14:20:00"),
            ],
            "last_updated": "2025-03-01T14:00:00Z",
        },
    }


@pytest.fixture
def shapes_payload() -> dict:
    return {
        "success": True,
        "data": {
            "route_info": {
                "route_id": "R1",
                "route_short_name": "1",
                "route_long_name": "Central - Airport",
                "route_type": 3,
                "route_color": "00AA00",
            },
            "shapes": {
                "type": "FeatureCollection",
                "features": [
                    {
                        "type": "Feature",
                        "geometry": {"type": "LineString", "coordinates": [[1, 2], [3, 4]]},
                        "properties": {"shape_id": "S0", "route_id": "R1", "direction_id": 0},
                    },
                    {
                        "type": "Feature",
                        "geometry": {"type": "LineString", "coordinates": [[-1, 5], [0, 6]]},
                        "properties": {"shape_id": "S1", "route_id": "R1", "direction_id": 1},
                    },
                    {
                        "type": "Feature",
                        "geometry": {"type": "Point", "coordinates": [100, 80]},
                        "properties": {"shape_id": "STOPS", "route_id": "R1"},
                    },
                ],
            },
        },
    }
