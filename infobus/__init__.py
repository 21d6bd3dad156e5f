"""Infobus transit API client: next trips, route shapes and display widgets."""
from infobus.api import ApiConfig, InfobusClient, InfobusError
from infobus.shapes import RouteShapesAccessor, ShapeFormat
from infobus.state import RequestState
from infobus.trips import NextTripsAccessor

__all__ = [
    "ApiConfig",
    "InfobusClient",
    "InfobusError",
    "NextTripsAccessor",
    "RequestState",
    "RouteShapesAccessor",
    "ShapeFormat",
]
