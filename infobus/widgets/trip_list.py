"""
Trip list widget: loads next trips for a stop and renders rows ready for display.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from pydantic import BaseModel

from infobus.api.errors import InfobusError
from infobus.api.models import NextTrip
from infobus.trips import NEXT_TRIPS_MAX_AGE_MINUTES, NextTripsAccessor

logger = logging.getLogger(__name__)

DEFAULT_TRIP_LIMIT = 10


class TripRow(BaseModel):
    trip_id: str
    route_id: str
    route_short_name: str
    headsign: str
    display_time: str
    delay_label: str | None = None
    is_realtime: bool = False
    wheelchair_accessible: bool = False
    route_color: str | None = None
    route_text_color: str | None = None


class TripListView(BaseModel):
    stop_id: str
    stop_name: str | None = None
    last_updated: str | None = None
    is_loading: bool = False
    error: str | None = None
    trips: list[TripRow] = []


def format_clock(value: str) -> str:
    """'HH:MM:SS' (GTFS, may exceed 24h) or ISO datetime -> 'HH:MM'."""
    value = (value or "").strip()
    if "T" in value:
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
            return dt.strftime("%H:%M")
        except ValueError:
            return value
    parts = value.split(":")
    if len(parts) >= 2:
        return f"{parts[0].zfill(2)}:{parts[1].zfill(2)}"
    return value


def format_delay(delay_seconds: int | None) -> str | None:
    if delay_seconds is None:
        return None
    minutes = round(delay_seconds / 60)
    if minutes == 0:
        return "on time"
    return f"{minutes:+d} min"


def _color(value: str | None) -> str | None:
    if not value:
        return None
    return value if value.startswith("#") else f"#{value}"


def trip_row(trip: NextTrip, show_realtime: bool = True) -> TripRow:
    is_realtime = show_realtime and trip.estimated_arrival is not None
    return TripRow(
        trip_id=trip.trip_id,
        route_id=trip.route_id,
        route_short_name=trip.route_short_name,
        headsign=trip.trip_headsign,
        display_time=format_clock(trip.estimated_arrival if is_realtime else trip.arrival_time),
        delay_label=format_delay(trip.delay) if show_realtime else None,
        is_realtime=is_realtime,
        wheelchair_accessible=trip.wheelchair_accessible == 1,
        route_color=_color(trip.route_color),
        route_text_color=_color(trip.route_text_color),
    )


class TripListWidget:
    """Binds a NextTripsAccessor to one stop; errors go to on_error, never raised."""

    def __init__(
        self,
        accessor: NextTripsAccessor,
        stop_id: str,
        *,
        route_id: str | None = None,
        limit: int = DEFAULT_TRIP_LIMIT,
        show_realtime: bool = True,
        on_trips_loaded: Callable[[list[NextTrip]], None] | None = None,
        on_error: Callable[[str], None] | None = None,
    ):
        self.accessor = accessor
        self.stop_id = stop_id
        self.route_id = route_id
        self.limit = limit
        self.show_realtime = show_realtime
        self.on_trips_loaded = on_trips_loaded
        self.on_error = on_error

    async def load(self) -> bool:
        """Fetch trips; True on success."""
        try:
            trips = await self.accessor.fetch_next_trips(
                self.stop_id,
                limit=self.limit,
                route_id=self.route_id,
                include_realtime=self.show_realtime,
            )
        except InfobusError as e:
            if self.on_error:
                self.on_error(e.message)
            return False
        if self.on_trips_loaded:
            self.on_trips_loaded(trips)
        return True

    async def refresh_if_stale(self, max_age_minutes: float = NEXT_TRIPS_MAX_AGE_MINUTES) -> bool:
        if not self.accessor.is_stale(max_age_minutes):
            return False
        return await self.load()

    def render(self) -> TripListView:
        trips = self.accessor.trips
        if self.route_id:
            trips = self.accessor.get_trips_by_route(self.route_id)
        stop = self.accessor.stop_info
        return TripListView(
            stop_id=self.stop_id,
            stop_name=stop.stop_name if stop else None,
            last_updated=self.accessor.last_updated,
            is_loading=self.accessor.is_loading,
            error=self.accessor.error,
            trips=[trip_row(t, self.show_realtime) for t in trips[: max(0, self.limit)]],
        )
