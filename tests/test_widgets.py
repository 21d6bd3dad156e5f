"""Tests for the trip list and route map widgets."""
import asyncio

from infobus.api import InfobusClient
from infobus.api.models import NextTrip
from infobus.shapes import RouteShapesAccessor
from infobus.trips import NextTripsAccessor
from infobus.widgets import RouteMapWidget, TripListWidget
from infobus.widgets.route_map import DEFAULT_LINE_COLOR
from infobus.widgets.trip_list import format_clock, format_delay, trip_row


# --- Formatting helpers ---


def test_format_clock():
    assert format_clock("14:05:00") == "14:05"
    assert format_clock("25:10:00") == "25:10"
    assert format_clock("7:5:00") == "07:05"
    assert format_clock("2025-03-01T14:12:00") == "14:12"
    assert format_clock("") == ""


def test_format_delay():
    assert format_delay(None) is None
    assert format_delay(20) == "on time"
    assert format_delay(180) == "+3 min"
    assert format_delay(-120) == "-2 min"


def test_trip_row_prefers_estimated_arrival():
    trip = NextTrip(
        trip_id="T",
        route_id="R",
        route_short_name="5",
        route_long_name="Five",
        trip_headsign="Mall",
        arrival_time="10:00:00",
        departure_time="10:00:00",
        stop_sequence=1,
        estimated_arrival="2025-03-01T10:04:00",
        delay=240,
        route_color="#123456",
    )
    row = trip_row(trip)
    assert row.display_time == "10:04"
    assert row.is_realtime is True
    assert row.delay_label == "+4 min"
    assert row.route_color == "#123456"

    scheduled = trip_row(trip, show_realtime=False)
    assert scheduled.display_time == "10:00"
    assert scheduled.is_realtime is False
    assert scheduled.delay_label is None


# --- TripListWidget ---


def test_trip_list_load_and_render(config, mock_api, trips_payload):
    api = mock_api(trips_payload)
    accessor = NextTripsAccessor(config, InfobusClient(config, transport=api.transport))
    loaded = []
    widget = TripListWidget(accessor, "1001", limit=2, on_trips_loaded=loaded.append)

    assert asyncio.run(widget.load()) is True

    assert api.last.url.params["limit"] == "2"
    assert api.last.url.params["realtime"] == "true"
    assert len(loaded) == 1
    view = widget.render()
    assert view.stop_name == "Central Station"
    assert view.error is None
    assert [r.trip_id for r in view.trips] == ["T1", "T2"]
    row = view.trips[1]
    assert row.display_time == "14:12"
    assert row.delay_label == "+2 min"
    assert row.route_color == "#FF0000"
    assert row.wheelchair_accessible is True


def test_trip_list_filters_by_route(config, mock_api, trips_payload):
    accessor = NextTripsAccessor(config, InfobusClient(config, transport=mock_api(trips_payload).transport))
    widget = TripListWidget(accessor, "1001", route_id="R1")
    asyncio.run(widget.load())
    assert [r.trip_id for r in widget.render().trips] == ["T1", "T3"]


def test_trip_list_reports_error_without_raising(config, mock_api):
    accessor = NextTripsAccessor(
        config, InfobusClient(config, transport=mock_api({"success": False, "error": "no data"}).transport)
    )
    errors = []
    widget = TripListWidget(accessor, "1001", on_error=errors.append)

    assert asyncio.run(widget.load()) is False

    assert errors == ["no data"]
    view = widget.render()
    assert view.error == "no data"
    assert view.trips == []


def test_trip_list_refresh_if_stale(config, mock_api, trips_payload):
    api = mock_api(trips_payload)
    accessor = NextTripsAccessor(config, InfobusClient(config, transport=api.transport))
    widget = TripListWidget(accessor, "1001")

    assert asyncio.run(widget.refresh_if_stale()) is True
    assert asyncio.run(widget.refresh_if_stale()) is False
    assert len(api.requests) == 1


# --- RouteMapWidget ---


def test_route_map_render(config, mock_api, shapes_payload):
    accessor = RouteShapesAccessor(config, InfobusClient(config, transport=mock_api(shapes_payload).transport))
    loaded = []
    widget = RouteMapWidget(accessor, "R1", on_shapes_loaded=loaded.append)

    assert asyncio.run(widget.load()) is True

    view = widget.render()
    assert len(loaded) == 1
    assert view.route_name == "1"
    assert view.line_color == "#00AA00"
    assert len(view.shapes.features) == 3
    assert view.bounds.north == 6 and view.bounds.west == -1
    assert view.center == (4.0, 1.0)


def test_route_map_direction_bounds(config, mock_api, shapes_payload):
    api = mock_api(shapes_payload)
    accessor = RouteShapesAccessor(config, InfobusClient(config, transport=api.transport))
    widget = RouteMapWidget(accessor, "R1", direction_id=0)
    asyncio.run(widget.load())

    assert api.last.url.params["direction_id"] == "0"
    view = widget.render()
    assert [f.properties.shape_id for f in view.shapes.features] == ["S0"]
    assert (view.bounds.north, view.bounds.south, view.bounds.east, view.bounds.west) == (4, 2, 3, 1)


def test_route_map_empty_before_load(config):
    widget = RouteMapWidget(RouteShapesAccessor(config), "R1")
    view = widget.render()
    assert view.bounds is None
    assert view.center is None
    assert view.line_color == DEFAULT_LINE_COLOR
    assert view.shapes.features == []


def test_route_map_reports_error(config, mock_api):
    accessor = RouteShapesAccessor(config, InfobusClient(config, transport=mock_api({}, status_code=500).transport))
    errors = []
    widget = RouteMapWidget(accessor, "R1", on_error=errors.append)
    assert asyncio.run(widget.load()) is False
    assert errors == ["HTTP error! status: 500"]
    assert widget.render().error == "HTTP error! status: 500"
