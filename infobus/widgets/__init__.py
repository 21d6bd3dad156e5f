from infobus.widgets.route_map import RouteMapView, RouteMapWidget
from infobus.widgets.trip_list import TripListView, TripListWidget, TripRow

__all__ = ["RouteMapView", "RouteMapWidget", "TripListView", "TripListWidget", "TripRow"]
