"""Route map widget: geometry plus bounds for a map renderer to draw and fit."""
from __future__ import annotations

from collections.abc import Callable

from pydantic import BaseModel

from infobus.api.errors import InfobusError
from infobus.api.models import Bounds, RouteShapeCollection
from infobus.shapes import RouteShapesAccessor, compute_bounds, line_coordinates

DEFAULT_LINE_COLOR = "#3388ff"


class RouteMapView(BaseModel):
    route_id: str
    route_name: str | None = None
    line_color: str = DEFAULT_LINE_COLOR
    is_loading: bool = False
    error: str | None = None
    shapes: RouteShapeCollection = RouteShapeCollection()
    bounds: Bounds | None = None
    center: tuple[float, float] | None = None


class RouteMapWidget:
    def __init__(
        self,
        accessor: RouteShapesAccessor,
        route_id: str,
        *,
        direction_id: int | None = None,
        on_shapes_loaded: Callable[[RouteShapeCollection], None] | None = None,
        on_error: Callable[[str], None] | None = None,
    ):
        self.accessor = accessor
        self.route_id = route_id
        self.direction_id = direction_id
        self.on_shapes_loaded = on_shapes_loaded
        self.on_error = on_error

    async def load(self) -> bool:
        try:
            shapes = await self.accessor.fetch_route_shapes(
                self.route_id, direction_id=self.direction_id
            )
        except InfobusError as e:
            if self.on_error:
                self.on_error(e.message)
            return False
        if self.on_shapes_loaded:
            self.on_shapes_loaded(shapes)
        return True

    def _line_color(self) -> str:
        info = self.accessor.route_info
        color = info.route_color if info else None
        if not color:
            color = next(
                (f.properties.route_color for f in self.accessor.features if f.properties.route_color),
                None,
            )
        if not color:
            return DEFAULT_LINE_COLOR
        return color if color.startswith("#") else f"#{color}"

    def render(self) -> RouteMapView:
        if self.direction_id is None:
            features = self.accessor.features
            bounds = self.accessor.get_bounds()
        else:
            features = self.accessor.get_shapes_by_direction(self.direction_id)
            bounds = compute_bounds(line_coordinates(features))
        info = self.accessor.route_info
        return RouteMapView(
            route_id=self.route_id,
            route_name=(info.route_short_name or info.route_long_name) if info else None,
            line_color=self._line_color(),
            is_loading=self.accessor.is_loading,
            error=self.accessor.error,
            shapes=RouteShapeCollection(features=features),
            bounds=bounds,
            center=bounds.center if bounds else None,
        )
