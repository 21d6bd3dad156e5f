"""
Route-shapes accessor: route geometry from GET /geo-shapes, with direction
filter, coordinate flattening and bounds for map fitting.
"""
import logging
from enum import Enum

from infobus.api.errors import InfobusError
from infobus.api.models import Bounds, RouteInfo, RouteShape, RouteShapeCollection, RouteShapesResponse
from infobus.fetch import Accessor, serialize_param

logger = logging.getLogger(__name__)

GEO_SHAPES_ENDPOINT = "/geo-shapes"
ROUTE_SHAPES_MAX_AGE_MINUTES = 30


class ShapeFormat(str, Enum):
    GEOJSON = "geojson"
    POLYLINE = "polyline"


def build_route_shapes_params(
    route_id: str,
    direction_id: int | None = None,
    include_stops: bool | None = None,
    simplify: bool | None = None,
    format: ShapeFormat | str | None = None,
) -> dict[str, str]:
    """Query params for /geo-shapes. Options that are not given are left out."""
    params = {"route_id": route_id}
    if direction_id is not None:
        params["direction_id"] = serialize_param(direction_id)
    if include_stops is not None:
        params["include_stops"] = serialize_param(include_stops)
    if simplify is not None:
        params["simplify"] = serialize_param(simplify)
    if format:
        params["format"] = ShapeFormat(format).value
    return params


def line_coordinates(features: list[RouteShape]) -> list[tuple[float, float]]:
    """All LineString coordinates in feature order; other geometries are skipped."""
    coordinates: list[tuple[float, float]] = []
    for feature in features:
        if feature.geometry.type != "LineString":
            continue
        for point in feature.geometry.coordinates or []:
            coordinates.append((float(point[0]), float(point[1])))
    return coordinates


def compute_bounds(coordinates: list[tuple[float, float]]) -> Bounds | None:
    """Bounding box of [lon, lat] pairs, or None when there are none."""
    if not coordinates:
        return None
    lngs = [c[0] for c in coordinates]
    lats = [c[1] for c in coordinates]
    return Bounds(north=max(lats), south=min(lats), east=max(lngs), west=min(lngs))


class RouteShapesAccessor(Accessor[RouteShapesResponse]):
    default_max_age_minutes = ROUTE_SHAPES_MAX_AGE_MINUTES

    @property
    def shapes(self) -> RouteShapeCollection | None:
        return self.data.shapes if self.data else None

    @property
    def route_info(self) -> RouteInfo | None:
        return self.data.route_info if self.data else None

    @property
    def features(self) -> list[RouteShape]:
        return self.data.shapes.features if self.data else []

    async def fetch_route_shapes(
        self,
        route_id: str,
        *,
        direction_id: int | None = None,
        include_stops: bool | None = None,
        simplify: bool | None = None,
        format: ShapeFormat | str | None = None,
    ) -> RouteShapeCollection:
        params = build_route_shapes_params(route_id, direction_id, include_stops, simplify, format)
        try:
            response = await self.client.request(
                GEO_SHAPES_ENDPOINT, params=params, response_model=RouteShapesResponse
            )
        except InfobusError as e:
            logger.debug("telemetry route_shapes_error route_id=%s error=%s", route_id, e.message)
            raise
        self._store(response)
        logger.info(
            "telemetry route_shapes_fetched route_id=%s features=%s",
            route_id,
            len(response.shapes.features),
        )
        return response.shapes

    async def refresh(self, route_id: str, **options) -> RouteShapeCollection:
        return await self.fetch_route_shapes(route_id, **options)

    def get_shapes_by_direction(self, direction_id: int) -> list[RouteShape]:
        return [f for f in self.features if f.properties.direction_id == direction_id]

    def get_all_coordinates(self) -> list[tuple[float, float]]:
        return line_coordinates(self.features)

    def get_bounds(self) -> Bounds | None:
        return compute_bounds(self.get_all_coordinates())
