"""
Next-trips accessor: arrivals at a stop from GET /next-trips, with
filter/slice helpers and a 5-minute staleness default.
"""
import logging

from infobus.api.errors import InfobusError
from infobus.api.models import NextTrip, NextTripsResponse, StopInfo
from infobus.fetch import Accessor, serialize_param

logger = logging.getLogger(__name__)

NEXT_TRIPS_ENDPOINT = "/next-trips"
NEXT_TRIPS_MAX_AGE_MINUTES = 5


def build_next_trips_params(
    stop_id: str,
    limit: int | None = None,
    route_id: str | None = None,
    direction_id: int | None = None,
    include_realtime: bool | None = None,
) -> dict[str, str]:
    """Query params for /next-trips. Options that are not given are left out."""
    params = {"stop_id": stop_id}
    if limit:
        params["limit"] = serialize_param(limit)
    if route_id:
        params["route_id"] = route_id
    if direction_id is not None:
        params["direction_id"] = serialize_param(direction_id)
    if include_realtime is not None:
        params["realtime"] = serialize_param(include_realtime)
    return params


class NextTripsAccessor(Accessor[NextTripsResponse]):
    default_max_age_minutes = NEXT_TRIPS_MAX_AGE_MINUTES

    @property
    def trips(self) -> list[NextTrip]:
        return self.data.trips if self.data else []

    @property
    def stop_info(self) -> StopInfo | None:
        return self.data.stop_info if self.data else None

    @property
    def last_updated(self) -> str | None:
        return self.data.last_updated if self.data else None

    async def fetch_next_trips(
        self,
        stop_id: str,
        *,
        limit: int | None = None,
        route_id: str | None = None,
        direction_id: int | None = None,
        include_realtime: bool | None = None,
    ) -> list[NextTrip]:
        params = build_next_trips_params(stop_id, limit, route_id, direction_id, include_realtime)
        try:
            response = await self.client.request(
                NEXT_TRIPS_ENDPOINT, params=params, response_model=NextTripsResponse
            )
        except InfobusError as e:
            logger.debug("telemetry next_trips_error stop_id=%s error=%s", stop_id, e.message)
            raise
        self._store(response)
        logger.info(
            "telemetry next_trips_fetched stop_id=%s count=%s",
            stop_id,
            len(response.trips),
        )
        return response.trips

    async def refresh(self, stop_id: str, **options) -> list[NextTrip]:
        return await self.fetch_next_trips(stop_id, **options)

    def get_trips_by_route(self, route_id: str) -> list[NextTrip]:
        return [t for t in self.trips if t.route_id == route_id]

    def get_next_trips(self, count: int) -> list[NextTrip]:
        """First `count` trips; fewer when not that many are held."""
        return self.trips[: max(0, count)]
