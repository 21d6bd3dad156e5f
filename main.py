import logging
import re
import time
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from infobus.api import ApiConfig, HttpError, InfobusClient, InfobusError, RequestTimeoutError
from infobus.shapes import RouteShapesAccessor
from infobus.trips import NextTripsAccessor
from infobus.widgets import RouteMapView, RouteMapWidget, TripListView, TripListWidget
from settings import Settings, get_settings

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

# Input validation bounds
ID_MAX_LEN = 64
ID_PATTERN = re.compile(r"^[a-zA-Z0-9_\-.:]+$")
TRIP_LIMIT_MIN, TRIP_LIMIT_MAX = 1, 50
WIDGET_CACHE_MAX = 200


def _validate_id(name: str, value: str) -> None:
    if not value or len(value) > ID_MAX_LEN or not ID_PATTERN.match(value):
        raise HTTPException(
            status_code=400,
            detail=f"{name} must be 1-{ID_MAX_LEN} characters: letters, digits, _ - . :",
        )


def _upstream_http_error(e: InfobusError) -> HTTPException:
    if isinstance(e, HttpError) and e.status == 404:
        return HTTPException(status_code=404, detail=e.message)
    if isinstance(e, RequestTimeoutError):
        return HTTPException(status_code=504, detail=e.message)
    return HTTPException(status_code=502, detail=e.message)


def _fetched_ts(widget) -> float:
    fetched = widget.accessor.last_fetch
    return fetched.timestamp() if fetched else 0.0


def _remember(cache: dict, key, widget) -> None:
    # Evict the widget whose data is oldest (never-fetched first) when full.
    if len(cache) >= WIDGET_CACHE_MAX:
        oldest = min(cache, key=lambda k: _fetched_ts(cache[k]))
        cache.pop(oldest, None)
    cache[key] = widget


def create_app(
    app_settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.api_config = app_settings.api_config()
        app.state.trip_widgets = {}
        app.state.map_widgets = {}
        logger.info("telemetry startup base_url=%s", app_settings.infobus_base_url)
        yield
        app.state.trip_widgets = {}
        app.state.map_widgets = {}

    app = FastAPI(title=app_settings.app_name, debug=app_settings.debug, lifespan=lifespan)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "request method=%s path=%s status=%s duration_ms=%.1f",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
        )
        return response

    @app.exception_handler(Exception)
    def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("telemetry unhandled_exception path=%s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "An unexpected error occurred. Please try again later."},
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in app_settings.cors_origins.split(",") if o.strip()],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/stops/{stop_id}/next-trips", response_model=TripListView)
    async def next_trips(request: Request, stop_id: str, route_id: str = "", limit: int = 10):
        _validate_id("stop_id", stop_id)
        if route_id:
            _validate_id("route_id", route_id)
        if not (TRIP_LIMIT_MIN <= limit <= TRIP_LIMIT_MAX):
            raise HTTPException(
                status_code=400,
                detail=f"limit must be between {TRIP_LIMIT_MIN} and {TRIP_LIMIT_MAX}",
            )
        logger.info("telemetry route=next_trips stop_id=%s route_id=%s", stop_id, route_id or "all")

        cache: dict = request.app.state.trip_widgets
        key = (stop_id, route_id, limit)
        widget = cache.get(key)
        if widget is None:
            config: ApiConfig = request.app.state.api_config
            accessor = NextTripsAccessor(config, InfobusClient(config, transport=transport))
            widget = TripListWidget(accessor, stop_id, route_id=route_id or None, limit=limit)
            _remember(cache, key, widget)

        if widget.accessor.is_stale():
            try:
                await widget.accessor.refresh(
                    stop_id, limit=limit, route_id=route_id or None, include_realtime=widget.show_realtime
                )
            except InfobusError as e:
                if widget.accessor.data is None:
                    raise _upstream_http_error(e) from e
                # Previous data stays visible; the view carries the error.
        return widget.render()

    @app.get("/routes/{route_id}/map", response_model=RouteMapView)
    async def route_map(request: Request, route_id: str, direction_id: int | None = None):
        _validate_id("route_id", route_id)
        if direction_id is not None and direction_id not in (0, 1):
            raise HTTPException(status_code=400, detail="direction_id must be 0 or 1")
        logger.info("telemetry route=route_map route_id=%s direction_id=%s", route_id, direction_id)

        cache: dict = request.app.state.map_widgets
        key = (route_id, direction_id)
        widget = cache.get(key)
        if widget is None:
            config: ApiConfig = request.app.state.api_config
            accessor = RouteShapesAccessor(config, InfobusClient(config, transport=transport))
            widget = RouteMapWidget(accessor, route_id, direction_id=direction_id)
            _remember(cache, key, widget)

        if widget.accessor.is_stale():
            try:
                await widget.accessor.refresh(route_id, direction_id=direction_id)
            except InfobusError as e:
                if widget.accessor.data is None:
                    raise _upstream_http_error(e) from e
        return widget.render()

    return app


app = create_app()
