"""
Infobus API request client: one HTTP call per request() with bearer auth,
timeout, envelope unwrapping and typed errors. No retries, no coalescing.
"""
import asyncio
import logging
import time
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from infobus.api.errors import (
    DecodeError,
    HttpError,
    InfobusError,
    RequestTimeoutError,
    UnknownError,
)
from infobus.api.models import ApiConfig, parse_envelope
from infobus.state import RequestState

logger = logging.getLogger(__name__)


def build_url(base_url: str, endpoint: str) -> str:
    """Join base_url and a relative endpoint, keeping any path prefix on the base."""
    if endpoint.startswith(("http://", "https://")):
        return endpoint
    return f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"


def build_headers(config: ApiConfig, extra: dict[str, str] | None = None) -> httpx.Headers:
    """Default JSON content type, caller headers on top, configured bearer token last.
    Header names are case-insensitive, so a caller's "authorization" is replaced too.
    """
    headers = httpx.Headers({"Content-Type": "application/json"})
    if extra:
        headers.update(extra)
    if config.api_key:
        headers["Authorization"] = f"Bearer {config.api_key}"
    return headers


class InfobusClient:
    """Sends requests to the Infobus API and mirrors progress into a RequestState."""

    def __init__(
        self,
        config: ApiConfig,
        state: RequestState | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.state = state if state is not None else RequestState()
        self._transport = transport

    @property
    def is_loading(self) -> bool:
        return self.state.is_loading

    @property
    def last_error(self) -> str | None:
        return self.state.last_error

    async def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        json: Any = None,
        response_model: type[BaseModel] | None = None,
    ) -> Any:
        """
        Perform one call and return the unwrapped payload, validated into
        response_model when one is given.
        Raises an InfobusError subclass on any failure; the same message is
        stored in state.last_error.
        """
        self.state.is_loading = True
        self.state.last_error = None
        url = build_url(self.config.base_url, endpoint)
        timeout_ms = self.config.effective_timeout_ms
        start = time.perf_counter()
        try:
            try:
                # httpx timeouts apply per socket operation; wait_for bounds the whole call.
                resp = await asyncio.wait_for(
                    self._send(method, url, build_headers(self.config, headers), params, json),
                    timeout_ms / 1000.0,
                )
            except (httpx.TimeoutException, asyncio.TimeoutError) as e:
                raise RequestTimeoutError(timeout_ms) from e

            if not resp.is_success:
                raise HttpError(resp.status_code)

            try:
                body = resp.json()
            except ValueError as e:
                raise DecodeError(f"Invalid JSON in response: {e}") from e

            result = parse_envelope(body).unwrap()
            if response_model is not None:
                try:
                    result = response_model.model_validate(result)
                except ValidationError as e:
                    raise DecodeError(
                        f"Unexpected {response_model.__name__} payload: {e.error_count()} validation error(s)"
                    ) from e
            logger.info(
                "telemetry infobus_request method=%s endpoint=%s status=%s duration_ms=%.1f",
                method,
                endpoint,
                resp.status_code,
                (time.perf_counter() - start) * 1000,
            )
            return result
        except InfobusError as e:
            self._record_failure(endpoint, e)
            raise
        except Exception as e:
            err = UnknownError(str(e) or "Unknown error")
            self._record_failure(endpoint, err)
            raise err from e
        finally:
            self.state.is_loading = False

    async def _send(
        self,
        method: str,
        url: str,
        headers: httpx.Headers,
        params: dict[str, str] | None,
        json: Any,
    ) -> httpx.Response:
        timeout_s = self.config.effective_timeout_ms / 1000.0
        async with httpx.AsyncClient(timeout=timeout_s, transport=self._transport) as client:
            # Non-streaming request: the body is fully read before this returns.
            return await client.request(method, url, headers=headers, params=params, json=json)

    def _record_failure(self, endpoint: str, err: InfobusError) -> None:
        self.state.last_error = err.message
        logger.warning(
            "telemetry infobus_request_error endpoint=%s kind=%s error=%s",
            endpoint,
            type(err).__name__,
            err.message,
        )
