"""Shared holder for the latest fetch result of an accessor."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Generic, TypeVar

from infobus.api.client import InfobusClient
from infobus.api.models import ApiConfig, FetchResult
from infobus.state import Observable, RequestState

T = TypeVar("T")


def serialize_param(value: object) -> str:
    # Query strings use JS-style lowercase booleans.
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Accessor(Observable, Generic[T]):
    """
    Holds at most one FetchResult. Response and fetch time are swapped together,
    so staleness always matches the data that is visible. Overlapping fetches
    are not sequenced: whichever completes last wins.
    """

    default_max_age_minutes: float = 5

    def __init__(self, config: ApiConfig, client: InfobusClient | None = None):
        super().__init__()
        self.config = config
        self.client = client if client is not None else InfobusClient(config)
        self._result: FetchResult[T] | None = None

    @property
    def state(self) -> RequestState:
        return self.client.state

    @property
    def is_loading(self) -> bool:
        return self.state.is_loading

    @property
    def error(self) -> str | None:
        return self.state.last_error

    @property
    def data(self) -> T | None:
        return self._result.response if self._result else None

    @property
    def last_fetch(self) -> datetime | None:
        return self._result.fetched_at if self._result else None

    def _store(self, response: T) -> None:
        self._result = FetchResult(response=response, fetched_at=datetime.now(timezone.utc))
        self._notify("data", response)

    def is_stale(self, max_age_minutes: float | None = None, now: datetime | None = None) -> bool:
        """True when nothing was ever fetched or the data is older than max_age_minutes."""
        if self._result is None:
            return True
        if max_age_minutes is None:
            max_age_minutes = self.default_max_age_minutes
        now = now or datetime.now(timezone.utc)
        age_minutes = (now - self._result.fetched_at).total_seconds() / 60
        return age_minutes > max_age_minutes
