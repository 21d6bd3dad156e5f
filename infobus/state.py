"""
Observable state containers. Any UI layer can subscribe to field changes
instead of polling.
"""
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Subscriber = Callable[[str, Any], None]


class Observable:
    """Keeps a list of subscribers and calls them with (field, value) on change."""

    def __init__(self):
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register callback; returns a function that removes it again."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, field: str, value: Any) -> None:
        for callback in list(self._subscribers):
            try:
                callback(field, value)
            except Exception:
                logger.exception("telemetry subscriber_error field=%s", field)


class RequestState(Observable):
    """Loading flag and last error message of one request client."""

    def __init__(self):
        super().__init__()
        self._is_loading = False
        self._last_error: str | None = None

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @is_loading.setter
    def is_loading(self, value: bool) -> None:
        if value != self._is_loading:
            self._is_loading = value
            self._notify("is_loading", value)

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @last_error.setter
    def last_error(self, value: str | None) -> None:
        if value != self._last_error:
            self._last_error = value
            self._notify("last_error", value)
