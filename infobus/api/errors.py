"""Error kinds raised by the Infobus request client."""


class InfobusError(Exception):
    """Base exception for Infobus API failures. `message` mirrors str(exc)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RequestTimeoutError(InfobusError):
    """Raised when a call exceeds the configured timeout."""

    def __init__(self, timeout_ms: int):
        super().__init__(f"Request timed out after {timeout_ms} ms")
        self.timeout_ms = timeout_ms


class HttpError(InfobusError):
    """Raised when the server answers with a non-success status code."""

    def __init__(self, status: int):
        super().__init__(f"HTTP error! status: {status}")
        self.status = status


class ApiError(InfobusError):
    """Raised when a wrapped response carries success=false."""


class DecodeError(InfobusError):
    """Raised when the response body is not valid JSON."""


class UnknownError(InfobusError):
    """Any other failure; the original message is preserved."""
