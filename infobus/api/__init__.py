from infobus.api.client import InfobusClient, build_headers, build_url
from infobus.api.errors import (
    ApiError,
    DecodeError,
    HttpError,
    InfobusError,
    RequestTimeoutError,
    UnknownError,
)
from infobus.api.models import ApiConfig

__all__ = [
    "ApiConfig",
    "ApiError",
    "DecodeError",
    "HttpError",
    "InfobusClient",
    "InfobusError",
    "RequestTimeoutError",
    "UnknownError",
    "build_headers",
    "build_url",
]
