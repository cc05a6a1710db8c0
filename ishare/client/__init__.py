"""REST transport: HTTP client, session storage and client errors."""

from ishare.client.errors import ApiConnectionError, ApiError, RideRequestTimeout
from ishare.client.http import ApiClient
from ishare.client.storage import MemoryStorage, RedisStorage, Storage, create_storage

__all__ = [
    "ApiClient",
    "ApiConnectionError",
    "ApiError",
    "MemoryStorage",
    "RedisStorage",
    "RideRequestTimeout",
    "Storage",
    "create_storage",
]
