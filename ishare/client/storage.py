"""
Session storage.

Async key/value store holding the auth token, refresh token and the cached
user record.  Two backends:

* ``MemoryStorage`` - process-local dict, the default.
* ``RedisStorage``  - ``redis.asyncio`` client, keys namespaced with a prefix
  so ``clear()`` only drops this client's session.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import redis.asyncio as aioredis

from ishare.config import settings

logger = logging.getLogger(__name__)

AUTH_TOKEN = "authToken"
REFRESH_TOKEN = "refreshToken"
USER_DATA = "userData"

STORAGE_KEYS = (AUTH_TOKEN, REFRESH_TOKEN, USER_DATA)


class Storage(ABC):
    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]: ...

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None: ...

    @abstractmethod
    async def remove_item(self, key: str) -> None: ...

    @abstractmethod
    async def clear(self) -> None: ...

    async def remove_items(self, *keys: str) -> None:
        for key in keys:
            await self.remove_item(key)


class MemoryStorage(Storage):
    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        logger.debug("Setting key: %s", key)
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        logger.debug("Removing key: %s", key)
        self._items.pop(key, None)

    async def clear(self) -> None:
        self._items.clear()


class RedisStorage(Storage):
    def __init__(self, client: aioredis.Redis, prefix: str = "ishare:session:"):
        self.redis = client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get_item(self, key: str) -> Optional[str]:
        return await self.redis.get(self._key(key))

    async def set_item(self, key: str, value: str) -> None:
        logger.debug("Setting key: %s", key)
        await self.redis.set(self._key(key), value)

    async def remove_item(self, key: str) -> None:
        logger.debug("Removing key: %s", key)
        await self.redis.delete(self._key(key))

    async def clear(self) -> None:
        keys = [k async for k in self.redis.scan_iter(match=f"{self.prefix}*")]
        if keys:
            await self.redis.delete(*keys)


def create_storage(backend: Optional[str] = None) -> Storage:
    """Build the storage backend named in settings (``memory`` or ``redis``)."""
    backend = (backend or settings.storage_backend).lower()
    if backend == "redis":
        client = aioredis.Redis.from_url(settings.redis_url, decode_responses=True)
        return RedisStorage(client)
    if backend != "memory":
        raise ValueError(f"Unknown storage backend: {backend}")
    return MemoryStorage()
