"""Session storage backends (Redis is mocked)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ishare.client.storage import (
    AUTH_TOKEN,
    REFRESH_TOKEN,
    USER_DATA,
    MemoryStorage,
    RedisStorage,
    create_storage,
)


class TestMemoryStorage:
    @pytest.mark.asyncio
    async def test_set_get_remove(self):
        storage = MemoryStorage()
        await storage.set_item(AUTH_TOKEN, "abc")
        assert await storage.get_item(AUTH_TOKEN) == "abc"
        await storage.remove_item(AUTH_TOKEN)
        assert await storage.get_item(AUTH_TOKEN) is None

    @pytest.mark.asyncio
    async def test_remove_missing_key_is_fine(self):
        await MemoryStorage().remove_item("nothing")

    @pytest.mark.asyncio
    async def test_remove_items_and_clear(self):
        storage = MemoryStorage()
        for key in (AUTH_TOKEN, REFRESH_TOKEN, USER_DATA):
            await storage.set_item(key, "x")
        await storage.remove_items(AUTH_TOKEN, REFRESH_TOKEN)
        assert await storage.get_item(USER_DATA) == "x"
        await storage.clear()
        assert await storage.get_item(USER_DATA) is None


class TestRedisStorage:
    """Tests the Redis backend against a mocked client."""

    @pytest.mark.asyncio
    async def test_keys_are_prefixed(self):
        mock_redis = AsyncMock()
        mock_redis.get = AsyncMock(return_value="abc")

        storage = RedisStorage(mock_redis, prefix="test:")
        await storage.set_item(AUTH_TOKEN, "abc")
        assert await storage.get_item(AUTH_TOKEN) == "abc"
        await storage.remove_item(AUTH_TOKEN)

        mock_redis.set.assert_awaited_once_with("test:authToken", "abc")
        mock_redis.get.assert_awaited_once_with("test:authToken")
        mock_redis.delete.assert_awaited_once_with("test:authToken")

    @pytest.mark.asyncio
    async def test_clear_only_drops_own_keys(self):
        async def scan_iter(match):
            assert match == "test:*"
            for key in ("test:authToken", "test:userData"):
                yield key

        mock_redis = AsyncMock()
        mock_redis.scan_iter = MagicMock(side_effect=scan_iter)

        await RedisStorage(mock_redis, prefix="test:").clear()
        mock_redis.delete.assert_awaited_once_with("test:authToken", "test:userData")

    @pytest.mark.asyncio
    async def test_clear_with_nothing_stored(self):
        async def scan_iter(match):
            return
            yield

        mock_redis = AsyncMock()
        mock_redis.scan_iter = MagicMock(side_effect=scan_iter)

        await RedisStorage(mock_redis).clear()
        mock_redis.delete.assert_not_awaited()


class TestCreateStorage:
    def test_memory_backend(self):
        assert isinstance(create_storage("memory"), MemoryStorage)

    def test_redis_backend_uses_settings_url(self):
        with patch("ishare.client.storage.aioredis.Redis.from_url") as from_url:
            storage = create_storage("REDIS")
        assert isinstance(storage, RedisStorage)
        from_url.assert_called_once()
        assert from_url.call_args.kwargs["decode_responses"] is True

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_storage("sqlite")
