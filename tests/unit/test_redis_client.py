# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the Redis cache client."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.infrastructure.cache.redis_client import RedisClient, RedisError, temp_password_key


@pytest.fixture
def raw_redis() -> MagicMock:
    """Mock redis.asyncio.Redis connection."""
    redis = MagicMock()
    redis.set = AsyncMock(return_value=True)
    redis.get = AsyncMock(return_value=None)
    redis.delete = AsyncMock(return_value=1)
    redis.ping = AsyncMock(return_value=True)
    return redis


@pytest.fixture
def client(raw_redis: MagicMock) -> RedisClient:
    """RedisClient wired to the mock connection without connecting."""
    redis_client = RedisClient(MagicMock())
    redis_client._redis = raw_redis
    return redis_client


def test_temp_password_key() -> None:
    assert temp_password_key("665f1c") == "temp_password_665f1c"


class TestRedisClient:
    """Tests for RedisClient operations."""

    @pytest.mark.asyncio
    async def test_set_serializes_and_expires(self, client, raw_redis) -> None:
        await client.set("key", {"a": 1}, expire_seconds=60)

        raw_redis.set.assert_awaited_once_with("key", '{"a": 1}', ex=60)

    @pytest.mark.asyncio
    async def test_get_deserializes_json(self, client, raw_redis) -> None:
        raw_redis.get.return_value = '"Abc123!@#xyz"'

        assert await client.get("key") == "Abc123!@#xyz"

    @pytest.mark.asyncio
    async def test_get_returns_raw_value_when_not_json(self, client, raw_redis) -> None:
        raw_redis.get.return_value = "plain-text"

        assert await client.get("key") == "plain-text"

    @pytest.mark.asyncio
    async def test_get_missing_key(self, client) -> None:
        assert await client.get("missing") is None

    @pytest.mark.asyncio
    async def test_delete_reports_whether_key_existed(self, client, raw_redis) -> None:
        assert await client.delete("key") is True

        raw_redis.delete.return_value = 0
        assert await client.delete("key") is False

    @pytest.mark.asyncio
    async def test_driver_errors_are_wrapped(self, client, raw_redis) -> None:
        raw_redis.set.side_effect = RedisConnectionError("down")

        with pytest.raises(RedisError, match="Failed to set key") as exc_info:
            await client.set("key", "value")

        assert isinstance(exc_info.value.original_error, RedisConnectionError)

    @pytest.mark.asyncio
    async def test_not_connected_raises(self) -> None:
        with pytest.raises(RedisError, match="not connected"):
            await RedisClient(MagicMock()).get("key")

    @pytest.mark.asyncio
    async def test_ping_false_on_error(self, client, raw_redis) -> None:
        raw_redis.ping.side_effect = RedisConnectionError("down")

        assert await client.ping() is False
