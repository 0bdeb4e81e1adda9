# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Redis client for short-lived values.

The backend uses Redis for one job: parking a school's plain temporary
password between onboarding and the first completed payment. Keys are
built with temp_password_key() and always carry an expiry.

Example:
    from src.infrastructure.cache import init_redis, get_redis, temp_password_key

    # Initialize at startup
    await init_redis(settings)

    redis = get_redis()
    await redis.set(temp_password_key(school_id), password, expire_seconds=86400)
"""

import json
import logging
from typing import TYPE_CHECKING, Any, Optional

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError as BaseRedisError

if TYPE_CHECKING:
    from src.core.config.settings import Settings

logger = logging.getLogger(__name__)

# Module-level state
_redis_client: Optional["RedisClient"] = None


def temp_password_key(school_id: str) -> str:
    """Cache key holding a school's temporary password."""
    return f"temp_password_{school_id}"


class RedisError(Exception):
    """Exception raised for Redis operation failures.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying Redis error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class RedisClient:
    """Async Redis client over a shared connection pool.

    Values are stored as JSON so a string that looks like a number comes
    back as the same string.

    Example:
        client = RedisClient(settings)
        await client.connect()
        await client.set("key", "value", expire_seconds=60)
        value = await client.get("key")
        await client.close()
    """

    def __init__(self, settings: "Settings") -> None:
        self._settings = settings
        self._pool: Optional[ConnectionPool] = None
        self._redis: Optional[Redis] = None

    async def connect(self) -> None:
        """Create the Redis connection pool and ping the server.

        Raises:
            RedisError: If connection fails.
        """
        try:
            self._pool = ConnectionPool.from_url(
                self._settings.redis.url,
                max_connections=self._settings.redis.max_connections,
                decode_responses=True,
            )
            self._redis = Redis(connection_pool=self._pool)
            await self._redis.ping()
        except BaseRedisError as e:
            raise RedisError("Failed to connect to Redis", e) from e

        logger.info(
            "Redis connected: %s:%s/%s",
            self._settings.redis.host,
            self._settings.redis.port,
            self._settings.redis.database,
        )

    async def close(self) -> None:
        """Close the Redis connection pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None

    def _ensure_connected(self) -> Redis:
        if self._redis is None:
            raise RedisError("Redis client not connected. Call connect() first.")
        return self._redis

    @staticmethod
    def _serialize(value: Any) -> str:
        return json.dumps(value, ensure_ascii=False, default=str)

    @staticmethod
    def _deserialize(value: Optional[str]) -> Any:
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            # Written by something other than this client
            return value

    async def set(
        self,
        key: str,
        value: Any,
        expire_seconds: Optional[int] = None,
    ) -> None:
        """Set a key, replacing any previous value.

        Args:
            key: The key.
            value: Any JSON-serializable value.
            expire_seconds: Optional expiration time in seconds.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            await redis.set(key, self._serialize(value), ex=expire_seconds)
        except BaseRedisError as e:
            raise RedisError(f"Failed to set key: {key}", e) from e

    async def get(self, key: str) -> Any:
        """Get a value by key, or None if it is missing or expired.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            return self._deserialize(await redis.get(key))
        except BaseRedisError as e:
            raise RedisError(f"Failed to get key: {key}", e) from e

    async def delete(self, key: str) -> bool:
        """Delete a key.

        Returns:
            True if the key was deleted, False if it didn't exist.

        Raises:
            RedisError: If the operation fails.
        """
        redis = self._ensure_connected()
        try:
            return await redis.delete(key) > 0
        except BaseRedisError as e:
            raise RedisError(f"Failed to delete key: {key}", e) from e

    async def ping(self) -> bool:
        """Check if Redis is reachable."""
        try:
            redis = self._ensure_connected()
            await redis.ping()
            return True
        except (RedisError, BaseRedisError):
            return False


async def init_redis(settings: "Settings") -> RedisClient:
    """Initialize the global Redis client at application startup.

    Raises:
        RedisError: If connection fails.
    """
    global _redis_client

    client = RedisClient(settings)
    await client.connect()
    _redis_client = client
    return client


async def close_redis() -> None:
    """Close the global Redis client at application shutdown."""
    global _redis_client

    if _redis_client is not None:
        await _redis_client.close()
        _redis_client = None


def get_redis() -> RedisClient:
    """Get the global Redis client.

    Raises:
        RedisError: If Redis has not been initialized.
    """
    if _redis_client is None:
        raise RedisError("Redis not initialized. Call init_redis() first.")
    return _redis_client
