# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Cache infrastructure using Redis.

Example:
    from src.infrastructure.cache import init_redis, get_redis, close_redis

    await init_redis(settings)
    redis = get_redis()
    await redis.set("key", {"a": 1}, expire_seconds=60)
    await close_redis()
"""

from src.infrastructure.cache.redis_client import (
    RedisClient,
    RedisError,
    close_redis,
    get_redis,
    init_redis,
    temp_password_key,
)

__all__ = [
    "RedisClient",
    "RedisError",
    "close_redis",
    "get_redis",
    "init_redis",
    "temp_password_key",
]
