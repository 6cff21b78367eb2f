"""
Storage Module - Black Box Interface

Purpose: Own the Redis connection used by the settings store and cache invalidation
Interface: connect(), disconnect()
Hidden: Connection URL, password handling, response decoding

Can be replaced with any storage backend without affecting other modules.
"""

from typing import Optional

import redis.asyncio as redis

from ...config.provider import RedisConfig


class StorageModule:
    """Black box storage abstraction."""

    def __init__(self, redis_config: RedisConfig):
        """Initialize storage with Redis configuration."""
        self.url = redis_config.url
        self.password = redis_config.password
        self._client: Optional[redis.Redis] = None

    async def connect(self) -> redis.Redis:
        """Get storage connection."""
        if not self._client:
            self._client = redis.from_url(
                self.url,
                password=self.password,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def disconnect(self):
        """Close storage connection."""
        if self._client:
            await self._client.aclose()
            self._client = None


__all__ = ["StorageModule"]
