"""
Key-value configuration stores.

Values are plain strings addressed by colon-delimited keys such as
``feature:iam:node:primary``. An environment variable derived from the key
(``FEATURE_IAM_NODE_PRIMARY``) overrides the stored value, so operators can
pin a node without touching the store.
"""

import logging
import os
import re
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class KeyValueConfig(Protocol):
    """Protocol for configuration stores injected into the IAM core."""

    async def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a configuration value.

        Args:
            key: Configuration key
            default: Value returned when the key is unset

        Returns:
            The stored value, or default
        """
        ...

    async def put(self, key: str, value: str) -> None:
        """Store a configuration value."""
        ...

    async def delete(self, key: str) -> None:
        """Remove a configuration value."""
        ...


def env_override_name(key: str) -> str:
    """
    Environment variable name overriding a configuration key.

    Example:
        >>> env_override_name("feature:iam:node:primary")
        'FEATURE_IAM_NODE_PRIMARY'
    """
    return re.sub(r"[^A-Za-z0-9]", "_", key).upper()


def _env_override(key: str) -> Optional[str]:
    return os.environ.get(env_override_name(key))


class InMemoryConfigStore:
    """Process-local configuration store."""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(values or {})

    async def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        override = _env_override(key)
        if override is not None:
            return override
        return self._values.get(key, default)

    async def put(self, key: str, value: str) -> None:
        self._values[key] = value

    async def delete(self, key: str) -> None:
        self._values.pop(key, None)


class RedisConfigStore:
    """
    Configuration store backed by a Redis hash.

    Follows the same patterns as the other Redis-backed modules:
    - Receives redis_client in __init__
    - Uses one well-known key (system:configuration) for all values
    """

    HASH_KEY = "system:configuration"

    def __init__(self, redis_client, hash_key: str = HASH_KEY):
        """
        Initialize Redis configuration store.

        Args:
            redis_client: Async Redis client
            hash_key: Redis hash holding configuration values
        """
        self.redis = redis_client
        self.hash_key = hash_key

    async def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        override = _env_override(key)
        if override is not None:
            return override

        value = await self.redis.hget(self.hash_key, key)
        if value is None:
            return default

        # Handle bytes from Redis
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def put(self, key: str, value: str) -> None:
        await self.redis.hset(self.hash_key, key, value)
        logger.debug(f"Stored configuration {key}")

    async def delete(self, key: str) -> None:
        await self.redis.hdel(self.hash_key, key)
        logger.debug(f"Deleted configuration {key}")
