"""
Cross-process invalidation of the IAM configuration cache over Redis pub/sub.

Any process publishing on the invalidation channel makes every listening
process drop its cached configuration.
"""

import asyncio
import json
import logging
from datetime import UTC, datetime
from typing import Optional

from ...config.provider import DEFAULT_INVALIDATION_CHANNEL
from .cache import ConfigCache

logger = logging.getLogger(__name__)


async def publish_invalidation(
    redis_client, channel: str = DEFAULT_INVALIDATION_CHANNEL, reason: Optional[str] = None
) -> int:
    """
    Ask every listening process to invalidate its IAM configuration cache.

    Args:
        redis_client: Async Redis client
        channel: Invalidation channel
        reason: Optional reason, logged by the listeners

    Returns:
        Number of subscribers that received the message
    """
    event = {
        "type": "iam.configuration.invalidate",
        "reason": reason,
        "timestamp": datetime.now(UTC).isoformat(),
    }
    return await redis_client.publish(channel, json.dumps(event))


class CacheInvalidationListener:
    """Invalidates a ConfigCache whenever a message arrives on the invalidation channel."""

    def __init__(self, redis_client, cache: ConfigCache, channel: str = DEFAULT_INVALIDATION_CHANNEL):
        """
        Initialize invalidation listener.

        Args:
            redis_client: Async Redis client
            cache: Cache to invalidate
            channel: Invalidation channel
        """
        self.redis = redis_client
        self.cache = cache
        self.channel = channel
        self._task: Optional[asyncio.Task] = None

    def handle_message(self, message: dict) -> bool:
        """
        Invalidate the cache for a pub/sub message.

        Returns:
            True if the message triggered an invalidation
        """
        if message.get("type") != "message":
            return False

        reason = None
        data = message.get("data")
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        try:
            reason = json.loads(data).get("reason")
        except (TypeError, ValueError, AttributeError):
            logger.debug(f"Invalidation message without JSON payload on {self.channel}")

        logger.info(f"Invalidating IAM node configuration (reason: {reason or 'unspecified'})")
        self.cache.invalidate()
        return True

    async def listen(self) -> None:
        """Listen for invalidation messages until cancelled."""
        pubsub = self.redis.pubsub()
        subscribed = False
        try:
            await pubsub.subscribe(self.channel)
            subscribed = True
            logger.info(f"Subscribed to channel: {self.channel}")

            async for message in pubsub.listen():
                self.handle_message(message)

        except asyncio.CancelledError:
            logger.info(f"Stopped listening on {self.channel}")
            raise
        finally:
            if subscribed:
                await pubsub.unsubscribe(self.channel)
            await pubsub.aclose()

    def start(self) -> asyncio.Task:
        """Start listening in a background task."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.listen())
            self._task.add_done_callback(self._log_failure)
        return self._task

    def _log_failure(self, task: asyncio.Task) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Invalidation listener on {self.channel} failed: {task.exception()}")

    async def stop(self) -> None:
        """Stop the background listener."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.debug(f"Invalidation listener on {self.channel} had stopped with error: {e}")
