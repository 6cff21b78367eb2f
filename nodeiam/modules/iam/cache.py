"""
IAM configuration cache.

Only the primary node provides the IAM configuration. Building it is expensive,
so it is computed once and served from memory until invalidated.

Lifecycle of the cached entry:
- EMPTY -> COMPUTING -> READY, the primary node built the configuration
- EMPTY -> COMPUTING -> READY(fallback), the primary node is not available
- READY -> EMPTY on invalidate() or TTL expiry
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from ..registry.empty import EmptyIamProvider
from ..registry.interfaces import IamConfigurationProvider, Registry
from .nodes import NodeSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Entry:
    value: Any
    node_id: Optional[str]
    computed_at: float


class ConfigCache:
    """
    Single-flight cache of the primary node IAM configuration.

    Concurrent callers finding the cache empty wait on one computation and all
    receive its result. A missing primary never raises: the fallback
    configuration is cached instead, until the next invalidation.
    """

    def __init__(
        self,
        registry: Registry,
        settings: NodeSettings,
        fallback: Optional[Any] = None,
        ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize configuration cache.

        Args:
            registry: Registry resolving node ids to plugins
            settings: Primary and secondary node settings
            fallback: Provider of the configuration used when the primary node
                is not available (default: EmptyIamProvider)
            ttl: Seconds a computed configuration stays valid, None for no expiry
            clock: Monotonic clock used for TTL expiry
        """
        self.registry = registry
        self.settings = settings
        self.fallback = fallback if fallback is not None else EmptyIamProvider()
        self.ttl = ttl
        self._clock = clock
        self._entry: Optional[_Entry] = None
        self._epoch = 0
        self._lock = asyncio.Lock()

    @property
    def epoch(self) -> int:
        """Number of invalidations so far."""
        return self._epoch

    @property
    def is_ready(self) -> bool:
        """True when a live configuration is cached."""
        return self._entry is not None and not self._expired(self._entry)

    def _expired(self, entry: _Entry) -> bool:
        return self.ttl is not None and self._clock() - entry.computed_at >= self.ttl

    def _live_entry(self) -> Optional[_Entry]:
        entry = self._entry
        if entry is None:
            return None
        if self._expired(entry):
            logger.debug(f"IAM configuration of node {entry.node_id} expired")
            self._entry = None
            self._epoch += 1
            return None
        return entry

    def invalidate(self) -> None:
        """Drop the cached configuration; the next read computes it again."""
        self._epoch += 1
        self._entry = None
        logger.info("IAM node configuration cache invalidated")

    async def get_configuration(self) -> Any:
        """
        Get the IAM configuration of the primary node.

        Returns:
            The cached configuration, computed on first call after an invalidation
        """
        _, value = await self._load()
        return value

    async def ensure_computed(self) -> bool:
        """
        Make sure a configuration is cached.

        Returns:
            True if this call computed the configuration, False if it was already cached
        """
        computed, _ = await self._load()
        return computed

    async def _load(self) -> Tuple[bool, Any]:
        entry = self._live_entry()
        if entry is not None:
            return False, entry.value

        async with self._lock:
            # Another caller may have computed it while we waited
            entry = self._live_entry()
            if entry is not None:
                return False, entry.value

            epoch = self._epoch
            node_id, value = await self._refresh()
            if epoch == self._epoch:
                self._entry = _Entry(value=value, node_id=node_id, computed_at=self._clock())
            else:
                logger.info(
                    f"IAM configuration of node {node_id} invalidated while computing, not cached"
                )
            return True, value

    async def _refresh(self) -> Tuple[Optional[str], Any]:
        # Only primary node is used for repository configuration
        primary = await self.settings.get_primary()
        provider = self.registry.resolve(primary, IamConfigurationProvider)
        if provider is None:
            logger.error(f"Primary IAM node {primary} does not exist, use empty IAM")
            return primary, await self.fallback.get_configuration(primary)

        logger.info(f"Computing IAM configuration of primary node {primary}")
        return primary, await provider.get_configuration(primary)
