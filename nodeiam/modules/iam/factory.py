"""
IAM node factory following Black Box Design principles.

This factory:
- Constructs the IAM node stack based on configuration
- Wires dependencies together
- Returns only the provider facade (hiding implementation)
"""

import logging
from typing import Any, Optional

from ...config.provider import ConfigProvider
from ..registry.empty import EmptyIamProvider
from ..registry.registry import NodeRegistry
from ..settings.store import InMemoryConfigStore, KeyValueConfig, RedisConfigStore
from ..storage import StorageModule
from .cache import ConfigCache
from .delegator import NodeDelegator
from .invalidation import CacheInvalidationListener
from .nodes import NodeSettings
from .provider import NodeBasedIamProvider

logger = logging.getLogger(__name__)


class IamNodeFactory:
    """
    Factory for building the IAM node stack.

    This is the composition root that:
    - Creates the settings store, delegator and cache
    - Wires them together via dependency injection
    - Returns only the public interface
    """

    @staticmethod
    def build(
        config_provider: ConfigProvider,
        registry: NodeRegistry,
        redis_client: Optional[Any] = None,
    ) -> NodeBasedIamProvider:
        """
        Build the complete IAM node stack.

        Args:
            config_provider: Configuration provider
            registry: Registry of nodes and their plugins
            redis_client: Optional Redis client for the settings store

        Returns:
            NodeBasedIamProvider facade (hides all implementation details)
        """
        iam_config = config_provider.get_iam_node_config()

        # Determine which settings store to use
        if iam_config.config_backend == "redis":
            if redis_client is None:
                raise ValueError("IAM_NODE_CONFIG_BACKEND=redis requires a Redis client")
            logger.info("Building IAM node stack with Redis settings store")
            store: KeyValueConfig = RedisConfigStore(redis_client)
        else:
            logger.info("Building IAM node stack with in-memory settings store")
            store = InMemoryConfigStore()

        if iam_config.strict_primary:
            logger.info("Missing primary IAM node will fail authentication")

        return IamNodeFactory._assemble(
            registry,
            store,
            feature_key=iam_config.feature_key,
            strict=iam_config.strict_primary,
            install_strict=iam_config.install_strict,
            ttl=iam_config.cache_ttl,
        )

    @staticmethod
    def build_storage(config_provider: ConfigProvider) -> StorageModule:
        """Create the storage module owning the Redis connection."""
        return StorageModule(config_provider.get_redis_config())

    @staticmethod
    async def build_with_storage(
        config_provider: ConfigProvider,
        registry: NodeRegistry,
        storage: StorageModule,
    ) -> NodeBasedIamProvider:
        """
        Build the IAM node stack, connecting storage when the Redis backend is used.

        Args:
            config_provider: Configuration provider
            registry: Registry of nodes and their plugins
            storage: Storage module, connected only for the Redis backend

        Returns:
            NodeBasedIamProvider facade
        """
        redis_client = None
        if config_provider.get_iam_node_config().config_backend == "redis":
            redis_client = await storage.connect()
        return IamNodeFactory.build(config_provider, registry, redis_client)

    @staticmethod
    def build_for_testing(
        registry: NodeRegistry,
        store: Optional[KeyValueConfig] = None,
        strict: bool = False,
        ttl: Optional[float] = None,
    ) -> NodeBasedIamProvider:
        """
        Build the IAM node stack for testing with an in-memory store.

        Args:
            registry: Registry of nodes and their plugins
            store: Settings store, a fresh in-memory store when None
            strict: Fail authentication when the primary node is missing
            ttl: Cache TTL in seconds

        Returns:
            NodeBasedIamProvider for testing
        """
        return IamNodeFactory._assemble(
            registry,
            store if store is not None else InMemoryConfigStore(),
            strict=strict,
            ttl=ttl,
        )

    @staticmethod
    def build_invalidation_listener(
        config_provider: ConfigProvider,
        provider: NodeBasedIamProvider,
        redis_client: Any,
    ) -> CacheInvalidationListener:
        """
        Build the listener invalidating the provider cache on pub/sub messages.

        Args:
            config_provider: Configuration provider
            provider: Provider whose cache is invalidated
            redis_client: Async Redis client

        Returns:
            CacheInvalidationListener, not started
        """
        channel = config_provider.get_iam_node_config().invalidation_channel
        return CacheInvalidationListener(redis_client, provider.cache, channel=channel)

    @staticmethod
    def _assemble(
        registry: NodeRegistry,
        store: KeyValueConfig,
        feature_key: Optional[str] = None,
        strict: bool = False,
        install_strict: bool = False,
        ttl: Optional[float] = None,
    ) -> NodeBasedIamProvider:
        settings = NodeSettings(store, feature_key) if feature_key else NodeSettings(store)
        empty = EmptyIamProvider()

        delegator = NodeDelegator(registry, settings, fallback=None if strict else empty)
        cache = ConfigCache(registry, settings, fallback=empty, ttl=ttl)

        return NodeBasedIamProvider(
            delegator,
            cache,
            settings,
            registry,
            install_strict=install_strict,
        )
