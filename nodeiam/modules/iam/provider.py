"""
Identity and Access Management provider based on nodes.

A primary node is used to fetch user details. Secondary nodes can authenticate
some users before the primary, when they accept their login.
"""

import logging
from typing import Any

from ...exceptions import NoCapableNodeError
from ..registry.registry import IDENTITY_SERVICE, NodeRegistry
from .cache import ConfigCache
from .delegator import NodeDelegator
from .nodes import NodeSettings

logger = logging.getLogger(__name__)

# Placeholder primary persisted when no identity node is registered at install time
EMPTY_NODE = "empty"


class NodeBasedIamProvider:
    """
    Facade over the delegator and the configuration cache.

    This facade hides how nodes are selected and how their configuration is
    cached, and provides a stable interface for the security layer.
    """

    def __init__(
        self,
        delegator: NodeDelegator,
        cache: ConfigCache,
        settings: NodeSettings,
        registry: NodeRegistry,
        install_strict: bool = False,
    ):
        """
        Initialize with injected components.

        Args:
            delegator: Authentication delegator
            cache: IAM configuration cache
            settings: Primary and secondary node settings
            registry: Registry used to pick the primary node at install time
            install_strict: Raise NoCapableNodeError at install time when no
                identity node is registered, instead of persisting a placeholder
        """
        self.delegator = delegator
        self.cache = cache
        self.settings = settings
        self.registry = registry
        self.install_strict = install_strict

    @property
    def key(self) -> str:
        """Feature key of this provider."""
        return self.settings.feature_key

    async def authenticate(self, attempt: Any) -> Any:
        """Authenticate an attempt with the node in charge of it."""
        return await self.delegator.authenticate(attempt)

    async def get_configuration(self) -> Any:
        """Get the cached IAM configuration of the primary node."""
        return await self.cache.get_configuration()

    def invalidate(self) -> None:
        """Drop the cached IAM configuration."""
        self.cache.invalidate()

    async def install(self) -> str:
        """
        Pick the first registered identity node as primary and persist it.

        Returns:
            The persisted primary node id

        Raises:
            NoCapableNodeError: When no identity node is registered and
                install_strict is set
        """
        try:
            primary = self.registry.find_first_capable(IDENTITY_SERVICE)
        except NoCapableNodeError:
            if self.install_strict:
                raise
            logger.warning(f"No node implements {IDENTITY_SERVICE}, {EMPTY_NODE} IAM is used")
            primary = EMPTY_NODE

        logger.info(
            f"{self.key} will use {primary} as primary node. You can override this default"
            f" choice by setting {self.settings.primary_key}='service:id:some:node'"
        )
        await self.settings.set_primary(primary)
        self.cache.invalidate()
        return primary
