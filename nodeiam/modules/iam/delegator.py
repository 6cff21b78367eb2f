"""
Authentication delegation across IAM nodes.

Secondary nodes are consulted in order and the first one accepting the attempt
authenticates it. When none accepts, the primary node authenticates it.
"""

import logging
from typing import Any, Optional

from ..registry.interfaces import IdentityServicePlugin, Registry
from .nodes import NodeSettings

logger = logging.getLogger(__name__)


class NodeDelegator:
    """
    Delegates authentication to the node in charge of the attempt.

    Holds no mutable state and may be shared by concurrent requests.
    """

    def __init__(
        self,
        registry: Registry,
        settings: NodeSettings,
        fallback: Optional[Any] = None,
    ):
        """
        Initialize with injected dependencies.

        Args:
            registry: Registry resolving node ids to plugins
            settings: Primary and secondary node settings
            fallback: Provider used when the primary node is not available.
                When None, a missing primary raises BackendUnavailableError.
        """
        self.registry = registry
        self.settings = settings
        self.fallback = fallback

    async def authenticate(self, attempt: Any) -> Any:
        """
        Authenticate an attempt with the first accepting secondary node, or the primary.

        Args:
            attempt: Opaque authentication attempt, passed through unchanged

        Returns:
            The result of the node that authenticated the attempt

        Raises:
            BackendUnavailableError: When the primary node is not available and
                no fallback provider is configured
        """
        for node_id in await self.settings.get_secondary():
            plugin = self.registry.resolve(node_id, IdentityServicePlugin)
            if plugin is None:
                # Missing secondary is only a skipped candidate
                logger.info(f"Secondary IAM node {node_id} does not exist")
            elif await plugin.accept(attempt, node_id):
                return await plugin.authenticate(attempt, node_id, False)

        return await self._authenticate_primary(attempt)

    async def _authenticate_primary(self, attempt: Any) -> Any:
        primary = await self.settings.get_primary()
        if self.fallback is None:
            plugin = self.registry.resolve_required(primary, IdentityServicePlugin)
            return await plugin.authenticate(attempt, primary, True)

        plugin = self.registry.resolve(primary, IdentityServicePlugin)
        if plugin is None:
            logger.info(f"Primary IAM node {primary} does not exist, use empty IAM")
            return await self.fallback.authenticate(attempt, primary, True)
        return await plugin.authenticate(attempt, primary, True)
