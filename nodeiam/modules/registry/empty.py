"""Fail-safe IAM provider used when no primary node is available."""

import logging
from typing import Any, Optional

from .interfaces import IamConfiguration

logger = logging.getLogger(__name__)


class EmptyIamProvider:
    """
    IAM provider without any backend.

    Accepts nothing, passes authentication attempts through unchanged and
    exposes an empty configuration.
    """

    async def accept(self, attempt: Any, node_id: Optional[str] = None) -> bool:
        return False

    async def authenticate(
        self, attempt: Any, node_id: Optional[str] = None, primary: bool = True
    ) -> Any:
        logger.debug(f"Empty IAM passes authentication through for node {node_id}")
        return attempt

    async def get_configuration(self, node_id: Optional[str] = None) -> IamConfiguration:
        return IamConfiguration(node_id=node_id)
