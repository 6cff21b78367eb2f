"""Primary and secondary node settings."""

from typing import Iterable, List, Optional

from ...config.provider import DEFAULT_FEATURE_KEY
from ..settings.store import KeyValueConfig


def parse_secondary(value: Optional[str]) -> List[str]:
    """
    Parse a comma separated list of node ids.

    Blank entries are dropped, order and duplicates are kept.

    Example:
        >>> parse_secondary(" service:id:ldap:adu, ,service:id:ldap:dig")
        ['service:id:ldap:adu', 'service:id:ldap:dig']
    """
    if not value:
        return []
    return [entry.strip() for entry in value.split(",") if entry.strip()]


class NodeSettings:
    """Access to the primary and secondary node settings of the IAM feature."""

    def __init__(self, store: KeyValueConfig, feature_key: str = DEFAULT_FEATURE_KEY):
        """
        Initialize node settings.

        Args:
            store: Key-value configuration store
            feature_key: Prefix of the primary and secondary keys
        """
        self.store = store
        self.feature_key = feature_key
        self.primary_key = f"{feature_key}:primary"
        self.secondary_key = f"{feature_key}:secondary"

    async def get_primary(self) -> Optional[str]:
        """Primary node id, None when unset or blank."""
        value = await self.store.get(self.primary_key)
        if value is None or not value.strip():
            return None
        return value.strip()

    async def get_secondary(self) -> List[str]:
        """Secondary node ids in precedence order. May be empty."""
        return parse_secondary(await self.store.get(self.secondary_key, ""))

    async def set_primary(self, node_id: str) -> None:
        await self.store.put(self.primary_key, node_id)

    async def set_secondary(self, node_ids: Iterable[str]) -> None:
        await self.store.put(self.secondary_key, ",".join(node_ids))
