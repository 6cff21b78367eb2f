"""
Node registry.

Nodes form a hierarchy through their ``refined`` link: an instance node such as
``service:id:ldap:dig`` refines the tool node ``service:id:ldap``, which refines
the service node ``service:id``. Plugins are registered against any node of the
hierarchy, and resolving a node walks up the chain until a plugin implementing
the requested capability is found.
"""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, field_validator

from ...exceptions import BackendUnavailableError, NoCapableNodeError
from .interfaces import IdentityServicePlugin

logger = logging.getLogger(__name__)

T = TypeVar("T")

IDENTITY_SERVICE = "service:id"


class NodeRecord(BaseModel):
    """A registered node."""

    id: str
    refined: Optional[str] = None
    name: Optional[str] = None

    @field_validator("id", "refined")
    @classmethod
    def validate_node_id(cls, v: Optional[str]) -> Optional[str]:
        """Node ids are listed in comma separated settings, so commas are rejected."""
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("node id must not be blank")
        if "," in v:
            raise ValueError(f"node id must not contain ',': {v}")
        return v


class NodeRegistry:
    """
    In-process registry of nodes and their plugins.

    This is a black box that:
    - Stores node records and their refinement links
    - Maps node ids to plugin implementations
    - Resolves capabilities by walking the refinement chain
    """

    def __init__(self):
        self._nodes: Dict[str, NodeRecord] = {}
        self._plugins: Dict[str, Any] = {}

    def register_node(
        self, node_id: str, refined: Optional[str] = None, name: Optional[str] = None
    ) -> NodeRecord:
        """
        Register or replace a node.

        Args:
            node_id: Node identifier
            refined: Identifier of the node this one refines
            name: Display name

        Returns:
            The stored record

        Raises:
            pydantic.ValidationError: If an identifier is blank or contains a comma
        """
        record = NodeRecord(id=node_id, refined=refined, name=name)
        self._nodes[record.id] = record
        return record

    def register_plugin(self, node_id: str, plugin: Any) -> None:
        """
        Attach a plugin to a node, registering the node when unknown.

        An unknown node is registered as refining its colon-delimited parent,
        so "service:id:ldap" refines "service:id"; missing ancestors are
        registered the same way.
        """
        record = self._ensure_node(node_id)
        self._plugins[record.id] = plugin
        logger.debug(f"Registered plugin {type(plugin).__name__} for node {record.id}")

    def _ensure_node(self, node_id: str) -> NodeRecord:
        record = self._nodes.get(node_id.strip())
        if record is not None:
            return record

        record = NodeRecord(id=node_id)
        parent = record.id.rsplit(":", 1)[0] if ":" in record.id else None
        if parent:
            self._ensure_node(parent)
        return self.register_node(record.id, refined=parent or None)

    def unregister_node(self, node_id: str) -> None:
        """Remove a node and its plugin."""
        self._nodes.pop(node_id, None)
        self._plugins.pop(node_id, None)

    def get_node(self, node_id: str) -> Optional[NodeRecord]:
        """Get a node record."""
        return self._nodes.get(node_id)

    def _chain(self, node_id: str) -> List[str]:
        """Node id followed by the ids it refines, nearest first."""
        chain = []
        current = node_id
        while current is not None and current not in chain:
            chain.append(current)
            record = self._nodes.get(current)
            current = record.refined if record else None
        return chain

    def resolve(self, node_id: Optional[str], capability: Type[T]) -> Optional[T]:
        """
        Resolve the plugin of a node implementing a capability.

        Args:
            node_id: Node identifier, may be None when unset
            capability: Capability protocol class

        Returns:
            The nearest plugin implementing the capability, or None
        """
        if not node_id or node_id not in self._nodes:
            return None

        for key in self._chain(node_id):
            plugin = self._plugins.get(key)
            if plugin is not None and isinstance(plugin, capability):
                return plugin
        return None

    def resolve_required(self, node_id: Optional[str], capability: Type[T]) -> T:
        """
        Resolve the plugin of a node implementing a capability.

        Raises:
            BackendUnavailableError: When the node cannot be resolved
        """
        plugin = self.resolve(node_id, capability)
        if plugin is None:
            raise BackendUnavailableError(node_id, capability.__name__)
        return plugin

    def find_nodes(self, service_id: str) -> List[NodeRecord]:
        """
        Find instance nodes of a service, ordered by id.

        Instance nodes are two refinements below the service: a node refining a
        tool node which itself refines the service node.
        """
        nodes = []
        for record in self._nodes.values():
            chain = self._chain(record.id)
            if len(chain) > 2 and chain[2] == service_id:
                nodes.append(record)
        return sorted(nodes, key=lambda r: r.id)

    def find_first_capable(self, service_id: str = IDENTITY_SERVICE) -> str:
        """
        Find the first instance node of a service providing identity services.

        Returns:
            The node identifier

        Raises:
            NoCapableNodeError: When no such node is registered
        """
        for record in self.find_nodes(service_id):
            if self.resolve(record.id, IdentityServicePlugin) is not None:
                return record.id
        raise NoCapableNodeError(service_id)
