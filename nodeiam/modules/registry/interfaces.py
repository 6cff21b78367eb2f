"""Capability interfaces following Black Box Design principles."""
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Type, TypeVar, runtime_checkable


T = TypeVar("T")


@dataclass(frozen=True)
class Credentials:
    """Username and secret submitted for authentication."""
    principal: str
    secret: Optional[str] = field(default=None, repr=False)


@dataclass
class IamConfiguration:
    """IAM configuration produced by a node: the repositories it exposes."""
    node_id: Optional[str] = None
    user_repository: Any = None
    group_repository: Any = None
    company_repository: Any = None

    @property
    def is_empty(self) -> bool:
        """True when no repository is available."""
        return (
            self.user_repository is None
            and self.group_repository is None
            and self.company_repository is None
        )


@runtime_checkable
class IdentityServicePlugin(Protocol):
    """Capability of a node able to authenticate users."""

    async def accept(self, attempt: Any, node_id: str) -> bool:
        """
        Tell whether this node handles the attempt.

        Args:
            attempt: Opaque authentication attempt
            node_id: Node being consulted

        Returns:
            True if the node should authenticate the attempt
        """
        ...

    async def authenticate(self, attempt: Any, node_id: str, primary: bool) -> Any:
        """
        Authenticate the attempt against the node.

        Args:
            attempt: Opaque authentication attempt
            node_id: Node performing the authentication
            primary: True when the node acts as the primary node

        Returns:
            Backend specific authentication result
        """
        ...


@runtime_checkable
class IamConfigurationProvider(Protocol):
    """Capability of a node able to produce an IAM configuration."""

    async def get_configuration(self, node_id: str) -> Any:
        """Build the IAM configuration of the node."""
        ...


class Registry(Protocol):
    """Protocol for node registries resolving capabilities from node identifiers."""

    def resolve(self, node_id: Optional[str], capability: Type[T]) -> Optional[T]:
        """
        Resolve the plugin of a node implementing a capability.

        Returns:
            The plugin, or None when the node is unknown or lacks the capability
        """
        ...

    def resolve_required(self, node_id: Optional[str], capability: Type[T]) -> T:
        """
        Resolve the plugin of a node implementing a capability.

        Raises:
            BackendUnavailableError: When the node cannot be resolved
        """
        ...
