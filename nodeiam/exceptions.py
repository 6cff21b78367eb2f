"""Exceptions raised by the IAM node core and its registry."""

from typing import Optional


class IamNodeError(Exception):
    """Base class for IAM node errors."""


class NodeNotFoundError(IamNodeError):
    """A node is not registered or does not provide the requested capability."""

    def __init__(self, node_id: Optional[str], message: Optional[str] = None):
        self.node_id = node_id
        super().__init__(message or f"IAM node {node_id} does not exist")


class BackendUnavailableError(NodeNotFoundError):
    """The primary node cannot serve the request and no fallback is configured."""

    def __init__(self, node_id: Optional[str], capability: Optional[str] = None):
        self.capability = capability
        if node_id is None:
            message = "No primary IAM node is configured"
        elif capability:
            message = f"IAM node {node_id} is not available as {capability}"
        else:
            message = f"IAM node {node_id} is not available"
        super().__init__(node_id, message)


class NoCapableNodeError(IamNodeError):
    """No registered node implements the identity service capability."""

    def __init__(self, service_id: str):
        self.service_id = service_id
        super().__init__(f"No registered node implements {service_id}")
