"""
Registry Module - Black Box Interface

Purpose: Resolve node identifiers to backend plugins by capability
Interface: resolve(), resolve_required(), find_first_capable()
Hidden: Node hierarchy, plugin storage

Any registry honouring the Registry protocol can replace NodeRegistry.
"""

from .empty import EmptyIamProvider
from .interfaces import (
    Credentials,
    IamConfiguration,
    IamConfigurationProvider,
    IdentityServicePlugin,
    Registry,
)
from .registry import IDENTITY_SERVICE, NodeRecord, NodeRegistry

__all__ = [
    "Credentials",
    "EmptyIamProvider",
    "IDENTITY_SERVICE",
    "IamConfiguration",
    "IamConfigurationProvider",
    "IdentityServicePlugin",
    "NodeRecord",
    "NodeRegistry",
    "Registry",
]
