"""
IAM Module - Black Box Interface

Purpose: Pick the node authenticating a request and cache the primary node configuration
Interface: authenticate(), get_configuration(), invalidate(), install()
Hidden: Secondary/primary precedence, single-flight caching, fallback policy

The identity backends themselves live behind the registry and can be swapped
(LDAP, SQL, SSO) without affecting this module.
"""

from .cache import ConfigCache
from .delegator import NodeDelegator
from .factory import IamNodeFactory
from .invalidation import CacheInvalidationListener, publish_invalidation
from .nodes import NodeSettings, parse_secondary
from .provider import EMPTY_NODE, NodeBasedIamProvider

__all__ = [
    "CacheInvalidationListener",
    "ConfigCache",
    "EMPTY_NODE",
    "IamNodeFactory",
    "NodeBasedIamProvider",
    "NodeDelegator",
    "NodeSettings",
    "parse_secondary",
    "publish_invalidation",
]
