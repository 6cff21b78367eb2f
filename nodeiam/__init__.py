"""
nodeiam - Node-based Identity and Access Management

Delegates authentication to identity backends ("nodes") picked at runtime
from a registry, and caches the primary node's IAM configuration.

Architecture:
- Each module is self-contained with clear interfaces
- Backends are reached only through capability protocols
- Configuration access is injected, never global
- All communication through defined interfaces

Modules:
- iam: Delegation, configuration cache and the provider facade
- registry: Node records, capability resolution and the empty provider
- settings: Key-value configuration stores
- storage: Redis connection handling
"""

__version__ = "1.0.0"
