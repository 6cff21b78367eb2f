"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol


DEFAULT_FEATURE_KEY = "feature:iam:node"
DEFAULT_INVALIDATION_CHANNEL = "iam-node-configuration:invalidate"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class IamNodeConfig:
    """IAM node feature configuration."""
    feature_key: str
    strict_primary: bool
    install_strict: bool
    cache_ttl: Optional[float]
    invalidation_channel: str
    config_backend: str

    @property
    def primary_key(self) -> str:
        """Configuration key holding the primary node."""
        return f"{self.feature_key}:primary"

    @property
    def secondary_key(self) -> str:
        """Configuration key holding the secondary nodes."""
        return f"{self.feature_key}:secondary"


@dataclass
class RedisConfig:
    """Redis connection configuration."""
    url: str
    password: Optional[str]


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_iam_node_config(self) -> IamNodeConfig:
        """Get IAM node configuration."""
        ...

    def get_redis_config(self) -> RedisConfig:
        """Get Redis configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_iam_node_config(self) -> IamNodeConfig:
        """Get IAM node configuration from environment variables."""
        ttl_env = os.getenv("IAM_NODE_CACHE_TTL")
        cache_ttl = float(ttl_env) if ttl_env else None
        if cache_ttl is not None and cache_ttl <= 0:
            raise ValueError(
                f"IAM_NODE_CACHE_TTL must be a positive number of seconds, got {ttl_env!r}"
            )

        config_backend = os.getenv("IAM_NODE_CONFIG_BACKEND", "memory").lower()
        if config_backend not in ("memory", "redis"):
            raise ValueError(
                f"IAM_NODE_CONFIG_BACKEND must be 'memory' or 'redis', got {config_backend!r}"
            )

        return IamNodeConfig(
            feature_key=os.getenv("IAM_NODE_FEATURE_KEY", DEFAULT_FEATURE_KEY),
            strict_primary=_env_flag("IAM_NODE_STRICT_PRIMARY"),
            install_strict=_env_flag("IAM_NODE_INSTALL_STRICT"),
            cache_ttl=cache_ttl,
            invalidation_channel=os.getenv(
                "IAM_NODE_INVALIDATION_CHANNEL", DEFAULT_INVALIDATION_CHANNEL
            ),
            config_backend=config_backend,
        )

    def get_redis_config(self) -> RedisConfig:
        """Get Redis configuration from environment variables."""
        return RedisConfig(
            url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            password=os.getenv("REDIS_PASSWORD"),
        )
