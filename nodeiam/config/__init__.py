"""Configuration providers."""

from .provider import ConfigProvider, EnvConfigProvider, IamNodeConfig, RedisConfig

__all__ = ["ConfigProvider", "EnvConfigProvider", "IamNodeConfig", "RedisConfig"]
