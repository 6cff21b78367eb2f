"""
Settings Module - Black Box Interface

Purpose: Read and write the IAM feature settings
Interface: KeyValueConfig.get(), put(), delete()
Hidden: Storage location, environment overrides

Replaceable with any key-value source (database table, Consul, etcd).
"""

from .store import InMemoryConfigStore, KeyValueConfig, RedisConfigStore, env_override_name

__all__ = ["KeyValueConfig", "InMemoryConfigStore", "RedisConfigStore", "env_override_name"]
