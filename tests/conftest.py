"""
Shared pytest fixtures for nodeiam tests.

This module provides common fixtures including:
- Fake identity and configuration plugins with call recording
- A registry with the LDAP node hierarchy used across tests
- Settings stores and Redis mocks
"""

import os
import sys
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from nodeiam.modules.iam.nodes import NodeSettings
from nodeiam.modules.registry import Credentials, IamConfiguration, NodeRegistry
from nodeiam.modules.settings import InMemoryConfigStore

PRIMARY = "service:id:ldap:dig"
SECONDARY = "service:id:ldap:adu"


# =============================================================================
# Plugin fakes
# =============================================================================

class FakeIdentityPlugin:
    """
    Identity plugin whose accept/authenticate are AsyncMocks.

    Mocks are instance attributes so runtime protocol checks see them.
    """

    def __init__(self, accepts: bool = False, result: Any = None):
        self.accept = AsyncMock(return_value=accepts)
        self.authenticate = AsyncMock(return_value=result)


class FakeConfigurationPlugin:
    """Configuration plugin whose get_configuration is an AsyncMock."""

    def __init__(self, configuration: Optional[IamConfiguration] = None):
        self.get_configuration = AsyncMock(
            return_value=configuration or IamConfiguration(user_repository=MagicMock())
        )


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def clean_override_env(monkeypatch):
    """Make sure no operator override leaks into the stores."""
    monkeypatch.delenv("FEATURE_IAM_NODE_PRIMARY", raising=False)
    monkeypatch.delenv("FEATURE_IAM_NODE_SECONDARY", raising=False)


@pytest.fixture
def attempt():
    """An authentication attempt."""
    return Credentials("user1", "secret")


@pytest.fixture
def registry():
    """Registry with the LDAP tool and its two instance nodes, without plugins."""
    registry = NodeRegistry()
    registry.register_node("service:id")
    registry.register_node("service:id:ldap", refined="service:id")
    registry.register_node(PRIMARY, refined="service:id:ldap")
    registry.register_node(SECONDARY, refined="service:id:ldap")
    return registry


@pytest.fixture
def store():
    """In-memory settings store with the default primary."""
    return InMemoryConfigStore({"feature:iam:node:primary": PRIMARY})


@pytest.fixture
def settings(store):
    """Node settings over the in-memory store."""
    return NodeSettings(store)


@pytest.fixture
def mock_redis():
    """Create a mock Redis client."""
    redis = AsyncMock()
    redis.hget = AsyncMock(return_value=None)
    redis.hset = AsyncMock()
    redis.hdel = AsyncMock()
    redis.publish = AsyncMock(return_value=1)
    return redis
