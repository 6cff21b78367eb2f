"""
Unit tests for the IAM configuration cache.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import PRIMARY, FakeConfigurationPlugin
from nodeiam.modules.iam.cache import ConfigCache
from nodeiam.modules.registry import EmptyIamProvider, IamConfiguration


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def config_plugin(registry):
    """Configuration plugin of the primary node."""
    plugin = FakeConfigurationPlugin(IamConfiguration(node_id=PRIMARY, user_repository="users"))
    registry.register_plugin(PRIMARY, plugin)
    return plugin


@pytest.fixture
def cache(registry, settings):
    """Configuration cache without TTL."""
    return ConfigCache(registry, settings, fallback=EmptyIamProvider())


@pytest.mark.asyncio
async def test_get_configuration(cache, config_plugin):
    """Test the primary node configuration is returned."""
    configuration = await cache.get_configuration()

    assert configuration.user_repository == "users"
    config_plugin.get_configuration.assert_awaited_once_with(PRIMARY)


@pytest.mark.asyncio
async def test_get_configuration_memoized(cache, config_plugin):
    """Test two reads without invalidation compute the configuration once."""
    first = await cache.get_configuration()
    second = await cache.get_configuration()

    assert first is second
    assert config_plugin.get_configuration.await_count == 1


@pytest.mark.asyncio
async def test_cached_read_skips_registry_and_store(cache, config_plugin, registry, store):
    """Test a ready entry is served without consulting the registry or the store."""
    await cache.get_configuration()
    registry.resolve = MagicMock(side_effect=AssertionError("registry consulted"))
    store.get = AsyncMock(side_effect=AssertionError("store consulted"))

    configuration = await cache.get_configuration()

    assert configuration.user_repository == "users"


@pytest.mark.asyncio
async def test_ensure_computed(cache, config_plugin):
    """Test ensure_computed reports whether it computed the configuration."""
    assert cache.is_ready is False

    assert await cache.ensure_computed() is True
    assert cache.is_ready is True
    assert await cache.ensure_computed() is False

    assert config_plugin.get_configuration.await_count == 1


@pytest.mark.asyncio
async def test_get_configuration_no_primary_node(cache, caplog):
    """Test a primary without configuration plugin degrades to the empty configuration."""
    with caplog.at_level("ERROR", logger="nodeiam.modules.iam.cache"):
        configuration = await cache.get_configuration()

    assert configuration.is_empty
    assert configuration.node_id == PRIMARY
    assert f"Primary IAM node {PRIMARY} does not exist" in caplog.text


@pytest.mark.asyncio
async def test_fallback_configuration_is_cached(cache, registry, caplog):
    """Test the degraded configuration is cached and the error logged once."""
    with caplog.at_level("ERROR", logger="nodeiam.modules.iam.cache"):
        first = await cache.get_configuration()
        second = await cache.get_configuration()

    assert first is second
    assert caplog.text.count("does not exist") == 1

    # Registering the node later is not seen until invalidation
    plugin = FakeConfigurationPlugin()
    registry.register_plugin(PRIMARY, plugin)
    assert (await cache.get_configuration()) is first
    plugin.get_configuration.assert_not_awaited()

    cache.invalidate()
    assert (await cache.get_configuration()) is not first
    plugin.get_configuration.assert_awaited_once_with(PRIMARY)


@pytest.mark.asyncio
async def test_get_configuration_unset_primary(cache, store):
    """Test an unset primary never raises."""
    await store.delete("feature:iam:node:primary")

    configuration = await cache.get_configuration()

    assert configuration.is_empty
    assert configuration.node_id is None


@pytest.mark.asyncio
async def test_default_fallback(registry, settings):
    """Test the empty provider is the default fallback."""
    cache = ConfigCache(registry, settings)

    configuration = await cache.get_configuration()

    assert isinstance(configuration, IamConfiguration)
    assert configuration.is_empty


@pytest.mark.asyncio
async def test_invalidate_with_new_primary(cache, registry, store, config_plugin):
    """Test a changed primary is queried exactly once after invalidation."""
    await cache.get_configuration()
    new_plugin = FakeConfigurationPlugin(IamConfiguration(node_id="service:id:ldap:adu"))
    registry.register_plugin("service:id:ldap:adu", new_plugin)
    await store.put("feature:iam:node:primary", "service:id:ldap:adu")

    cache.invalidate()
    first = await cache.get_configuration()
    second = await cache.get_configuration()

    assert first.node_id == "service:id:ldap:adu"
    assert first is second
    new_plugin.get_configuration.assert_awaited_once_with("service:id:ldap:adu")
    assert config_plugin.get_configuration.await_count == 1
    assert cache.epoch == 1


@pytest.mark.asyncio
async def test_concurrent_reads_compute_once(cache, config_plugin):
    """Test concurrent callers on an empty cache share one computation."""
    started = asyncio.Event()
    release = asyncio.Event()
    configuration = IamConfiguration(node_id=PRIMARY, user_repository="users")

    async def slow_configuration(node_id):
        started.set()
        await release.wait()
        return configuration

    config_plugin.get_configuration.side_effect = slow_configuration

    readers = [asyncio.create_task(cache.get_configuration()) for _ in range(5)]
    await started.wait()
    release.set()
    results = await asyncio.gather(*readers)

    assert all(result is configuration for result in results)
    assert config_plugin.get_configuration.await_count == 1


@pytest.mark.asyncio
async def test_invalidate_while_computing(cache, config_plugin):
    """Test a computation invalidated in flight is returned but not cached."""
    release = asyncio.Event()
    started = asyncio.Event()

    async def slow_configuration(node_id):
        started.set()
        await release.wait()
        return IamConfiguration(node_id=node_id)

    config_plugin.get_configuration.side_effect = slow_configuration

    reader = asyncio.create_task(cache.get_configuration())
    await started.wait()
    cache.invalidate()
    release.set()

    configuration = await reader

    assert configuration.node_id == PRIMARY
    assert cache.is_ready is False


@pytest.mark.asyncio
async def test_computation_failure_leaves_cache_empty(cache, config_plugin):
    """Test a failing backend propagates and the next read retries."""
    config_plugin.get_configuration.side_effect = [
        ConnectionError("ldap down"),
        IamConfiguration(node_id=PRIMARY),
    ]

    with pytest.raises(ConnectionError):
        await cache.get_configuration()
    assert cache.is_ready is False

    configuration = await cache.get_configuration()

    assert configuration.node_id == PRIMARY
    assert config_plugin.get_configuration.await_count == 2


@pytest.mark.asyncio
async def test_ttl_expiry(registry, settings, config_plugin):
    """Test an entry older than the TTL is computed again."""
    clock = FakeClock()
    cache = ConfigCache(registry, settings, ttl=60, clock=clock)

    await cache.get_configuration()
    clock.now += 59
    await cache.get_configuration()
    assert config_plugin.get_configuration.await_count == 1

    clock.now += 1
    assert cache.is_ready is False
    await cache.get_configuration()
    assert config_plugin.get_configuration.await_count == 2


@pytest.mark.asyncio
async def test_is_ready_does_not_expire_entry(registry, settings, config_plugin):
    """Test reading is_ready leaves an expired entry and the epoch untouched."""
    clock = FakeClock()
    cache = ConfigCache(registry, settings, ttl=60, clock=clock)
    await cache.get_configuration()
    epoch = cache.epoch

    clock.now += 60

    assert cache.is_ready is False
    assert cache.is_ready is False
    assert cache.epoch == epoch
