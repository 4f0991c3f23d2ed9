"""Unit tests for the TTL catalog cache."""

import time
from unittest.mock import MagicMock

import pytest

from mcp_aggregator.catalog.cache import CatalogCache, make_catalog_key
from mcp_aggregator.catalog.manager import GatewayManager
from mcp_aggregator.catalog.schemas import UpstreamConfig


A = UpstreamConfig(name="a", url="http://a.test/mcp")
B = UpstreamConfig(name="b", url="http://b.test/mcp", tool_enabled={"x": False})


def _factory() -> MagicMock:
    return MagicMock(side_effect=lambda configs: MagicMock(spec=GatewayManager))


def test_key_ignores_order():
    assert make_catalog_key([A, B]) == make_catalog_key([B, A])


def test_key_ignores_tool_flags():
    flipped = B.model_copy(update={"tool_enabled": {"x": True}})

    assert make_catalog_key([A, B]) == make_catalog_key([A, flipped])


def test_key_reflects_urls():
    moved = A.model_copy(update={"url": "http://elsewhere.test/mcp"})

    assert make_catalog_key([A]) != make_catalog_key([moved])


def test_same_configs_share_a_manager():
    cache = CatalogCache(ttl_seconds=60)
    factory = _factory()

    first = cache.get_or_create([A, B], factory)
    second = cache.get_or_create([B, A], factory)

    assert first is second
    assert factory.call_count == 1


def test_cached_manager_receives_current_flags():
    cache = CatalogCache(ttl_seconds=60)
    factory = _factory()
    flipped = B.model_copy(update={"tool_enabled": {"x": True}})

    manager = cache.get_or_create([A, B], factory)
    manager.update_tool_flags.assert_not_called()
    cache.get_or_create([A, flipped], factory)

    manager.update_tool_flags.assert_any_call("a", None)
    manager.update_tool_flags.assert_any_call("b", {"x": True})
    assert factory.call_count == 1


def test_different_configs_get_separate_managers():
    cache = CatalogCache(ttl_seconds=60)
    factory = _factory()

    assert cache.get_or_create([A], factory) is not cache.get_or_create([A, B], factory)
    assert factory.call_count == 2


def test_entries_expire():
    cache = CatalogCache(ttl_seconds=0.01)
    factory = _factory()

    first = cache.get_or_create([A], factory)
    time.sleep(0.05)
    second = cache.get_or_create([A], factory)

    assert first is not second


@pytest.mark.asyncio
async def test_flag_change_reuses_discovered_tools(network, http_client, make_tool):
    up = network.add("gh", tools=[make_tool("read"), make_tool("delete")])
    cache = CatalogCache(ttl_seconds=60)

    def build(configs):
        return GatewayManager(configs, http_client)

    locked = [UpstreamConfig(name="gh", url=up.url, tool_enabled={"delete": False})]
    manager = cache.get_or_create(locked, build)
    assert [t.name for t in await manager.get_all_tools()] == ["gh_read"]
    requests_before = len(up.requests)

    unlocked = [UpstreamConfig(name="gh", url=up.url)]
    reused = cache.get_or_create(unlocked, build)

    assert reused is manager
    assert [t.name for t in await reused.get_all_tools()] == ["gh_read", "gh_delete"]
    assert len(up.requests) == requests_before
