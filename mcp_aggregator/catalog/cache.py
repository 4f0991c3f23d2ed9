"""Optional time-bounded reuse of built catalogs across requests."""

from typing import Callable, Iterable

from cachetools import TTLCache

from .manager import GatewayManager
from .schemas import UpstreamConfig


CatalogKey = tuple


def make_catalog_key(configs: Iterable[UpstreamConfig]) -> CatalogKey:
    """Key a config set by its upstreams, independently of order and tool flags."""
    return tuple(sorted(config.cache_key() for config in configs))


class CatalogCache:
    """TTL cache of GatewayManager instances keyed by the resolved upstream set.

    Two callers resolving the same upstreams (names and URLs) share one
    manager until it expires, so a changed upstream set always gets a fresh
    catalog. Tool flags are not part of the key: a cached manager takes the
    caller's current flags and rebuilds its catalog from the tools it already
    holds, without contacting the upstreams again.
    """

    def __init__(self, ttl_seconds: float, maxsize: int = 256) -> None:
        self._cache: TTLCache[CatalogKey, GatewayManager] = TTLCache(maxsize=maxsize, ttl=ttl_seconds)

    def get_or_create(
        self,
        configs: list[UpstreamConfig],
        factory: Callable[[list[UpstreamConfig]], GatewayManager],
    ) -> GatewayManager:
        key = make_catalog_key(configs)
        manager = self._cache.get(key)
        if manager is None:
            manager = factory(configs)
            self._cache[key] = manager
            return manager

        for config in configs:
            manager.update_tool_flags(config.name, config.tool_enabled)
        return manager
