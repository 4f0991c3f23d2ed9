"""Catalog module - merged, filtered tool catalog over many upstreams."""

from .schemas import UpstreamConfig
from .manager import GatewayManager
from .cache import CatalogCache, make_catalog_key


__all__ = [
    "UpstreamConfig",
    "GatewayManager",
    "CatalogCache",
    "make_catalog_key",
]
