"""Registry module - which upstream servers are enabled for whom."""

from .service import get_enabled_upstream_configs, sync_servers_from_config
from .exceptions import ServerNotFoundError


__all__ = [
    "get_enabled_upstream_configs",
    "sync_servers_from_config",
    "ServerNotFoundError",
]
