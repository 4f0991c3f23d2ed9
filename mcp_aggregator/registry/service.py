"""Service layer resolving which upstreams are enabled for a caller."""

from typing import TYPE_CHECKING

import httpx
import structlog

from mcp_aggregator.catalog.schemas import UpstreamConfig
from mcp_aggregator.config import get_settings
from mcp_aggregator.upstream.discovery import fetch_server_tools

from .config import load_server_registry
from .exceptions import ServerNotFoundError
from .models import UpstreamServer
from .repository import (
    create_server,
    deactivate_servers_not_in_list,
    get_enabled_servers_for_user,
    get_server_by_name,
    set_server_enablements,
)
from .schemas import (
    ServerListResponse,
    ServerResponse,
    ServerToolListResponse,
    ServerToolResponse,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


logger = structlog.get_logger(__name__)


def to_upstream_config(server: UpstreamServer) -> UpstreamConfig:
    """Convert a registry row into the immutable config a catalog is built from."""
    return UpstreamConfig(
        name=server.name,
        url=server.url,
        tool_enabled=dict(server.tool_settings) if server.tool_settings else None,
    )


async def get_enabled_upstream_configs(db: "AsyncSession", user_id: str) -> list[UpstreamConfig]:
    """Resolve the upstream configs currently enabled for a user.
    
    Args:
        db: Async database session.
        user_id: Caller identity.
        
    Returns:
        One UpstreamConfig per enabled, active server.
    """
    servers = await get_enabled_servers_for_user(db, user_id)
    return [to_upstream_config(server) for server in servers]


async def list_servers_for_user(db: "AsyncSession", user_id: str) -> ServerListResponse:
    """List the servers enabled for a user with their tool flags."""
    servers = await get_enabled_servers_for_user(db, user_id)
    return ServerListResponse(
        servers=[
            ServerResponse(
                name=server.name,
                url=server.url,
                description=server.description,
                tools=dict(server.tool_settings or {}),
            )
            for server in servers
        ],
        count=len(servers),
    )


async def discover_server_tools(
    db: "AsyncSession",
    client: httpx.AsyncClient,
    user_id: str,
    server_name: str,
) -> ServerToolListResponse:
    """Fetch the live tool list of one of the caller's servers.
    
    Args:
        db: Async database session.
        client: Shared HTTP client.
        user_id: Caller identity.
        server_name: Server to inspect.
        
    Returns:
        Raw tool names with their stored enable flags.
        
    Raises:
        ServerNotFoundError: If the server is not enabled for the caller.
    """
    configs = await get_enabled_upstream_configs(db, user_id)
    config = next((c for c in configs if c.name == server_name), None)
    if config is None:
        raise ServerNotFoundError(server_name)

    tools = await fetch_server_tools(
        client,
        config.name,
        config.url,
        timeout=get_settings().upstream_timeout,
    )
    return ServerToolListResponse(
        server=config.name,
        tools=[
            ServerToolResponse(
                name=tool.name,
                description=tool.description,
                inputSchema=tool.inputSchema,
                enabled=config.is_tool_enabled(tool.name),
            )
            for tool in tools
        ],
        count=len(tools),
    )


async def sync_servers_from_config(db: "AsyncSession", config_path: str | None = None) -> None:
    """Ensure registry entries exist for the static config.

    Args:
        db: Async database session.
        config_path: Optional path override for the server registry config.

    Raises:
        ValueError: If the config lists the same server name twice.
    """
    registry_config = load_server_registry(config_path)
    if not registry_config.servers:
        return

    seen_names: set[str] = set()
    for server in registry_config.servers:
        if server.name in seen_names:
            raise ValueError(f"duplicate server name in config: {server.name}")
        seen_names.add(server.name)

        existing = await get_server_by_name(db, server.name)
        if existing is None:
            existing = await create_server(
                db=db,
                name=server.name,
                url=server.url,
                description=server.description,
                is_active=server.is_active,
                tool_settings=server.tools or None,
            )
        else:
            updated = False
            if existing.url != server.url:
                existing.url = server.url
                updated = True
            if existing.description != server.description:
                existing.description = server.description
                updated = True
            if existing.is_active != server.is_active:
                existing.is_active = server.is_active
                updated = True
            if (existing.tool_settings or None) != (server.tools or None):
                existing.tool_settings = server.tools or None
                updated = True

            if updated:
                await db.commit()
                await db.refresh(existing)

        await set_server_enablements(db, existing.id, set(server.enabled_for))

    deactivated = await deactivate_servers_not_in_list(db, seen_names)
    logger.info("registry_synced", servers=sorted(seen_names), deactivated=deactivated)
