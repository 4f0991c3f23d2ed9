"""Global dependencies for the application."""

from typing import Annotated

import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .auth.dependencies import get_current_user
from .auth.models import UserClaims
from .catalog.cache import CatalogCache
from .catalog.manager import GatewayManager
from .catalog.schemas import UpstreamConfig
from .config import get_settings
from .database import get_db
from .gateway.service import ToolRouter
from .registry.service import get_enabled_upstream_configs


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """Dependency to get the global shared HTTP client.
    
    This client is initialized in main.py lifespan and shared across requests
    to enable connection pooling (keep-alive).
    
    Args:
        request: The FastAPI request object.
        
    Returns:
        The global httpx.AsyncClient instance.
    """
    return request.app.state.http_client


async def get_catalog_cache(request: Request) -> CatalogCache | None:
    """The app's catalog cache, or None when catalogs are built per request."""
    return getattr(request.app.state, "catalog_cache", None)


async def get_upstream_configs(
    user: Annotated[UserClaims, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[UpstreamConfig]:
    """Resolve the caller's enabled upstreams, once per request."""
    return await get_enabled_upstream_configs(db, user.user_id)


async def get_gateway_manager(
    configs: Annotated[list[UpstreamConfig], Depends(get_upstream_configs)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    cache: Annotated[CatalogCache | None, Depends(get_catalog_cache)],
) -> GatewayManager:
    """Build (or reuse from the cache) the catalog for this request.
    
    The manager is not initialized here; it handshakes with its upstreams
    on first use.
    """
    timeout = get_settings().upstream_timeout

    def build(resolved: list[UpstreamConfig]) -> GatewayManager:
        return GatewayManager(resolved, client, timeout=timeout)

    if cache is None:
        return build(configs)
    return cache.get_or_create(configs, build)


async def get_tool_router(
    user: Annotated[UserClaims, Depends(get_current_user)],
    manager: Annotated[GatewayManager, Depends(get_gateway_manager)],
) -> ToolRouter:
    """ToolRouter for the calling user."""
    return ToolRouter(manager, user)
