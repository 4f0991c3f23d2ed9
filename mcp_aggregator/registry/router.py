"""FastAPI router for upstream server registry endpoints."""

from typing import Annotated

import httpx
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mcp_aggregator.auth.dependencies import get_current_user
from mcp_aggregator.auth.models import UserClaims
from mcp_aggregator.database import get_db
from mcp_aggregator.dependencies import get_http_client

from .schemas import ServerListResponse, ServerToolListResponse
from .service import discover_server_tools, list_servers_for_user


router = APIRouter(prefix="/registry", tags=["registry"])


@router.get("/servers", response_model=ServerListResponse)
async def list_servers(
    user: Annotated[UserClaims, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ServerListResponse:
    """List the upstream servers enabled for the authenticated user.
    
    Requires: Valid JWT token in Authorization header.
    """
    return await list_servers_for_user(db, user.user_id)


@router.get("/servers/{server_name}/tools", response_model=ServerToolListResponse)
async def list_server_tools(
    server_name: str,
    user: Annotated[UserClaims, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> ServerToolListResponse:
    """Discover the tools of one enabled server and show their enable flags.
    
    An unreachable server yields an empty tool list rather than an error.
    """
    return await discover_server_tools(db, client, user.user_id, server_name)
