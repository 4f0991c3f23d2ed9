"""Repository layer for upstream server registry data access."""

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from .models import ALL_USERS, ServerEnablement, UpstreamServer


async def get_enabled_servers_for_user(db: AsyncSession, user_id: str) -> list[UpstreamServer]:
    """Fetch the active servers enabled for a user, ordered by name.
    
    Args:
        db: Async database session.
        user_id: User to resolve servers for.
        
    Returns:
        List of UpstreamServer objects.
    """
    stmt = (
        select(UpstreamServer)
        .join(ServerEnablement, ServerEnablement.server_id == UpstreamServer.id)
        .where(
            UpstreamServer.is_active == True,
            ServerEnablement.user_id.in_([user_id, ALL_USERS]),
        )
        .distinct()
        .order_by(UpstreamServer.name)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_server_by_name(db: AsyncSession, name: str) -> UpstreamServer | None:
    """Fetch a single server by its name.
    
    Args:
        db: Async database session.
        name: Server name to look up.
        
    Returns:
        UpstreamServer object if found, None otherwise.
    """
    stmt = select(UpstreamServer).where(UpstreamServer.name == name)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def create_server(
    db: AsyncSession,
    name: str,
    url: str,
    description: str | None = None,
    is_active: bool = True,
    tool_settings: dict[str, bool] | None = None,
) -> UpstreamServer:
    """Register a new upstream server.
    
    Args:
        db: Async database session.
        name: Unique server name.
        url: Upstream endpoint URL.
        description: Optional description.
        is_active: Whether the server is available.
        tool_settings: Optional per-tool enable flags.
        
    Returns:
        Created UpstreamServer object.
    """
    server = UpstreamServer(
        name=name,
        url=url,
        description=description,
        is_active=is_active,
        tool_settings=tool_settings,
    )
    db.add(server)
    await db.commit()
    await db.refresh(server)
    return server


async def set_server_enablements(
    db: AsyncSession,
    server_id: int,
    user_ids: set[str],
) -> None:
    """Replace the set of users a server is enabled for.
    
    Args:
        db: Async database session.
        server_id: Server to update.
        user_ids: User ids (or '*') the server should be enabled for.
    """
    await db.execute(
        delete(ServerEnablement).where(ServerEnablement.server_id == server_id)
    )
    for user_id in sorted(user_ids):
        db.add(ServerEnablement(user_id=user_id, server_id=server_id))
    await db.commit()


async def deactivate_servers_not_in_list(
    db: AsyncSession,
    active_names: set[str]
) -> int:
    """Deactivate servers that are not present in the provided name set.

    Args:
        db: Async database session.
        active_names: Server names that should remain active.

    Returns:
        Number of rows updated.
    """
    if not active_names:
        return 0

    result = await db.execute(
        update(UpstreamServer)
        .where(UpstreamServer.name.notin_(active_names))
        .values(is_active=False)
    )
    await db.commit()
    return result.rowcount or 0
