"""Async database access for the upstream server registry.

The only tables are ``upstream_servers`` and ``server_enablements``
(``registry/models.py``); they are created at startup and read once per
request to resolve the caller's enabled upstreams.
"""

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from .config import get_settings

settings = get_settings()

# SQL is echoed when DEBUG is on
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

RegistrySession = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Declarative base of the registry models."""


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield a registry session for one request."""
    async with RegistrySession() as session:
        yield session
