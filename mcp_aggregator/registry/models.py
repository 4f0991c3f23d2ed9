"""SQLAlchemy models for the upstream server registry."""

from datetime import datetime

from sqlalchemy import (
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    JSON,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mcp_aggregator.database import Base


# Enablement row user_id that applies to every user
ALL_USERS = "*"


class UpstreamServer(Base):
    """An upstream MCP server known to the gateway.
    
    Attributes:
        id: Primary key.
        name: Unique server name, used as the tool namespace.
        url: Endpoint the server is reached at.
        description: Optional human-readable description.
        is_active: Whether the server may be used at all.
        tool_settings: Raw tool name to enabled flag mapping.
        created_at: Timestamp when the server was registered.
        updated_at: Timestamp of last update.
        enablements: Users the server is enabled for.
    """
    
    __tablename__ = "upstream_servers"
    
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=False,
        comment="Unique server name and tool namespace"
    )
    url: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        comment="Upstream MCP endpoint URL"
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Human-readable server description"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="Whether the server is available"
    )
    tool_settings: Mapped[dict | None] = mapped_column(
        JSON,
        nullable=True,
        comment="Per-tool enable flags keyed by raw tool name"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="Registration timestamp"
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
        comment="Last update timestamp"
    )
    
    enablements: Mapped[list["ServerEnablement"]] = relationship(
        back_populates="server",
        cascade="all, delete-orphan",
    )
    
    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<UpstreamServer(name='{self.name}', url='{self.url}', active={self.is_active})>"


class ServerEnablement(Base):
    """Marks a server as enabled for one user (or all users with ``*``)."""
    
    __tablename__ = "server_enablements"
    __table_args__ = (
        UniqueConstraint("user_id", "server_id", name="uq_server_enablement_user_server"),
    )
    
    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(255),
        index=True,
        nullable=False,
        comment="User the server is enabled for, or '*'"
    )
    server_id: Mapped[int] = mapped_column(
        ForeignKey("upstream_servers.id", ondelete="CASCADE"),
        nullable=False,
    )
    
    server: Mapped[UpstreamServer] = relationship(back_populates="enablements")
