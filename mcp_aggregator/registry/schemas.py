"""Pydantic schemas for server registry API responses."""

from typing import Any

from pydantic import BaseModel, Field


class ServerResponse(BaseModel):
    """API response schema for a single upstream server.
    
    Attributes:
        name: Unique server name.
        url: Upstream endpoint URL.
        description: Human-readable description.
        tools: Per-tool enable flags.
    """
    
    name: str = Field(..., description="Unique server name")
    url: str = Field(..., description="Upstream endpoint URL")
    description: str | None = Field(default=None, description="Human-readable description")
    tools: dict[str, bool] = Field(default_factory=dict, description="Per-tool enable flags")


class ServerListResponse(BaseModel):
    """API response schema for list of servers."""
    
    servers: list[ServerResponse] = Field(default_factory=list, description="List of servers")
    count: int = Field(..., description="Total number of servers")


class ServerToolResponse(BaseModel):
    """A tool discovered on a server, with its enable flag."""
    
    name: str = Field(..., description="Raw tool name on the server")
    description: str | None = Field(default=None, description="Tool description")
    inputSchema: dict[str, Any] | None = Field(default=None, description="Tool input schema")
    enabled: bool = Field(..., description="Whether the tool is exposed in the catalog")


class ServerToolListResponse(BaseModel):
    """API response schema for the tools of one server."""
    
    server: str = Field(..., description="Server name")
    tools: list[ServerToolResponse] = Field(default_factory=list, description="Discovered tools")
    count: int = Field(..., description="Total number of tools")
