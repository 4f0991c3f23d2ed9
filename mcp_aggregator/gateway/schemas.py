"""Pydantic schemas for the downstream MCP endpoint."""

from typing import Any
from pydantic import BaseModel, Field


class MCPToolCallParams(BaseModel):
    """Parameters for a tools/call request.
    
    Attributes:
        name: Name of the tool to invoke.
        arguments: Arguments to pass to the tool.
    """
    
    name: str = Field(..., min_length=1, description="Name of the tool to invoke")
    arguments: dict[str, Any] = Field(default_factory=dict, description="Tool arguments")


# Standard JSON-RPC error codes
class MCPErrorCodes:
    """Standard MCP/JSON-RPC error codes."""
    
    # JSON-RPC standard errors
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    
    # Custom gateway errors (-32000 to -32099)
    TOOL_NOT_FOUND = -32001
