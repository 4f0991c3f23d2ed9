"""Gateway module - downstream MCP endpoint over local and upstream tools."""

from .schemas import MCPToolCallParams, MCPErrorCodes
from .exceptions import (
    GatewayError,
    ToolNotFoundError,
    MethodNotFoundError,
    InvalidParamsError,
)
from .local_tools import LocalTool, build_local_tools
from .service import ToolRouter
from .dispatcher import MCPMethod, dispatch


__all__ = [
    # Schemas
    "MCPToolCallParams",
    "MCPErrorCodes",
    # Exceptions
    "GatewayError",
    "ToolNotFoundError",
    "MethodNotFoundError",
    "InvalidParamsError",
    # Tools
    "LocalTool",
    "build_local_tools",
    # Service
    "ToolRouter",
    "MCPMethod",
    "dispatch",
]
