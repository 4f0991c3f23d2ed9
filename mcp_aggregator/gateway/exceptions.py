"""Custom exceptions for the downstream MCP endpoint."""

from mcp_aggregator.auth.exceptions import MCPGatewayError


class GatewayError(MCPGatewayError):
    """Base exception for gateway-specific errors."""
    pass


class ToolNotFoundError(GatewayError):
    """Raised when a tool name matches neither a local nor an upstream tool.
    
    Attributes:
        tool_name: Name of the tool that was not found.
    """
    
    def __init__(self, tool_name: str):
        super().__init__(
            message=f"Tool not found: {tool_name}",
            code="TOOL_NOT_FOUND"
        )
        self.tool_name = tool_name


class MethodNotFoundError(GatewayError):
    """Raised when a JSON-RPC method is not part of the supported set.
    
    Attributes:
        method: The requested method.
    """
    
    def __init__(self, method: str):
        super().__init__(
            message=f"Method not found: {method}",
            code="METHOD_NOT_FOUND"
        )
        self.method = method


class InvalidParamsError(GatewayError):
    """Raised when request or tool parameters fail validation."""
    
    def __init__(self, detail: str):
        super().__init__(
            message=f"Invalid params: {detail}",
            code="INVALID_PARAMS"
        )
        self.detail = detail
