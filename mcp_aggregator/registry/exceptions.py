"""Custom exceptions for the upstream server registry."""

from mcp_aggregator.auth.exceptions import MCPGatewayError


class ServerNotFoundError(MCPGatewayError):
    """Raised when a server is unknown or not enabled for the caller.
    
    Attributes:
        server_name: Name of the server that was not found.
    """
    
    def __init__(self, server_name: str):
        super().__init__(
            message=f"Server '{server_name}' not found",
            code="SERVER_NOT_FOUND"
        )
        self.server_name = server_name
