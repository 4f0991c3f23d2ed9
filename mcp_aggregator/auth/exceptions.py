"""Custom exceptions for authentication."""


class MCPGatewayError(Exception):
    """Base exception for all MCP Aggregator errors."""
    
    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class AuthenticationError(MCPGatewayError):
    """Raised when authentication fails."""
    pass


class InvalidTokenError(AuthenticationError):
    """Raised when JWT token is invalid or malformed."""
    pass


class ExpiredTokenError(AuthenticationError):
    """Raised when JWT token has expired."""
    pass
