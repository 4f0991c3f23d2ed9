"""Exceptions raised while talking to upstream MCP servers."""

from typing import Any

from mcp_aggregator.auth.exceptions import MCPGatewayError


class UpstreamError(MCPGatewayError):
    """Base exception for upstream exchange failures."""
    pass


class UpstreamTransportError(UpstreamError):
    """Raised when an upstream cannot be reached or answers with an HTTP error.
    
    Attributes:
        url: URL of the upstream.
        reason: Description of the failure.
        status_code: HTTP status code, if a response was received.
    """
    
    def __init__(self, url: str, reason: str, status_code: int | None = None):
        if status_code is not None:
            message = f"Upstream at '{url}' returned HTTP {status_code}: {reason}"
        else:
            message = f"Upstream at '{url}' is unreachable: {reason}"
        super().__init__(message=message, code="UPSTREAM_TRANSPORT_ERROR")
        self.url = url
        self.reason = reason
        self.status_code = status_code


class UpstreamTimeoutError(UpstreamTransportError):
    """Raised when an upstream does not answer in time.
    
    Attributes:
        timeout_seconds: Timeout duration that was exceeded.
    """
    
    def __init__(self, url: str, timeout_seconds: float | None):
        super().__init__(url=url, reason=f"timed out after {timeout_seconds}s")
        self.code = "UPSTREAM_TIMEOUT"
        self.timeout_seconds = timeout_seconds


class UpstreamProtocolError(UpstreamError):
    """Raised when an upstream answers with a JSON-RPC error object.
    
    Attributes:
        error_code: JSON-RPC error code reported by the upstream.
        error_message: Error message reported by the upstream.
        data: Optional error data reported by the upstream.
    """
    
    def __init__(self, error_code: int, error_message: str, data: Any = None):
        super().__init__(
            message=f"MCP error {error_code}: {error_message}",
            code="UPSTREAM_PROTOCOL_ERROR"
        )
        self.error_code = error_code
        self.error_message = error_message
        self.data = data


class MalformedResponseError(UpstreamError):
    """Raised when an upstream response cannot be parsed or lacks required fields."""
    
    def __init__(self, reason: str):
        super().__init__(
            message=f"Malformed upstream response: {reason}",
            code="MALFORMED_RESPONSE"
        )
        self.reason = reason


class UpstreamUnavailableError(UpstreamError):
    """Raised when calling a tool on an upstream whose handshake failed.
    
    Attributes:
        upstream: Name of the upstream.
    """
    
    def __init__(self, upstream: str, cause: Exception | None = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            message=f"Upstream '{upstream}' is unavailable{detail}",
            code="UPSTREAM_UNAVAILABLE"
        )
        self.upstream = upstream
        self.cause = cause
