"""Upstream module - MCP protocol client for one upstream server."""

from .schemas import (
    JSONRPCRequest,
    JSONRPCResponse,
    JSONRPCErrorDetail,
    MCPTool,
    MCPContent,
    MCPToolCallResult,
    NamespacedTool,
)
from .exceptions import (
    UpstreamError,
    UpstreamTransportError,
    UpstreamTimeoutError,
    UpstreamProtocolError,
    MalformedResponseError,
    UpstreamUnavailableError,
)
from .codec import ProtocolCodec, parse_event_stream
from .client import ClientState, UpstreamClient
from .discovery import fetch_server_tools


__all__ = [
    # Schemas
    "JSONRPCRequest",
    "JSONRPCResponse",
    "JSONRPCErrorDetail",
    "MCPTool",
    "MCPContent",
    "MCPToolCallResult",
    "NamespacedTool",
    # Exceptions
    "UpstreamError",
    "UpstreamTransportError",
    "UpstreamTimeoutError",
    "UpstreamProtocolError",
    "MalformedResponseError",
    "UpstreamUnavailableError",
    # Codec
    "ProtocolCodec",
    "parse_event_stream",
    # Client
    "ClientState",
    "UpstreamClient",
    "fetch_server_tools",
]
