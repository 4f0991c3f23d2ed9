"""Pydantic schemas for MCP JSON-RPC messages exchanged with upstream servers."""

from typing import Any, Literal
from pydantic import BaseModel, ConfigDict, Field


class JSONRPCRequest(BaseModel):
    """JSON-RPC 2.0 request envelope.
    
    Attributes:
        jsonrpc: JSON-RPC version (always "2.0").
        method: The method to call (e.g., "tools/call").
        params: Method parameters.
        id: Request identifier for correlation.
    """
    
    jsonrpc: Literal["2.0"] = Field(default="2.0", description="JSON-RPC version")
    method: str = Field(..., description="Method to call")
    params: dict[str, Any] = Field(default_factory=dict, description="Method parameters")
    id: str | int = Field(..., description="Request ID for correlation")


class JSONRPCErrorDetail(BaseModel):
    """Error object of a JSON-RPC response.
    
    Attributes:
        code: Error code (negative integers for protocol errors).
        message: Human-readable error message.
        data: Optional additional error data.
    """
    
    code: int = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    data: Any | None = Field(default=None, description="Additional error data")


class JSONRPCResponse(BaseModel):
    """JSON-RPC 2.0 response envelope.
    
    Attributes:
        jsonrpc: JSON-RPC version.
        result: Result on success.
        error: Error details on failure.
        id: Request ID for correlation (null for parse errors).
    """
    
    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    result: Any | None = Field(default=None, description="Result on success")
    error: JSONRPCErrorDetail | None = Field(default=None, description="Error on failure")
    id: str | int | None = Field(default=None, description="Request ID for correlation")


class MCPInitializeResult(BaseModel):
    """Result of the initialize handshake step."""
    
    protocolVersion: str
    capabilities: dict[str, Any] = Field(default_factory=dict)
    serverInfo: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow")


class MCPTool(BaseModel):
    """MCP tool definition as listed by a server."""
    
    name: str
    description: str | None = None
    inputSchema: dict[str, Any] | None = None

    model_config = ConfigDict(extra="allow")


class MCPToolListResult(BaseModel):
    """Result for tools/list."""
    
    tools: list[MCPTool]


class MCPContent(BaseModel):
    """Content item in tool response."""
    
    type: str
    text: str | None = None
    data: Any | None = None
    mimeType: str | None = None

    model_config = ConfigDict(extra="allow")


class MCPToolCallResult(BaseModel):
    """Result for tools/call."""
    
    content: list[MCPContent] = Field(default_factory=list)
    isError: bool = False

    @classmethod
    def text(cls, text: str, is_error: bool = False) -> "MCPToolCallResult":
        """Build a result holding a single text content item."""
        return cls(content=[MCPContent(type="text", text=text)], isError=is_error)


class NamespacedTool(BaseModel):
    """A discovered tool stored under its upstream's namespace.
    
    Attributes:
        name: Catalog name, ``"<upstream>_<raw_name>"``.
        raw_name: Name the upstream itself knows the tool by.
        upstream: Name of the owning upstream.
        description: Optional description from the upstream.
        input_schema: Optional JSON schema of the tool arguments.
    """
    
    name: str
    raw_name: str
    upstream: str
    description: str | None = None
    input_schema: dict[str, Any] | None = None

    model_config = ConfigDict(frozen=True)

    def to_mcp(self) -> MCPTool:
        """Render the tool as it is listed to downstream callers."""
        return MCPTool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema,
        )
