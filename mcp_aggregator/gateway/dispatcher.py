"""Dispatch of downstream MCP requests over the fixed supported method set."""

from enum import Enum
from typing import Any

from pydantic import ValidationError

from mcp_aggregator.config import get_settings
from mcp_aggregator.upstream.exceptions import UpstreamError
from mcp_aggregator.upstream.schemas import MCPToolCallResult

from .exceptions import InvalidParamsError, MethodNotFoundError
from .schemas import MCPToolCallParams
from .service import ToolRouter


# Notifications get no response body
NOTIFICATION_METHODS = {"initialized", "notifications/initialized"}


class MCPMethod(str, Enum):
    """Requests the gateway answers."""

    initialize = "initialize"
    tools_list = "tools/list"
    tools_call = "tools/call"


def initialize_result() -> dict[str, Any]:
    """Server side of the initialize handshake."""
    settings = get_settings()
    return {
        "protocolVersion": settings.MCP_PROTOCOL_VERSION,
        "capabilities": {
            "tools": {},
        },
        "serverInfo": {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
        },
    }


async def dispatch(method: str, params: dict[str, Any] | None, router: ToolRouter) -> dict[str, Any]:
    """Answer one MCP request on behalf of the router's caller.

    Upstream failures during ``tools/call`` become an ``isError`` result
    naming the failure, so they stay distinct from an unknown tool.

    Args:
        method: JSON-RPC method name.
        params: Request parameters.
        router: ToolRouter built for the calling user.

    Returns:
        The JSON-RPC ``result`` payload.

    Raises:
        MethodNotFoundError: If the method is not supported.
        InvalidParamsError: If the parameters are invalid.
        ToolNotFoundError: If ``tools/call`` names an unknown tool.
    """
    try:
        kind = MCPMethod(method)
    except ValueError:
        raise MethodNotFoundError(method) from None

    if kind is MCPMethod.initialize:
        return initialize_result()

    if kind is MCPMethod.tools_list:
        tools = await router.list_tools()
        return {"tools": [tool.model_dump(exclude_none=True) for tool in tools]}

    try:
        call = MCPToolCallParams.model_validate(params or {})
    except ValidationError as e:
        raise InvalidParamsError(str(e.errors()[0]["msg"])) from e

    try:
        result = await router.call_tool(call.name, call.arguments)
    except UpstreamError as e:
        result = MCPToolCallResult.text(
            f"Error calling tool '{call.name}': {e.message}",
            is_error=True,
        )

    return result.model_dump(exclude_none=True)
