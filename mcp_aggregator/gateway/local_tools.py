"""Built-in tools served by the gateway itself."""

import json
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ValidationError

from mcp_aggregator.auth.models import UserClaims
from mcp_aggregator.upstream.schemas import MCPTool, MCPToolCallResult

from .exceptions import InvalidParamsError


LocalToolHandler = Callable[[dict[str, Any], UserClaims], Awaitable[MCPToolCallResult]]


class LocalTool:
    """A tool definition paired with the coroutine that runs it."""

    def __init__(self, definition: MCPTool, handler: LocalToolHandler) -> None:
        self.definition = definition
        self.handler = handler

    @property
    def name(self) -> str:
        return self.definition.name

    async def run(self, arguments: dict[str, Any], user: UserClaims) -> MCPToolCallResult:
        return await self.handler(arguments, user)


class EchoArguments(BaseModel):
    message: str


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


async def echo(arguments: dict[str, Any], user: UserClaims) -> MCPToolCallResult:
    try:
        args = EchoArguments.model_validate(arguments)
    except ValidationError as e:
        raise InvalidParamsError(f"echo requires a string 'message': {e.errors()[0]['msg']}") from e

    return MCPToolCallResult.text(
        f"Echo: {args.message}\n"
        f"User: {user.email or 'unknown'}\n"
        f"Org: {user.organization_id or 'none'}"
    )


async def get_user_info(arguments: dict[str, Any], user: UserClaims) -> MCPToolCallResult:
    info = {
        "userId": user.user_id,
        "email": user.email or "unknown",
        "organizationId": user.organization_id or "none",
        "authenticated": True,
        "timestamp": _now_iso(),
    }
    return MCPToolCallResult.text(json.dumps(info, indent=2))


async def timestamp(arguments: dict[str, Any], user: UserClaims) -> MCPToolCallResult:
    return MCPToolCallResult.text(f"Current server time: {_now_iso()}")


def build_local_tools() -> dict[str, LocalTool]:
    """Return the built-in tools keyed by name."""
    tools = [
        LocalTool(
            MCPTool(
                name="echo",
                description="Echo back a message with user context",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "message": {"type": "string", "description": "Message to echo back"},
                    },
                    "required": ["message"],
                },
            ),
            echo,
        ),
        LocalTool(
            MCPTool(
                name="get_user_info",
                description="Get authenticated user information",
                inputSchema={"type": "object", "properties": {}},
            ),
            get_user_info,
        ),
        LocalTool(
            MCPTool(
                name="timestamp",
                description="Get current server timestamp",
                inputSchema={"type": "object", "properties": {}},
            ),
            timestamp,
        ),
    ]
    return {tool.name: tool for tool in tools}
