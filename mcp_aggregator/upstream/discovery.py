"""One-off tool discovery against an upstream server."""

import httpx
import structlog

from .client import ClientState, UpstreamClient
from .schemas import MCPTool


logger = structlog.get_logger(__name__)


async def fetch_server_tools(
    http_client: httpx.AsyncClient,
    server_name: str,
    server_url: str,
    timeout: float | None = None,
) -> list[MCPTool]:
    """Handshake with a server and return its tools under their raw names.

    Failures are logged and yield an empty list, so callers registering or
    inspecting a server never fail because the server is down.

    Args:
        http_client: Shared HTTP client.
        server_name: Name the server is registered under.
        server_url: Endpoint of the server.
        timeout: Per-exchange timeout in seconds.

    Returns:
        Tools as the server lists them, without the namespace prefix.
    """
    client = UpstreamClient(server_name, server_url, http_client, timeout=timeout)
    await client.initialize()

    if client.state is not ClientState.ready:
        logger.warning("tool_discovery_failed", upstream=server_name, url=server_url)
        return []

    tools = [
        MCPTool(
            name=tool.raw_name,
            description=tool.description,
            inputSchema=tool.input_schema,
        )
        for tool in client.get_tools()
    ]
    logger.info("tool_discovery", upstream=server_name, tool_count=len(tools))
    return tools
