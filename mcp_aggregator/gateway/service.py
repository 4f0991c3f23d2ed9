"""Service layer merging local and upstream tools behind one catalog."""

import time
from typing import Any

import structlog

from mcp_aggregator.auth.models import UserClaims
from mcp_aggregator.catalog.manager import GatewayManager
from mcp_aggregator.upstream.schemas import MCPTool, MCPToolCallResult

from .exceptions import ToolNotFoundError
from .local_tools import LocalTool, build_local_tools


logger = structlog.get_logger(__name__)


class ToolRouter:
    """The seam downstream callers list and invoke tools through.

    Local tools shadow upstream tools of the same name. A router wraps the
    GatewayManager built for one request's caller.
    """

    def __init__(
        self,
        manager: GatewayManager,
        user: UserClaims,
        local_tools: dict[str, LocalTool] | None = None,
    ) -> None:
        self.manager = manager
        self.user = user
        self._local_tools = local_tools if local_tools is not None else build_local_tools()

    async def list_tools(self) -> list[MCPTool]:
        """Local tools followed by the upstream catalog."""
        merged: list[MCPTool] = [tool.definition for tool in self._local_tools.values()]
        seen_names = set(self._local_tools)

        for tool in await self.manager.get_all_tools():
            if tool.name in seen_names:
                continue
            merged.append(tool.to_mcp())
            seen_names.add(tool.name)

        return merged

    async def call_tool(self, tool_name: str, arguments: dict[str, Any] | None = None) -> MCPToolCallResult:
        """Run a local tool or forward the call to its upstream.

        Args:
            tool_name: Local or namespaced upstream tool name.
            arguments: Tool arguments.

        Returns:
            The tool's result.

        Raises:
            ToolNotFoundError: If no local or upstream tool has this name.
            InvalidParamsError: If a local tool rejects its arguments.
            UpstreamError: If the upstream call fails.
        """
        arguments = arguments or {}
        start = time.perf_counter()
        source = "local"
        status = "success"
        error_code: str | None = None

        try:
            local_tool = self._local_tools.get(tool_name)
            if local_tool is not None:
                return await local_tool.run(arguments, self.user)

            source = "upstream"
            await self.manager.initialize()
            if self.manager.is_upstream_tool(tool_name):
                result = await self.manager.call_upstream_tool(tool_name, arguments)
                if result is not None:
                    return result

            source = "none"
            raise ToolNotFoundError(tool_name)
        except Exception as e:
            status = "error"
            error_code = getattr(e, "code", e.__class__.__name__)
            raise
        finally:
            logger.info(
                "tool_invocation",
                user_id=self.user.user_id,
                tool_name=tool_name,
                source=source,
                status=status,
                error_code=error_code,
                duration_ms=int((time.perf_counter() - start) * 1000),
            )
