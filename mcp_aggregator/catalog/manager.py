"""Catalog builder that merges the tools of many upstreams into one index."""

import asyncio
from typing import Any, Iterable

import httpx
import structlog

from mcp_aggregator.upstream.client import ClientState, UpstreamClient
from mcp_aggregator.upstream.codec import ProtocolCodec
from mcp_aggregator.upstream.exceptions import UpstreamError
from mcp_aggregator.upstream.schemas import MCPToolCallResult, NamespacedTool

from .schemas import UpstreamConfig


logger = structlog.get_logger(__name__)


class GatewayManager:
    """Owns one client per upstream and the catalog built from them.

    ``initialize()`` handshakes with every upstream concurrently and waits
    for all of them; an upstream that fails simply contributes no tools.
    The per-tool enable flags are applied once, while building the catalog,
    and the resulting index serves both listing and dispatch.
    """

    def __init__(
        self,
        configs: Iterable[UpstreamConfig],
        http_client: httpx.AsyncClient,
        timeout: float | None = None,
        codec: ProtocolCodec | None = None,
    ) -> None:
        self._configs: dict[str, UpstreamConfig] = {}
        self._clients: dict[str, UpstreamClient] = {}
        codec = codec or ProtocolCodec()

        for config in configs:
            if config.name in self._configs:
                raise ValueError(f"duplicate upstream name in config: {config.name}")
            self._configs[config.name] = config
            self._clients[config.name] = UpstreamClient(
                config.name,
                config.url,
                http_client,
                timeout=timeout,
                codec=codec,
            )

        self._tools: list[NamespacedTool] = []
        self._tool_index: dict[str, UpstreamClient] = {}
        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Handshake with all upstreams and build the catalog, once."""
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return

            logger.info("catalog_initializing", upstreams=list(self._clients))
            clients = list(self._clients.values())
            results = await asyncio.gather(
                *(client.initialize() for client in clients),
                return_exceptions=True,
            )
            for client, result in zip(clients, results):
                if isinstance(result, Exception):
                    # UpstreamClient absorbs upstream failures, so this is a bug in one client.
                    logger.error(
                        "upstream_initialize_crashed",
                        upstream=client.name,
                        error=repr(result),
                        exc_info=result,
                    )

            self._build_catalog()
            self._initialized = True

    def _build_catalog(self) -> None:
        tools: list[NamespacedTool] = []
        index: dict[str, UpstreamClient] = {}

        for name, client in self._clients.items():
            if client.state is not ClientState.ready:
                continue
            config = self._configs[name]
            for tool in client.get_tools():
                if not config.is_tool_enabled(tool.raw_name):
                    logger.debug("tool_disabled", tool=tool.name, upstream=name)
                    continue
                if tool.name in index:
                    logger.warning(
                        "tool_name_collision",
                        tool=tool.name,
                        upstream=name,
                        kept_upstream=index[tool.name].name,
                    )
                    continue
                tools.append(tool)
                index[tool.name] = client

        self._tools = tools
        self._tool_index = index
        logger.info(
            "catalog_built",
            tool_count=len(tools),
            ready=[c.name for c in self._clients.values() if c.state is ClientState.ready],
            failed=[c.name for c in self._clients.values() if c.state is not ClientState.ready],
        )

    async def get_all_tools(self) -> list[NamespacedTool]:
        """Return the filtered catalog, initializing first if needed."""
        if not self._initialized:
            await self.initialize()
        return list(self._tools)

    def is_upstream_tool(self, tool_name: str) -> bool:
        """Check catalog membership without triggering initialization."""
        return tool_name in self._tool_index

    async def call_upstream_tool(
        self,
        tool_name: str,
        arguments: dict[str, Any] | None = None,
    ) -> MCPToolCallResult | None:
        """Route a tool call to the upstream that owns it.

        Args:
            tool_name: Namespaced tool name.
            arguments: Tool arguments.

        Returns:
            The upstream's result, or None if no catalog entry matches.

        Raises:
            UpstreamError: If the upstream call fails.
        """
        if not self._initialized:
            await self.initialize()

        client = self._tool_index.get(tool_name)
        if client is None:
            return None

        try:
            return await client.call_tool(tool_name, arguments)
        except UpstreamError as e:
            logger.error(
                "upstream_tool_call_failed",
                tool=tool_name,
                upstream=client.name,
                error=e.message,
                error_code=e.code,
            )
            raise

    def update_tool_flags(self, upstream_name: str, tool_enabled: dict[str, bool] | None) -> None:
        """Replace an upstream's per-tool flags and rebuild from held tools.

        No upstream is contacted; disabled tools are kept by their clients
        and can be re-enabled this way.

        Raises:
            KeyError: If no upstream has this name.
        """
        config = self._configs[upstream_name]
        flags = dict(tool_enabled) if tool_enabled is not None else None
        if flags == config.tool_enabled:
            return
        logger.info("tool_flags_updated", upstream=upstream_name, tool_enabled=flags)
        self._configs[upstream_name] = config.model_copy(update={"tool_enabled": flags})
        if self._initialized:
            self._build_catalog()

    def upstream_status(self) -> dict[str, dict[str, Any]]:
        """Summarise each upstream's state for the health document.

        ``disabled_tools`` lists discovered tools held back by their enable flag.
        """
        return {
            name: {
                "url": client.url,
                "state": client.state.value,
                "tool_count": len(client.get_tools()),
                "disabled_tools": [
                    tool.name
                    for tool in client.get_tools()
                    if not self._configs[name].is_tool_enabled(tool.raw_name)
                ],
                "error": client.last_error.message if client.last_error else None,
            }
            for name, client in self._clients.items()
        }
