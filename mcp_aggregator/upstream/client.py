"""HTTP client for a single upstream MCP server."""

import asyncio
from enum import Enum
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from mcp_aggregator.config import get_settings
from .codec import ACCEPT_HEADER, ProtocolCodec
from .exceptions import (
    MalformedResponseError,
    UpstreamError,
    UpstreamTimeoutError,
    UpstreamTransportError,
    UpstreamUnavailableError,
)
from .schemas import (
    MCPInitializeResult,
    MCPToolCallResult,
    MCPToolListResult,
    NamespacedTool,
)


logger = structlog.get_logger(__name__)

NAMESPACE_SEPARATOR = "_"


class ClientState(str, Enum):
    """Lifecycle of an upstream client."""

    uninitialized = "uninitialized"
    initializing = "initializing"
    ready = "ready"
    failed = "failed"


class UpstreamClient:
    """Speaks MCP to one upstream and exposes its tools under a namespace.

    The handshake (``initialize`` then ``tools/list``) runs at most once.
    Handshake failures leave the client ``failed`` with no tools and are
    never raised; tool call failures always are.

    Attributes:
        name: Upstream name, used as the tool namespace.
        url: Endpoint the JSON-RPC requests are POSTed to.
        state: Current lifecycle state.
        last_error: The error that failed the handshake, if any.
    """

    def __init__(
        self,
        name: str,
        url: str,
        http_client: httpx.AsyncClient,
        timeout: float | None = None,
        codec: ProtocolCodec | None = None,
    ) -> None:
        self.name = name
        self.url = url
        self.state = ClientState.uninitialized
        self.last_error: UpstreamError | None = None
        self._http = http_client
        self._timeout = timeout
        self._codec = codec or ProtocolCodec()
        self._tools: list[NamespacedTool] = []
        self._request_id = 0
        self._init_lock = asyncio.Lock()

    @property
    def prefix(self) -> str:
        return f"{self.name}{NAMESPACE_SEPARATOR}"

    def namespace(self, raw_name: str) -> str:
        """Return the catalog name for one of this upstream's tools."""
        return f"{self.prefix}{raw_name}"

    def strip_namespace(self, tool_name: str) -> str:
        """Recover the raw tool name; names without the prefix pass through."""
        if tool_name.startswith(self.prefix):
            return tool_name[len(self.prefix):]
        return tool_name

    def get_tools(self) -> list[NamespacedTool]:
        """Return the discovered, namespaced tools (empty unless ready)."""
        if self.state is not ClientState.ready:
            return []
        return list(self._tools)

    def _next_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def _send_request(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """POST one JSON-RPC request and return its ``result``.

        Raises:
            UpstreamTimeoutError: If the upstream does not answer in time.
            UpstreamTransportError: If the connection fails or HTTP status is not 2xx.
            UpstreamProtocolError: If the response carries an error object.
            MalformedResponseError: If the body cannot be decoded.
        """
        request_id = self._next_id()
        payload = self._codec.encode_request(method, params, request_id)
        logger.debug("upstream_request", upstream=self.name, method=method, request_id=request_id)

        try:
            response = await self._http.post(
                self.url,
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    "Accept": ACCEPT_HEADER,
                },
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(url=self.url, timeout_seconds=self._timeout) from e
        except httpx.RequestError as e:
            raise UpstreamTransportError(url=self.url, reason=str(e) or e.__class__.__name__) from e
        except httpx.InvalidURL as e:
            raise UpstreamTransportError(url=self.url, reason=f"invalid URL: {e}") from e

        if not response.is_success:
            raise UpstreamTransportError(
                url=self.url,
                reason=response.text[:200],  # Truncate for safety
                status_code=response.status_code,
            )

        decoded = self._codec.decode_response(
            response.text,
            response.headers.get("content-type", ""),
        )
        return decoded.result

    async def _handshake(self) -> list[NamespacedTool]:
        settings = get_settings()
        init_result = await self._send_request(
            "initialize",
            {
                "protocolVersion": settings.MCP_PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "clientInfo": {
                    "name": settings.MCP_CLIENT_NAME,
                    "version": settings.MCP_CLIENT_VERSION,
                },
            },
        )
        try:
            negotiated = MCPInitializeResult.model_validate(init_result)
        except ValidationError as e:
            raise MalformedResponseError("initialize result has no protocolVersion") from e
        if not negotiated.protocolVersion:
            raise MalformedResponseError("initialize result has no protocolVersion")

        list_result = await self._send_request("tools/list", {})
        try:
            listed = MCPToolListResult.model_validate(list_result)
        except ValidationError as e:
            raise MalformedResponseError("tools/list result has no tool list") from e

        return [
            NamespacedTool(
                name=self.namespace(tool.name),
                raw_name=tool.name,
                upstream=self.name,
                description=tool.description,
                input_schema=tool.inputSchema,
            )
            for tool in listed.tools
        ]

    def _fail(self, error: UpstreamError) -> None:
        self._tools = []
        self.last_error = error
        self.state = ClientState.failed
        logger.warning(
            "upstream_initialize_failed",
            upstream=self.name,
            url=self.url,
            error=error.message,
            error_code=error.code,
        )

    async def initialize(self) -> None:
        """Run the handshake once; later calls return immediately.

        A failed handshake is logged and recorded in ``last_error`` and is
        not retried.
        """
        if self.state in (ClientState.ready, ClientState.failed):
            return

        async with self._init_lock:
            if self.state in (ClientState.ready, ClientState.failed):
                return

            self.state = ClientState.initializing
            try:
                tools = await self._handshake()
            except UpstreamError as e:
                self._fail(e)
                return
            except Exception as e:
                logger.error(
                    "upstream_initialize_crashed",
                    upstream=self.name,
                    url=self.url,
                    error=repr(e),
                    exc_info=True,
                )
                failure = UpstreamError(
                    message=f"Handshake with upstream '{self.name}' crashed: {e!r}",
                    code="UPSTREAM_HANDSHAKE_ERROR",
                )
                failure.__cause__ = e
                self._fail(failure)
                return

            self._tools = tools
            self.state = ClientState.ready
            logger.info(
                "upstream_initialized",
                upstream=self.name,
                tool_count=len(tools),
                tools=[tool.name for tool in tools],
            )

    async def call_tool(self, tool_name: str, arguments: dict[str, Any] | None = None) -> MCPToolCallResult:
        """Invoke a tool on the upstream.

        Args:
            tool_name: Namespaced (or raw) tool name.
            arguments: Tool arguments.

        Returns:
            The upstream's tool call result.

        Raises:
            UpstreamUnavailableError: If the handshake failed.
            UpstreamError: If the exchange fails for any other reason.
        """
        if self.state is not ClientState.ready:
            await self.initialize()
        if self.state is not ClientState.ready:
            raise UpstreamUnavailableError(self.name, self.last_error)

        result = await self._send_request(
            "tools/call",
            {
                "name": self.strip_namespace(tool_name),
                "arguments": arguments or {},
            },
        )
        try:
            return MCPToolCallResult.model_validate(result)
        except ValidationError as e:
            raise MalformedResponseError("tools/call result is not a content list") from e
