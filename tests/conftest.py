# Test configuration
import json
import os
import sys
from pathlib import Path
from typing import Any

import httpx
import pytest

REPO_ROOT = Path(__file__).parent.parent

# Add repo root to path so tests can import modules
sys.path.insert(0, str(REPO_ROOT))

# Pin settings that tests rely on before anything reads them
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("JWT_ISSUER", "")
os.environ.setdefault("JWT_AUDIENCE", "")
os.environ.setdefault("UPSTREAM_TIMEOUT_SECONDS", "5")
os.environ.setdefault("CATALOG_CACHE_TTL_SECONDS", "0")


class FakeUpstream:
    """In-memory MCP server answering initialize, tools/list and tools/call.

    Every request body it receives is kept in ``requests``.
    """

    def __init__(
        self,
        name: str,
        tools: list[dict[str, Any]] | None = None,
        sse: bool = False,
        init_status: int = 200,
        omit_protocol_version: bool = False,
        list_error: dict[str, Any] | None = None,
        call_error: dict[str, Any] | None = None,
        call_result: dict[str, Any] | None = None,
    ) -> None:
        self.name = name
        self.tools = tools or []
        self.sse = sse
        self.init_status = init_status
        self.omit_protocol_version = omit_protocol_version
        self.list_error = list_error
        self.call_error = call_error
        self.call_result = call_result
        self.requests: list[dict[str, Any]] = []
        self.headers: list[httpx.Headers] = []

    @property
    def url(self) -> str:
        return f"http://{self.name}.upstream.test/mcp"

    def count(self, method: str) -> int:
        return sum(1 for body in self.requests if body["method"] == method)

    def _respond(self, payload: dict[str, Any]) -> httpx.Response:
        if self.sse:
            return httpx.Response(
                200,
                text=f"event: message\ndata: {json.dumps(payload)}\n\n",
                headers={"content-type": "text/event-stream"},
            )
        return httpx.Response(200, json=payload)

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        self.headers.append(request.headers)
        method = body["method"]
        request_id = body["id"]

        if method == "initialize":
            if self.init_status != 200:
                return httpx.Response(self.init_status, text="upstream exploded")
            result: dict[str, Any] = {
                "protocolVersion": "2024-11-05",
                "capabilities": {"tools": {}},
                "serverInfo": {"name": self.name, "version": "0.1.0"},
            }
            if self.omit_protocol_version:
                del result["protocolVersion"]
        elif method == "tools/list":
            if self.list_error:
                return self._respond({"jsonrpc": "2.0", "id": request_id, "error": self.list_error})
            result = {"tools": self.tools}
        elif method == "tools/call":
            if self.call_error:
                return self._respond({"jsonrpc": "2.0", "id": request_id, "error": self.call_error})
            params = body["params"]
            result = self.call_result or {
                "content": [
                    {
                        "type": "text",
                        "text": f"{self.name}:{params['name']}:{json.dumps(params['arguments'], sort_keys=True)}",
                    }
                ]
            }
        else:
            return self._respond({
                "jsonrpc": "2.0",
                "id": request_id,
                "error": {"code": -32601, "message": f"Method not found: {method}"},
            })

        return self._respond({"jsonrpc": "2.0", "id": request_id, "result": result})


class UpstreamNetwork:
    """Routes requests to fake upstreams by host; unknown hosts refuse connections."""

    def __init__(self) -> None:
        self.upstreams: dict[str, FakeUpstream] = {}

    def add(self, name: str, **kwargs: Any) -> FakeUpstream:
        upstream = FakeUpstream(name, **kwargs)
        self.upstreams[f"{name}.upstream.test"] = upstream
        return upstream

    def unreachable_url(self, name: str) -> str:
        return f"http://{name}.down.test/mcp"

    def handler(self, request: httpx.Request) -> httpx.Response:
        upstream = self.upstreams.get(request.url.host)
        if upstream is None:
            raise httpx.ConnectError("Connection refused", request=request)
        return upstream.handle(request)


def tool_def(name: str, description: str | None = None) -> dict[str, Any]:
    tool: dict[str, Any] = {
        "name": name,
        "inputSchema": {"type": "object", "properties": {"q": {"type": "string"}}},
    }
    if description is not None:
        tool["description"] = description
    return tool


@pytest.fixture
def network() -> UpstreamNetwork:
    return UpstreamNetwork()


@pytest.fixture
def http_client(network: UpstreamNetwork) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(network.handler))


@pytest.fixture
def make_tool():
    return tool_def
