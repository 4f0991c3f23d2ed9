"""FastAPI router for the downstream MCP endpoint."""

import json
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from mcp_aggregator.auth.exceptions import MCPGatewayError
from mcp_aggregator.auth.models import UserClaims
from mcp_aggregator.config import get_settings
from mcp_aggregator.dependencies import get_tool_router

from .dispatcher import NOTIFICATION_METHODS, dispatch
from .exceptions import InvalidParamsError, MethodNotFoundError, ToolNotFoundError
from .schemas import MCPErrorCodes
from .service import ToolRouter


logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/mcp", tags=["mcp"])


def _jsonrpc_error_response(
    request_id: str | int | None,
    code: int,
    message: str,
    status_code: int = 200,
    data: Any | None = None,
) -> JSONResponse:
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return JSONResponse(
        status_code=status_code,
        content={"jsonrpc": "2.0", "id": request_id, "error": error},
    )


def _jsonrpc_result_response(request_id: str | int | None, result: Any) -> JSONResponse:
    return JSONResponse(content={"jsonrpc": "2.0", "id": request_id, "result": result})


def _identity(user: UserClaims) -> dict[str, Any]:
    return {
        "id": user.user_id,
        "email": user.email,
        "organizationId": user.organization_id,
    }


@router.post("", operation_id="mcp_endpoint_post")
async def mcp_post_endpoint(
    request: Request,
    tool_router: Annotated[ToolRouter, Depends(get_tool_router)],
):
    """Handle JSON-RPC 2.0 messages."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return _jsonrpc_error_response(
            request_id=None,
            code=MCPErrorCodes.PARSE_ERROR,
            message="Parse error",
            status_code=400,
            data=str(e),
        )

    request_id = body.get("id") if isinstance(body, dict) else None
    if not isinstance(body, dict) or body.get("jsonrpc") != "2.0" or not isinstance(body.get("method"), str):
        return _jsonrpc_error_response(
            request_id=request_id,
            code=MCPErrorCodes.INVALID_REQUEST,
            message="Invalid Request - must be JSON-RPC 2.0",
            status_code=400,
        )

    method = body["method"]
    if method in NOTIFICATION_METHODS:
        return Response(status_code=204)

    params = body.get("params")
    if params is not None and not isinstance(params, dict):
        return _jsonrpc_error_response(
            request_id=request_id,
            code=MCPErrorCodes.INVALID_PARAMS,
            message="Invalid params: params must be an object",
        )

    try:
        result = await dispatch(method, params, tool_router)
    except ToolNotFoundError as e:
        return _jsonrpc_error_response(request_id, MCPErrorCodes.TOOL_NOT_FOUND, e.message)
    except MethodNotFoundError as e:
        return _jsonrpc_error_response(request_id, MCPErrorCodes.METHOD_NOT_FOUND, e.message)
    except InvalidParamsError as e:
        return _jsonrpc_error_response(request_id, MCPErrorCodes.INVALID_PARAMS, e.message)
    except MCPGatewayError:
        raise
    except Exception as e:
        logger.error("mcp_request_failed", method=method, error=str(e), exc_info=True)
        return _jsonrpc_error_response(
            request_id,
            MCPErrorCodes.INTERNAL_ERROR,
            "Internal error",
            data=str(e),
        )

    return _jsonrpc_result_response(request_id, result)


@router.get("", operation_id="mcp_endpoint_get")
async def mcp_get_endpoint(
    tool_router: Annotated[ToolRouter, Depends(get_tool_router)],
    action: str | None = None,
):
    """Server info, or a health document with ``?action=health``.

    The health document handshakes with the caller's upstreams and reports
    each one's state; upstream failures never fail the request.
    """
    settings = get_settings()
    user = tool_router.user

    if action == "health":
        await tool_router.manager.initialize()
        upstreams = tool_router.manager.upstream_status()
        return {
            "status": "healthy" if all(u["state"] == "ready" for u in upstreams.values()) else "degraded",
            "upstreams": upstreams,
            "server": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "protocol": settings.MCP_PROTOCOL_VERSION,
            "transport": "http",
            "user": _identity(user),
        }

    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "description": "Aggregates upstream MCP servers into one namespaced tool catalog",
        "protocol": settings.MCP_PROTOCOL_VERSION,
        "transport": "http",
        "capabilities": {"tools": {}},
        "endpoints": {
            "messages": "/mcp (POST)",
            "health": "/mcp?action=health (GET)",
        },
        "authentication": {
            "type": "bearer",
            "bearer_token_required": True,
        },
        "user": _identity(user),
    }
