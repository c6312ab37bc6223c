"""HTTP adapter — stateless REST routes over the dispatcher.

Routes:
  GET  /health            → liveness payload
  GET  /tools             → public tool metadata
  POST /tools/{toolName}  → run one tool with the JSON body as arguments
  GET  /mcp               → description of the MCP WebSocket endpoint
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from evomcp import SERVICE_NAME, __version__
from evomcp.core.dispatch import ErrorKind
from evomcp.protocols.mcp.models import PROTOCOL_VERSION
from evomcp.utils.telemetry import (
    ATTR_ERROR_KIND,
    ATTR_HTTP_STATUS,
    ATTR_TOOL_NAME,
    ATTR_TRANSPORT,
    get_tracer,
)

if TYPE_CHECKING:
    from evomcp.core.dispatch import Dispatcher, DispatchResult

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

AUTH_REQUIRED_MESSAGE = (
    "Please provide your Evolution API credentials in the configuration settings."
)

ENDPOINTS = {
    "health": "GET /health",
    "tools": "GET /tools",
    "execute": "POST /tools/{toolName}",
    "mcp": "GET /mcp (WebSocket upgrade for MCP)",
}

router = APIRouter()


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def error_body(error: str, message: str, **extra: Any) -> dict[str, Any]:
    return {"error": error, "message": message, **extra}


def _dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher  # type: ignore[no-any-return]


@router.get("/health")
async def health() -> dict[str, Any]:
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "version": __version__,
        "timestamp": utc_timestamp(),
    }


@router.get("/tools")
async def list_tools(request: Request) -> JSONResponse:
    try:
        tools = _dispatcher(request).registry.list_tools()
    except Exception as exc:
        logger.exception("Failed to list tools")
        return JSONResponse(status_code=500, content=error_body("Failed to list tools", str(exc)))
    return JSONResponse(content={"tools": jsonable_encoder(tools)})


@router.post("/tools/{tool_name}")
async def call_tool(tool_name: str, request: Request) -> JSONResponse:
    dispatcher = _dispatcher(request)
    if tool_name not in dispatcher.registry:
        return JSONResponse(
            status_code=404,
            content={
                "error": f"Unknown tool: {tool_name}",
                "availableTools": dispatcher.registry.names(),
            },
        )

    try:
        arguments = await _read_arguments(request)
    except ValueError as exc:
        logger.warning("Rejected body for %s: %s", tool_name, exc)
        return JSONResponse(status_code=500, content=error_body("Internal server error", str(exc)))

    with _tracer.start_as_current_span("http.tools.call") as span:
        span.set_attribute(ATTR_TOOL_NAME, tool_name)
        span.set_attribute(ATTR_TRANSPORT, "http")
        result = await dispatcher.dispatch(tool_name, arguments)
        response = _to_response(tool_name, result)
        span.set_attribute(ATTR_HTTP_STATUS, response.status_code)
        if result.kind is not None:
            span.set_attribute(ATTR_ERROR_KIND, result.kind.value)
    return response


@router.get("/mcp")
async def mcp_info() -> dict[str, Any]:
    return {
        "message": "Connect with a WebSocket client to use the Model Context Protocol",
        "websocket": "/mcp",
        "protocol": "JSON-RPC 2.0",
        "protocolVersion": PROTOCOL_VERSION,
        "methods": ["initialize", "tools/list", "tools/call"],
        "usage": [
            'Send {"jsonrpc": "2.0", "id": 1, "method": "initialize"} first',
            'Then {"jsonrpc": "2.0", "id": 2, "method": "tools/list"}',
            'Then {"jsonrpc": "2.0", "id": 3, "method": "tools/call",'
            ' "params": {"name": "<tool>", "arguments": {}}}',
        ],
        "available_endpoints": ENDPOINTS,
    }


async def _read_arguments(request: Request) -> Any:
    """Decode the request body; an empty body means no arguments."""
    body = await request.body()
    if not body.strip():
        return {}
    return json.loads(body)


def _to_response(tool_name: str, result: DispatchResult) -> JSONResponse:
    if result.ok:
        return JSONResponse(
            content={
                "tool": tool_name,
                "result": jsonable_encoder(result.value),
                "timestamp": utc_timestamp(),
            }
        )

    logger.warning("Tool %s failed (%s): %s", tool_name, result.kind, result.message)
    if result.kind is ErrorKind.AUTH_REQUIRED:
        return JSONResponse(
            status_code=401,
            content=error_body("Authentication required", AUTH_REQUIRED_MESSAGE),
        )
    if result.kind is ErrorKind.INVALID_ARGUMENTS:
        body = error_body("Invalid arguments", result.message)
        return JSONResponse(status_code=400, content=body)
    body = error_body("Tool execution failed", result.message)
    return JSONResponse(status_code=500, content=body)
