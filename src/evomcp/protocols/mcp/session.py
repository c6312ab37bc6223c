"""MCPSession — per-connection handshake state machine for MCP over WebSocket.

A session starts ``UNINITIALIZED``.  The ``initialize`` request moves it to
``READY``, which it never leaves; closing the connection discards the
session.  Until the handshake completes, every other method is answered
with ``-32002`` and the state is left untouched.

The session owns no socket: the WebSocket endpoint feeds it raw frames and
writes back whatever envelope it returns, one frame per reply.  Tests can
drive it directly.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from evomcp.core.dispatch import ErrorKind
from evomcp.protocols.mcp.models import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    SERVER_NOT_INITIALIZED,
    InitializeResult,
    JsonRpcResponse,
    RequestId,
    ServerInfo,
    text_content,
)
from evomcp.utils.telemetry import (
    ATTR_ERROR_KIND,
    ATTR_SESSION_ID,
    ATTR_TOOL_NAME,
    ATTR_TRANSPORT,
    get_tracer,
)

if TYPE_CHECKING:
    from evomcp.core.dispatch import Dispatcher, DispatchResult

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

# Dispatch failures and the JSON-RPC code each one is reported with.
# AuthRequired has no dedicated code and travels as an internal error.
_ERROR_CODES = {
    ErrorKind.TOOL_NOT_FOUND: METHOD_NOT_FOUND,
    ErrorKind.INVALID_ARGUMENTS: INVALID_PARAMS,
    ErrorKind.AUTH_REQUIRED: INTERNAL_ERROR,
    ErrorKind.EXECUTION_FAILED: INTERNAL_ERROR,
}


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class MCPSession:
    """Handshake-gated JSON-RPC handler bound to a single connection.

    Usage::

        session = MCPSession(dispatcher, server_name="gw", server_version="0.1.0")
        reply = await session.handle_raw('{"jsonrpc":"2.0","id":1,"method":"initialize"}')
        # reply is a JSON-RPC envelope dict, or None for notifications
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        *,
        server_name: str,
        server_version: str,
        session_id: str | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._server_info = ServerInfo(name=server_name, version=server_version)
        self.id = session_id or uuid4().hex[:12]
        self.state = SessionState.UNINITIALIZED

    @property
    def initialized(self) -> bool:
        return self.state is SessionState.READY

    async def handle_raw(self, raw: str | bytes) -> dict[str, Any] | None:
        """Parse one inbound frame and return the reply envelope."""
        try:
            payload = json.loads(raw)
        except (ValueError, RecursionError):
            logger.debug("Session %s: unparseable frame", self.id)
            return JsonRpcResponse.failure(None, PARSE_ERROR, "parse error").to_wire()
        return await self.handle_message(payload)

    async def handle_message(self, payload: Any) -> dict[str, Any] | None:
        """Handle an already-decoded message.

        Returns ``None`` only for ``notifications/*`` messages sent without
        an ``id``; every request gets exactly one envelope back.
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("method"), str):
            request_id = _request_id(payload) if isinstance(payload, dict) else None
            return JsonRpcResponse.failure(request_id, INVALID_REQUEST, "Invalid request").to_wire()

        method: str = payload["method"]
        request_id = _request_id(payload)

        if "id" not in payload and method.startswith("notifications/"):
            logger.debug("Session %s: notification %s", self.id, method)
            return None

        response = await self._route(method, request_id, payload.get("params"))
        return response.to_wire()

    async def _route(self, method: str, request_id: RequestId, params: Any) -> JsonRpcResponse:
        if method == "initialize":
            return self._initialize(request_id, params)

        if not self.initialized:
            return JsonRpcResponse.failure(
                request_id, SERVER_NOT_INITIALIZED, "Server not initialized"
            )

        if method == "tools/list":
            return JsonRpcResponse.success(
                request_id, {"tools": self._dispatcher.registry.list_tools()}
            )

        if method == "tools/call":
            return await self._call_tool(request_id, params)

        return JsonRpcResponse.failure(
            request_id, METHOD_NOT_FOUND, f"method not found: {method}"
        )

    def _initialize(self, request_id: RequestId, params: Any) -> JsonRpcResponse:
        client = params.get("clientInfo", {}) if isinstance(params, dict) else {}
        logger.info(
            "Session %s: initialize from %s (protocol=%s)",
            self.id,
            client.get("name", "?") if isinstance(client, dict) else "?",
            params.get("protocolVersion", "?") if isinstance(params, dict) else "?",
        )
        result = InitializeResult(serverInfo=self._server_info)
        self.state = SessionState.READY
        return JsonRpcResponse.success(request_id, result.model_dump(by_alias=True))

    async def _call_tool(self, request_id: RequestId, params: Any) -> JsonRpcResponse:
        if not isinstance(params, dict):
            return JsonRpcResponse.failure(request_id, INVALID_PARAMS, "Missing params")
        name = params.get("name")
        if not isinstance(name, str) or not name:
            return JsonRpcResponse.failure(request_id, INVALID_PARAMS, "Missing tool name")

        with _tracer.start_as_current_span("mcp.tools.call") as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            span.set_attribute(ATTR_TRANSPORT, "websocket")
            span.set_attribute(ATTR_SESSION_ID, self.id)
            result = await self._dispatcher.dispatch(name, params.get("arguments"))
            if not result.ok and result.kind is not None:
                span.set_attribute(ATTR_ERROR_KIND, result.kind.value)

        return _call_response(request_id, name, result)


def _call_response(request_id: RequestId, name: str, result: DispatchResult) -> JsonRpcResponse:
    if result.ok:
        value = result.value
        text = value if isinstance(value, str) else json.dumps(value, indent=2, default=str)
        return JsonRpcResponse.success(request_id, {"content": [text_content(text)]})

    assert result.kind is not None
    logger.warning("Tool %s failed (%s): %s", name, result.kind.value, result.message)
    code = _ERROR_CODES[result.kind]
    if code == INTERNAL_ERROR:
        return JsonRpcResponse.failure(request_id, code, f"Tool execution failed: {result.message}")
    return JsonRpcResponse.failure(request_id, code, result.message)


def _request_id(payload: dict[str, Any]) -> RequestId:
    """Echo the request id when it is a valid JSON-RPC id, otherwise ``None``."""
    value = payload.get("id")
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        return None
    return value
