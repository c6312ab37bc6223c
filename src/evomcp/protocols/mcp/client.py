"""GatewayClient — talks MCP to a running gateway over WebSocket.

Used by the ``evomcp tools discover`` / ``evomcp tools call`` commands to
exercise a deployed gateway end to end.
"""

from __future__ import annotations

from typing import Any, cast

from evomcp import __version__
from evomcp.core.errors import (
    GatewayConnectionError,
    RemoteProtocolError,
    ToolExecutionError,
    ToolNotFoundError,
)
from evomcp.protocols.mcp.models import (
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PROTOCOL_VERSION,
    JsonRpcRequest,
    JsonRpcResponse,
    MCPToolDef,
)
from evomcp.protocols.mcp.transport import MCPTransport, WebSocketTransport


class GatewayClient:
    """Async context manager that connects to a gateway's MCP endpoint.

    Usage::

        async with GatewayClient("ws://localhost:3000/mcp") as client:
            tools = await client.list_tools()
            text = await client.call_tool("listChats", {})
    """

    def __init__(self, url: str) -> None:
        self._url = url
        self._transport: MCPTransport | None = None
        self._next_id = 1
        self.server_info: dict[str, Any] = {}

    async def __aenter__(self) -> GatewayClient:
        await self.connect()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def connect(self) -> None:
        """Create the transport, connect, and perform the initialize handshake."""
        self._transport = self._create_transport()
        try:
            await self._transport.connect()
        except Exception as exc:
            raise GatewayConnectionError(str(exc)) from exc
        await self._handshake()

    async def close(self) -> None:
        """Close the underlying transport."""
        if self._transport is not None:
            await self._transport.close()
            self._transport = None

    async def list_tools(self) -> list[MCPToolDef]:
        """Send ``tools/list`` and return the gateway's tool definitions."""
        response = await self._send_request("tools/list")
        if response.error is not None:
            raise RemoteProtocolError(response.error.code, response.error.message)
        raw_tools = cast(
            "list[dict[str, Any]]",
            response.result.get("tools", []) if response.result else [],
        )
        return [MCPToolDef.model_validate(raw) for raw in raw_tools]

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> str:
        """Send ``tools/call`` and return the concatenated text content."""
        response = await self._send_request(
            "tools/call",
            params={"name": name, "arguments": arguments or {}},
        )
        if response.error is not None:
            if response.error.code == METHOD_NOT_FOUND:
                raise ToolNotFoundError(name)
            raise ToolExecutionError(name, response.error.message)
        return self._extract_content(response)

    def _create_transport(self) -> MCPTransport:
        return WebSocketTransport(url=self._url)

    async def _handshake(self) -> None:
        response = await self._send_request(
            "initialize",
            params={
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {},
                "clientInfo": {"name": "evomcp", "version": __version__},
            },
        )
        if response.error is not None:
            raise RemoteProtocolError(response.error.code, response.error.message)
        result = response.result or {}
        self.server_info = cast("dict[str, Any]", result.get("serverInfo", {}))

    async def _send_request(
        self,
        method: str,
        params: dict[str, Any] | None = None,
    ) -> JsonRpcResponse:
        """Send a JSON-RPC request and wait for the response."""
        if self._transport is None:
            msg = "Client not connected"
            raise RuntimeError(msg)

        request_id = self._next_id
        self._next_id += 1

        request = JsonRpcRequest(method=method, id=request_id, params=params or {})
        await self._transport.send(request.model_dump())
        raw = await self._transport.receive()
        response = JsonRpcResponse.model_validate(raw)
        # Errors the server could not tie to a request carry a null id.
        if response.id != request_id and not (response.id is None and response.error is not None):
            msg = f"Response id {response.id!r} does not match request id {request_id}"
            raise RemoteProtocolError(INVALID_REQUEST, msg)
        return response

    @staticmethod
    def _extract_content(response: JsonRpcResponse) -> str:
        if response.result is None:
            return ""
        content = cast("list[dict[str, Any]]", response.result.get("content", []))
        parts = [str(item.get("text", "")) for item in content if item.get("type") == "text"]
        return "\n".join(parts) if parts else str(response.result)
