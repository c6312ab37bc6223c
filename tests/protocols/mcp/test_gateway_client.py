"""Tests for GatewayClient with a mocked transport."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from evomcp.core.errors import (
    GatewayConnectionError,
    RemoteProtocolError,
    ToolExecutionError,
    ToolNotFoundError,
)
from evomcp.protocols.mcp.client import GatewayClient
from evomcp.protocols.mcp.transport import WebSocketTransport

_INITIALIZE = {
    "jsonrpc": "2.0",
    "id": 1,
    "result": {
        "protocolVersion": "2024-11-05",
        "capabilities": {"tools": {"listChanged": False}},
        "serverInfo": {"name": "Evolution API MCP Server", "version": "0.1.0"},
    },
}


def _make_transport(responses: list[dict[str, Any]]) -> MagicMock:
    transport = MagicMock()
    transport.connect = AsyncMock()
    transport.close = AsyncMock()
    transport.send = AsyncMock()
    transport.receive = AsyncMock(side_effect=[_INITIALIZE, *responses])
    return transport


def _error(request_id: int, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


class TestGatewayClientConnect:
    async def test_connect_performs_handshake(self) -> None:
        transport = _make_transport([])
        with patch.object(GatewayClient, "_create_transport", return_value=transport):
            client = GatewayClient("ws://gw/mcp")
            await client.connect()

        transport.connect.assert_awaited_once()
        sent = transport.send.call_args[0][0]
        assert sent["method"] == "initialize"
        assert sent["params"]["clientInfo"]["name"] == "evomcp"
        assert client.server_info["name"] == "Evolution API MCP Server"

    async def test_connect_failure_wrapped(self) -> None:
        transport = _make_transport([])
        transport.connect = AsyncMock(side_effect=OSError("refused"))
        with patch.object(GatewayClient, "_create_transport", return_value=transport):
            with pytest.raises(GatewayConnectionError, match="refused"):
                await GatewayClient("ws://gw/mcp").connect()

    async def test_handshake_error_raises(self) -> None:
        transport = MagicMock()
        transport.connect = AsyncMock()
        transport.send = AsyncMock()
        transport.receive = AsyncMock(return_value=_error(1, -32603, "down"))
        with patch.object(GatewayClient, "_create_transport", return_value=transport):
            with pytest.raises(RemoteProtocolError, match="-32603"):
                await GatewayClient("ws://gw/mcp").connect()

    async def test_context_manager_closes(self) -> None:
        transport = _make_transport([])
        with patch.object(GatewayClient, "_create_transport", return_value=transport):
            async with GatewayClient("ws://gw/mcp"):
                pass
        transport.close.assert_awaited_once()

    def test_default_transport_is_websocket(self) -> None:
        assert isinstance(GatewayClient("ws://gw/mcp")._create_transport(), WebSocketTransport)

    async def test_request_before_connect_raises(self) -> None:
        with pytest.raises(RuntimeError, match="not connected"):
            await GatewayClient("ws://gw/mcp").list_tools()


class TestGatewayClientTools:
    async def test_list_tools(self) -> None:
        transport = _make_transport([
            {
                "jsonrpc": "2.0",
                "id": 2,
                "result": {"tools": [
                    {
                        "name": "sendMessage",
                        "description": "Send",
                        "inputSchema": {"type": "object"},
                    },
                ]},
            }
        ])
        with patch.object(GatewayClient, "_create_transport", return_value=transport):
            async with GatewayClient("ws://gw/mcp") as client:
                tools = await client.list_tools()

        assert [t.name for t in tools] == ["sendMessage"]
        assert tools[0].input_schema == {"type": "object"}

    async def test_call_tool_returns_text(self) -> None:
        transport = _make_transport([
            {"jsonrpc": "2.0", "id": 2, "result": {"content": [{"type": "text", "text": "OK"}]}}
        ])
        with patch.object(GatewayClient, "_create_transport", return_value=transport):
            async with GatewayClient("ws://gw/mcp") as client:
                text = await client.call_tool("sendMessage", {"number": "1", "text": "hi"})

        assert text == "OK"
        sent = transport.send.call_args[0][0]
        assert sent["params"] == {"name": "sendMessage", "arguments": {"number": "1", "text": "hi"}}

    async def test_call_unknown_tool(self) -> None:
        transport = _make_transport([_error(2, -32601, "Unknown tool: x")])
        with patch.object(GatewayClient, "_create_transport", return_value=transport):
            async with GatewayClient("ws://gw/mcp") as client:
                with pytest.raises(ToolNotFoundError):
                    await client.call_tool("x")

    async def test_call_failure(self) -> None:
        transport = _make_transport([_error(2, -32603, "Tool execution failed: boom")])
        with patch.object(GatewayClient, "_create_transport", return_value=transport):
            async with GatewayClient("ws://gw/mcp") as client:
                with pytest.raises(ToolExecutionError, match="boom"):
                    await client.call_tool("explode")

    async def test_request_ids_increment(self) -> None:
        transport = _make_transport([
            {"jsonrpc": "2.0", "id": 2, "result": {"tools": []}},
            {"jsonrpc": "2.0", "id": 3, "result": {"tools": []}},
        ])
        with patch.object(GatewayClient, "_create_transport", return_value=transport):
            async with GatewayClient("ws://gw/mcp") as client:
                await client.list_tools()
                await client.list_tools()

        ids = [c[0][0]["id"] for c in transport.send.call_args_list]
        assert ids == [1, 2, 3]

    async def test_mismatched_response_id_raises(self) -> None:
        transport = _make_transport([
            {"jsonrpc": "2.0", "id": 99, "result": {"tools": []}}
        ])
        with patch.object(GatewayClient, "_create_transport", return_value=transport):
            async with GatewayClient("ws://gw/mcp") as client:
                with pytest.raises(RemoteProtocolError, match="does not match"):
                    await client.list_tools()

    async def test_null_id_error_is_surfaced(self) -> None:
        transport = _make_transport([
            {"jsonrpc": "2.0", "id": None, "error": {"code": -32603, "message": "internal error"}}
        ])
        with patch.object(GatewayClient, "_create_transport", return_value=transport):
            async with GatewayClient("ws://gw/mcp") as client:
                with pytest.raises(ToolExecutionError, match="internal error"):
                    await client.call_tool("sendMessage")
