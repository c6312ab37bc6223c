"""Tests for the WebSocket client transport with mocks."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from evomcp.protocols.mcp.transport import MCPTransport, WebSocketTransport


class TestWebSocketTransport:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(WebSocketTransport(url="ws://localhost:3000/mcp"), MCPTransport)

    async def test_connect_opens_socket(self) -> None:
        ws = AsyncMock()
        with patch("websockets.connect", AsyncMock(return_value=ws)) as mock_connect:
            transport = WebSocketTransport(url="ws://localhost:3000/mcp")
            await transport.connect()
        assert mock_connect.await_args[0][0] == "ws://localhost:3000/mcp"

    async def test_send_and_receive_json(self) -> None:
        ws = AsyncMock()
        ws.recv = AsyncMock(return_value=json.dumps({"jsonrpc": "2.0", "id": 1, "result": {}}))
        transport = WebSocketTransport(url="ws://x")
        transport._ws = ws

        await transport.send({"jsonrpc": "2.0", "method": "tools/list"})
        assert json.loads(ws.send.call_args[0][0])["method"] == "tools/list"
        assert (await transport.receive())["id"] == 1

    async def test_send_without_connect_raises(self) -> None:
        with pytest.raises(RuntimeError, match="not connected"):
            await WebSocketTransport(url="ws://x").send({})

    async def test_receive_without_connect_raises(self) -> None:
        with pytest.raises(RuntimeError, match="not connected"):
            await WebSocketTransport(url="ws://x").receive()

    async def test_close(self) -> None:
        ws = AsyncMock()
        transport = WebSocketTransport(url="ws://x")
        transport._ws = ws
        await transport.close()
        ws.close.assert_awaited_once()
        assert transport._ws is None
