"""MCP client transport — WebSocket communication with a running gateway.

The transport satisfies the :class:`MCPTransport` protocol, providing
``connect``, ``send``, ``receive``, and ``close`` methods.
"""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable

import websockets


@runtime_checkable
class MCPTransport(Protocol):
    """Abstract transport for MCP JSON-RPC communication."""

    async def connect(self) -> None: ...
    async def send(self, data: dict[str, Any]) -> None: ...
    async def receive(self) -> dict[str, Any]: ...
    async def close(self) -> None: ...


class WebSocketTransport:
    """Communicates with an MCP endpoint over WebSocket.

    Each JSON-RPC message travels as one text frame.
    """

    def __init__(self, url: str, *, open_timeout: float = 10.0) -> None:
        self._url = url
        self._open_timeout = open_timeout
        self._ws: Any = None  # websockets ClientConnection

    async def connect(self) -> None:
        """Open the WebSocket connection."""
        self._ws = await websockets.connect(self._url, open_timeout=self._open_timeout)

    async def send(self, data: dict[str, Any]) -> None:
        """Send a JSON message over the WebSocket."""
        if self._ws is None:
            msg = "Transport not connected"
            raise RuntimeError(msg)
        await self._ws.send(json.dumps(data))

    async def receive(self) -> dict[str, Any]:
        """Receive a JSON message from the WebSocket."""
        if self._ws is None:
            msg = "Transport not connected"
            raise RuntimeError(msg)
        raw = await self._ws.recv()
        return json.loads(raw)  # type: ignore[no-any-return]

    async def close(self) -> None:
        """Close the WebSocket connection."""
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
