"""MCP WebSocket endpoint — one :class:`MCPSession` per connection."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from evomcp import SERVICE_NAME, __version__
from evomcp.protocols.mcp.models import INTERNAL_ERROR, JsonRpcResponse
from evomcp.protocols.mcp.session import MCPSession

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/mcp")
async def mcp_websocket(websocket: WebSocket) -> None:
    """Serve one MCP session until the client disconnects.

    Frames are handled strictly in arrival order: the next frame is not read
    until the reply to the current one has been written.
    """
    await websocket.accept()
    session = MCPSession(
        websocket.app.state.dispatcher,
        server_name=SERVICE_NAME,
        server_version=__version__,
    )
    logger.info("MCP session %s opened", session.id)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes") or b""
            try:
                reply = await session.handle_raw(raw)
            except Exception:
                logger.exception("MCP session %s: unhandled error", session.id)
                reply = JsonRpcResponse.failure(None, INTERNAL_ERROR, "internal error").to_wire()
            if reply is not None:
                await websocket.send_text(json.dumps(reply))
    except WebSocketDisconnect:
        pass
    finally:
        logger.info("MCP session %s closed (state=%s)", session.id, session.state.value)
