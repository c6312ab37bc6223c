"""MCP protocol — JSON-RPC models, server-side session, and WebSocket client."""

from evomcp.protocols.mcp.client import GatewayClient
from evomcp.protocols.mcp.models import (
    PROTOCOL_VERSION,
    InitializeResult,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    MCPToolDef,
)
from evomcp.protocols.mcp.session import MCPSession, SessionState
from evomcp.protocols.mcp.transport import MCPTransport, WebSocketTransport

__all__ = [
    "PROTOCOL_VERSION",
    "GatewayClient",
    "InitializeResult",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "MCPSession",
    "MCPToolDef",
    "MCPTransport",
    "SessionState",
    "WebSocketTransport",
]
