"""Evolution API MCP gateway — exposes WhatsApp tools over HTTP and MCP/WebSocket."""

from __future__ import annotations

__version__ = "0.1.0"

SERVICE_NAME = "Evolution API MCP Server"
