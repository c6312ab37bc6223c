"""Shared CLI output formatters."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

if TYPE_CHECKING:
    from evomcp.core.config import GatewaySettings

console = Console()


def configure_logging(level: str = "info") -> None:
    """Route standard logging through rich on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def print_tools_table(tools: list[dict[str, Any]], *, title: str = "Tools") -> None:
    """Pretty-print tool definitions (``name``/``description``/``inputSchema``)."""
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Required")

    for tool in tools:
        schema = tool.get("inputSchema", {})
        table.add_row(
            tool.get("name", "?"),
            _truncate(tool.get("description", "")),
            ", ".join(schema.get("required", [])) or "-",
        )

    console.print(table)


def print_tools_json(tools: list[dict[str, Any]]) -> None:
    console.print_json(json.dumps({"tools": tools}))


def print_banner(settings: GatewaySettings, tool_count: int) -> None:
    """Print the startup summary shown before the server starts listening."""
    base = f"http://{settings.host}:{settings.port}"
    key = "***configured***" if settings.evolution_api_key else "Not configured"
    console.print(f"[bold]Evolution API MCP Server[/bold] on port {settings.port}")
    console.print(f"  Health check: {base}/health")
    console.print(f"  Tools list:   {base}/tools ({tool_count} tools)")
    console.print(f"  Execute tool: POST {base}/tools/{{toolName}}")
    console.print(f"  MCP:          ws://{settings.host}:{settings.port}/mcp")
    console.print(f"  Evolution API URL: {settings.evolution_api_url or 'Not configured'}")
    console.print(f"  Evolution API Key: {key}")


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
