"""``evomcp tools`` — inspect local tools or exercise a running gateway."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import click

from evomcp.cli_commands._output import console, print_tools_json, print_tools_table


@click.group()
def tools() -> None:
    """List and call gateway tools."""


@tools.command("list")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON.")
def list_local(as_json: bool) -> None:
    """List the tools this gateway would expose."""
    from evomcp.core.config import GatewaySettings
    from evomcp.core.registry import ToolRegistry
    from evomcp.tools.evolution import create_tools

    settings = GatewaySettings.from_env()
    registry = ToolRegistry.from_factory(lambda: create_tools(settings))

    if as_json:
        print_tools_json(registry.list_tools())
    else:
        print_tools_table(registry.list_tools())


@tools.command("discover")
@click.argument("url")
def discover(url: str) -> None:
    """Discover tools from a running gateway.

    URL is the gateway's MCP WebSocket endpoint, e.g. ws://localhost:3000/mcp.
    """
    from evomcp.protocols.mcp.client import GatewayClient

    async def _discover() -> list[dict[str, Any]]:
        async with GatewayClient(url) as client:
            return [t.model_dump(by_alias=True) for t in await client.list_tools()]

    try:
        tool_defs = asyncio.run(_discover())
    except Exception as exc:
        console.print(f"[red]Discovery error:[/red] {exc}")
        sys.exit(1)

    if not tool_defs:
        console.print("[yellow]No tools discovered.[/yellow]")
        return

    print_tools_table(tool_defs, title="Discovered Tools")


@tools.command("call")
@click.argument("url")
@click.argument("name")
@click.option("--args", "raw_args", default="{}", help="Tool arguments as a JSON object.")
def call(url: str, name: str, raw_args: str) -> None:
    """Call tool NAME on the gateway at URL and print its text result."""
    from evomcp.protocols.mcp.client import GatewayClient

    try:
        arguments = json.loads(raw_args)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid --args:[/red] {exc}")
        sys.exit(1)
    if not isinstance(arguments, dict):
        console.print("[red]Invalid --args:[/red] expected a JSON object")
        sys.exit(1)

    async def _call() -> str:
        async with GatewayClient(url) as client:
            return await client.call_tool(name, arguments)

    try:
        text = asyncio.run(_call())
    except Exception as exc:
        console.print(f"[red]Call error:[/red] {exc}")
        sys.exit(1)

    console.print(text, markup=False, highlight=False)
