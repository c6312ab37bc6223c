"""``evomcp serve`` — run the gateway (HTTP + MCP/WebSocket)."""

from __future__ import annotations

import sys
from pathlib import Path

import click
import uvicorn

from evomcp.cli_commands._output import configure_logging, console, print_banner

_LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]


@click.command()
@click.option("--host", default=None, help="Bind address (default: HOST or 0.0.0.0).")
@click.option("--port", type=int, default=None, help="Listen port (default: PORT or 3000).")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML settings file; unset values fall back to the environment.",
)
@click.option("--log-level", type=click.Choice(_LOG_LEVELS), default="info")
@click.option("--otlp-endpoint", default=None, help="Export traces via OTLP/gRPC.")
@click.option("--trace-console", is_flag=True, help="Print spans to stdout.")
@click.option("--check", is_flag=True, help="Validate settings and tools, then exit.")
def serve(
    host: str | None,
    port: int | None,
    config_path: str | None,
    log_level: str,
    otlp_endpoint: str | None,
    trace_console: bool,
    check: bool,
) -> None:
    """Start the gateway server."""
    from evomcp.core.config import load_settings
    from evomcp.core.errors import SettingsValidationError
    from evomcp.core.registry import ToolRegistry
    from evomcp.server.app import create_app
    from evomcp.tools.evolution import create_tools

    try:
        settings = load_settings(Path(config_path) if config_path else None)
    except SettingsValidationError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    overrides = {k: v for k, v in (("host", host), ("port", port)) if v is not None}
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(log_level)

    if otlp_endpoint or trace_console:
        from evomcp.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(export_to_console=trace_console, otlp_endpoint=otlp_endpoint)
        except ImportError as exc:
            console.print(f"[red]Telemetry error:[/red] {exc}")
            sys.exit(1)

    try:
        registry = ToolRegistry.from_factory(lambda: create_tools(settings))
        app = create_app(registry, settings)
    except Exception as exc:
        console.print(f"[red]Startup error:[/red] {exc}")
        sys.exit(1)

    print_banner(settings, len(registry))

    if check:
        console.print("[green]Configuration and tools validated.[/green]")
        return

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=log_level)
