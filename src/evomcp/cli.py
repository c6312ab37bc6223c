"""evomcp CLI entrypoint."""

from __future__ import annotations

import click

from evomcp import __version__


@click.group()
@click.version_option(version=__version__, prog_name="evomcp")
def main() -> None:
    """evomcp — Evolution API tools over HTTP and MCP."""


# Register subcommands
from evomcp.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
