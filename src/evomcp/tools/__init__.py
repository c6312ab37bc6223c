"""Evolution API tool definitions consumed by the gateway registry."""

from evomcp.tools.client import EvolutionClient
from evomcp.tools.evolution import create_tools

__all__ = ["EvolutionClient", "create_tools"]
