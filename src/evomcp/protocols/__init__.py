"""Protocol layer for MCP session handling and the gateway client."""
