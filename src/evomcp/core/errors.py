"""Shared error types for the gateway."""

from __future__ import annotations


class GatewayError(Exception):
    """Base error for all gateway failures."""


class ConfigurationError(GatewayError):
    """A downstream credential or setting required by a tool is missing.

    The message names the missing environment keys so that operators can
    act on it directly.
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing configuration: {', '.join(self.missing)}")


class DuplicateToolError(GatewayError):
    """Two tool definitions share the same name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Duplicate tool name: {name}")


class ToolNotFoundError(GatewayError):
    """Requested tool does not exist in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool not found: {name}")


class ToolExecutionError(GatewayError):
    """A tool invocation failed downstream."""

    def __init__(self, name: str, detail: str = "") -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"Tool execution failed: {name}" + (f": {detail}" if detail else ""))


class SettingsValidationError(GatewayError):
    """Raised when gateway settings fail parsing or validation."""


class GatewayConnectionError(GatewayError):
    """Failed to connect to a remote gateway."""


class RemoteProtocolError(GatewayError):
    """A remote gateway answered with a JSON-RPC error."""

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.detail = message
        super().__init__(f"JSON-RPC error {code}: {message}")
