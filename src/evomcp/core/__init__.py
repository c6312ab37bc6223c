"""Gateway core: tool registry, dispatch, settings, and shared errors."""

from evomcp.core.config import GatewaySettings, SettingsLoader, load_settings
from evomcp.core.dispatch import DispatchResult, Dispatcher, ErrorKind
from evomcp.core.errors import (
    ConfigurationError,
    DuplicateToolError,
    GatewayConnectionError,
    GatewayError,
    RemoteProtocolError,
    SettingsValidationError,
    ToolExecutionError,
    ToolNotFoundError,
)
from evomcp.core.registry import ToolDescriptor, ToolRegistry

__all__ = [
    "ConfigurationError",
    "DispatchResult",
    "Dispatcher",
    "DuplicateToolError",
    "ErrorKind",
    "GatewayConnectionError",
    "GatewayError",
    "GatewaySettings",
    "RemoteProtocolError",
    "SettingsLoader",
    "SettingsValidationError",
    "ToolDescriptor",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ToolRegistry",
    "load_settings",
]
