"""Dispatcher — resolves a tool by name, runs it, and normalizes the outcome.

The dispatcher is transport-agnostic: both the HTTP adapter and the MCP
session call :meth:`Dispatcher.dispatch` and translate the returned
:class:`DispatchResult` into their own wire format.  It never logs, retries
or times out a handler; those policies belong to the handler or to a layer
wrapped around it.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match
from jsonschema.protocols import Validator
from jsonschema.validators import validator_for
from pydantic import BaseModel

from evomcp.core.config import DEFAULT_CREDENTIAL_MARKERS
from evomcp.core.errors import ConfigurationError
from evomcp.core.registry import ToolRegistry


class ErrorKind(str, Enum):
    """Failure categories shared by every transport."""

    TOOL_NOT_FOUND = "ToolNotFound"
    AUTH_REQUIRED = "AuthRequired"
    INVALID_ARGUMENTS = "InvalidArguments"
    EXECUTION_FAILED = "ExecutionFailed"


class DispatchResult(BaseModel):
    """Outcome of a single dispatch, consumed once by the calling adapter."""

    ok: bool
    value: Any = None
    kind: ErrorKind | None = None
    message: str = ""

    @classmethod
    def success(cls, value: Any) -> DispatchResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> DispatchResult:
        return cls(ok=False, kind=kind, message=message)


class Dispatcher:
    """Runs tools from a :class:`ToolRegistry`.

    Failures raised by handlers are classified as:

    * :class:`ConfigurationError` → ``AuthRequired``;
    * any other exception whose message mentions one of *credential_markers*
      → ``AuthRequired`` (for collaborators that only raise plain errors);
    * everything else → ``ExecutionFailed``.

    Arguments are checked against each tool's ``inputSchema`` before the
    handler runs.  Schemas are compiled up front, so a malformed schema
    fails at construction rather than on the first call.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        credential_markers: Iterable[str] = DEFAULT_CREDENTIAL_MARKERS,
    ) -> None:
        self._registry = registry
        self._markers = tuple(credential_markers)
        self._validators: dict[str, Validator] = {}
        for tool in registry:
            cls = validator_for(tool.input_schema, default=Draft202012Validator)
            cls.check_schema(tool.input_schema)
            self._validators[tool.name] = cls(tool.input_schema)

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def dispatch(self, name: str, arguments: Any = None) -> DispatchResult:
        """Resolve *name*, validate *arguments*, and await the handler once."""
        tool = self._registry.find(name)
        if tool is None:
            return DispatchResult.failure(ErrorKind.TOOL_NOT_FOUND, f"Unknown tool: {name}")

        args = {} if arguments is None else arguments
        problem = self._validate(name, args)
        if problem is not None:
            return DispatchResult.failure(ErrorKind.INVALID_ARGUMENTS, problem)

        try:
            value = await tool.handler(args)
        except Exception as exc:  # noqa: BLE001
            return DispatchResult.failure(self._classify(exc), str(exc))
        return DispatchResult.success(value)

    def _validate(self, name: str, args: Any) -> str | None:
        if not isinstance(args, dict):
            return f"Arguments for {name} must be an object, got {type(args).__name__}"
        error = best_match(self._validators[name].iter_errors(args))
        if error is None:
            return None
        location = ".".join(str(part) for part in error.absolute_path)
        return f"{location}: {error.message}" if location else error.message

    def _classify(self, exc: Exception) -> ErrorKind:
        if isinstance(exc, ConfigurationError):
            return ErrorKind.AUTH_REQUIRED
        text = str(exc)
        if any(marker in text for marker in self._markers):
            return ErrorKind.AUTH_REQUIRED
        return ErrorKind.EXECUTION_FAILED
