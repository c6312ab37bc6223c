"""Tool registry — the immutable, ordered set of tools the gateway exposes.

The registry is built once at startup from a tool factory and never changes
afterwards, so both transports can read it without synchronization.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from evomcp.core.errors import DuplicateToolError

ToolHandler = Callable[[dict[str, Any]], Awaitable[Any]]
ToolFactory = Callable[[], Iterable["ToolDescriptor"]]


class ToolDescriptor(BaseModel):
    """A named, schema-described tool and the coroutine that runs it.

    The handler may return a string or any JSON-serializable value.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        alias="inputSchema",
    )
    handler: ToolHandler = Field(exclude=True, repr=False)

    def public_view(self) -> dict[str, Any]:
        """Return the client-facing definition (never includes the handler)."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class ToolRegistry:
    """Ordered, read-only collection of :class:`ToolDescriptor`.

    Usage::

        registry = ToolRegistry.from_factory(lambda: create_tools(settings))
        registry.list_tools()        # public metadata, definition order
        registry.find("sendMessage") # descriptor or None
    """

    def __init__(self, tools: Iterable[ToolDescriptor]) -> None:
        self._tools: tuple[ToolDescriptor, ...] = tuple(tools)
        self._index: dict[str, ToolDescriptor] = {}
        for tool in self._tools:
            if tool.name in self._index:
                raise DuplicateToolError(tool.name)
            self._index[tool.name] = tool

    @classmethod
    def from_factory(cls, factory: ToolFactory) -> ToolRegistry:
        """Build the registry from a tool factory.

        Any exception raised by the factory propagates: a registry that
        cannot be built is fatal to startup.
        """
        return cls(factory())

    def list_tools(self) -> list[dict[str, Any]]:
        """Return the public view of every tool, in definition order."""
        return [tool.public_view() for tool in self._tools]

    def find(self, name: str) -> ToolDescriptor | None:
        return self._index.get(name)

    def names(self) -> list[str]:
        return [tool.name for tool in self._tools]

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)
