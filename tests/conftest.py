"""Shared fixtures: a small registry whose handlers cover every outcome."""

from __future__ import annotations

from typing import Any

import pytest

from evomcp.core.dispatch import Dispatcher
from evomcp.core.errors import ConfigurationError
from evomcp.core.registry import ToolDescriptor, ToolRegistry

_MESSAGE_SCHEMA = {
    "type": "object",
    "properties": {"number": {"type": "string"}, "text": {"type": "string"}},
    "required": ["number", "text"],
}


async def _send_message(args: dict[str, Any]) -> str:
    return "OK"


async def _list_chats(args: dict[str, Any]) -> Any:
    raise Exception("EVOLUTION_API_KEY missing")


async def _get_status(args: dict[str, Any]) -> dict[str, Any]:
    return {"instance": args.get("instance", "main"), "state": "open"}


async def _explode(args: dict[str, Any]) -> Any:
    raise RuntimeError("boom")


async def _unconfigured(args: dict[str, Any]) -> Any:
    raise ConfigurationError(["EVOLUTION_API_URL"])


def build_tools() -> list[ToolDescriptor]:
    return [
        ToolDescriptor(
            name="sendMessage",
            description="Send a text message",
            inputSchema=_MESSAGE_SCHEMA,
            handler=_send_message,
        ),
        ToolDescriptor(name="listChats", description="List chats", handler=_list_chats),
        ToolDescriptor(name="getStatus", description="Instance status", handler=_get_status),
        ToolDescriptor(name="explode", description="Always fails", handler=_explode),
        ToolDescriptor(name="unconfigured", description="Needs setup", handler=_unconfigured),
    ]


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry(build_tools())


@pytest.fixture
def dispatcher(registry: ToolRegistry) -> Dispatcher:
    return Dispatcher(registry)
