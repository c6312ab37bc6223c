"""Evolution API tools — the WhatsApp operations exposed by the gateway.

Each tool maps onto one Evolution API v2 endpoint.  Every tool accepts an
optional ``instance`` argument; when omitted, the configured
``EVOLUTION_INSTANCE`` is used.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Any

from evomcp.core.registry import ToolDescriptor
from evomcp.tools.client import EvolutionClient

if TYPE_CHECKING:
    import httpx

    from evomcp.core.config import GatewaySettings

_INSTANCE = {
    "type": "string",
    "description": "Evolution API instance name (defaults to EVOLUTION_INSTANCE)",
}


def _schema(properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {**properties, "instance": _INSTANCE},
        "required": required or [],
    }


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def send_message(client: EvolutionClient, args: dict[str, Any]) -> Any:
    instance = client.instance("sendMessage", args)
    body: dict[str, Any] = {"number": args["number"], "text": args["text"]}
    if "delay" in args:
        body["delay"] = args["delay"]
    return await client.request("sendMessage", "POST", f"/message/sendText/{instance}", json=body)


async def send_media(client: EvolutionClient, args: dict[str, Any]) -> Any:
    instance = client.instance("sendMedia", args)
    body = {
        key: args[key]
        for key in ("number", "mediatype", "media", "caption", "fileName", "mimetype")
        if key in args
    }
    return await client.request("sendMedia", "POST", f"/message/sendMedia/{instance}", json=body)


async def list_chats(client: EvolutionClient, args: dict[str, Any]) -> Any:
    instance = client.instance("listChats", args)
    return await client.request("listChats", "POST", f"/chat/findChats/{instance}", json={})


async def find_messages(client: EvolutionClient, args: dict[str, Any]) -> Any:
    instance = client.instance("findMessages", args)
    body: dict[str, Any] = {"where": {"key": {"remoteJid": args["remoteJid"]}}}
    if "page" in args:
        body["page"] = args["page"]
    return await client.request(
        "findMessages", "POST", f"/chat/findMessages/{instance}", json=body
    )


async def list_contacts(client: EvolutionClient, args: dict[str, Any]) -> Any:
    instance = client.instance("listContacts", args)
    where = {"id": args["id"]} if "id" in args else {}
    return await client.request(
        "listContacts", "POST", f"/chat/findContacts/{instance}", json={"where": where}
    )


async def check_numbers(client: EvolutionClient, args: dict[str, Any]) -> Any:
    instance = client.instance("checkNumbers", args)
    return await client.request(
        "checkNumbers",
        "POST",
        f"/chat/whatsappNumbers/{instance}",
        json={"numbers": args["numbers"]},
    )


async def get_connection_state(client: EvolutionClient, args: dict[str, Any]) -> Any:
    instance = client.instance("getConnectionState", args)
    return await client.request(
        "getConnectionState", "GET", f"/instance/connectionState/{instance}"
    )


async def list_instances(client: EvolutionClient, args: dict[str, Any]) -> Any:
    params = {"instanceName": args["instance"]} if args.get("instance") else None
    return await client.request("listInstances", "GET", "/instance/fetchInstances", params=params)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_tools(
    settings: GatewaySettings, *, transport: httpx.AsyncBaseTransport | None = None
) -> list[ToolDescriptor]:
    """Build the ordered tool list for the registry."""
    client = EvolutionClient.from_settings(settings, transport=transport)
    return [
        ToolDescriptor(
            name="sendMessage",
            description="Send a WhatsApp text message",
            inputSchema=_schema(
                {
                    "number": {"type": "string", "description": "Recipient number with country code"},
                    "text": {"type": "string", "description": "Message body"},
                    "delay": {"type": "integer", "minimum": 0, "description": "Delay in ms"},
                },
                required=["number", "text"],
            ),
            handler=partial(send_message, client),
        ),
        ToolDescriptor(
            name="sendMedia",
            description="Send an image, video, audio or document",
            inputSchema=_schema(
                {
                    "number": {"type": "string"},
                    "mediatype": {"type": "string", "enum": ["image", "video", "audio", "document"]},
                    "media": {"type": "string", "description": "URL or base64 payload"},
                    "caption": {"type": "string"},
                    "fileName": {"type": "string"},
                    "mimetype": {"type": "string"},
                },
                required=["number", "mediatype", "media"],
            ),
            handler=partial(send_media, client),
        ),
        ToolDescriptor(
            name="listChats",
            description="List the chats of an instance",
            inputSchema=_schema({}),
            handler=partial(list_chats, client),
        ),
        ToolDescriptor(
            name="findMessages",
            description="Fetch messages exchanged with a chat",
            inputSchema=_schema(
                {
                    "remoteJid": {"type": "string", "description": "Chat JID, e.g. 5511999999999@s.whatsapp.net"},
                    "page": {"type": "integer", "minimum": 1},
                },
                required=["remoteJid"],
            ),
            handler=partial(find_messages, client),
        ),
        ToolDescriptor(
            name="listContacts",
            description="List contacts, optionally filtered by JID",
            inputSchema=_schema({"id": {"type": "string", "description": "Contact JID"}}),
            handler=partial(list_contacts, client),
        ),
        ToolDescriptor(
            name="checkNumbers",
            description="Check which phone numbers have WhatsApp accounts",
            inputSchema=_schema(
                {"numbers": {"type": "array", "items": {"type": "string"}, "minItems": 1}},
                required=["numbers"],
            ),
            handler=partial(check_numbers, client),
        ),
        ToolDescriptor(
            name="getConnectionState",
            description="Get the WhatsApp connection state of an instance",
            inputSchema=_schema({}),
            handler=partial(get_connection_state, client),
        ),
        ToolDescriptor(
            name="listInstances",
            description="List Evolution API instances",
            inputSchema=_schema({}),
            handler=partial(list_instances, client),
        ),
    ]
