"""EvolutionClient — minimal async client for the Evolution API (WhatsApp)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from evomcp.core.errors import ConfigurationError, ToolExecutionError

if TYPE_CHECKING:
    from evomcp.core.config import GatewaySettings


class EvolutionClient:
    """Issues authenticated requests against an Evolution API server.

    Credentials are checked on every request rather than at construction so
    the gateway can start (and list its tools) without them; calls then fail
    with :class:`ConfigurationError` naming the missing keys.
    """

    def __init__(
        self,
        base_url: str | None,
        api_key: str | None,
        *,
        default_instance: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/") if base_url else None
        self._api_key = api_key
        self._default_instance = default_instance
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls, settings: GatewaySettings, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> EvolutionClient:
        return cls(
            settings.evolution_api_url,
            settings.evolution_api_key,
            default_instance=settings.evolution_instance,
            timeout=settings.request_timeout,
            transport=transport,
        )

    def instance(self, tool: str, arguments: dict[str, Any]) -> str:
        """Return the instance named in *arguments*, else the configured default."""
        name = arguments.get("instance") or self._default_instance
        if not name:
            raise ToolExecutionError(
                tool, "no 'instance' argument given and EVOLUTION_INSTANCE is not set"
            )
        return str(name)

    async def request(
        self,
        tool: str,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON (or raw text) body."""
        missing = [
            key
            for key, value in (
                ("EVOLUTION_API_URL", self._base_url),
                ("EVOLUTION_API_KEY", self._api_key),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(missing)

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url or "",
                headers={"apikey": self._api_key or ""},
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, json=json, params=params)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = f"HTTP {exc.response.status_code}: {exc.response.text[:200]}"
            raise ToolExecutionError(tool, detail) from exc
        except httpx.HTTPError as exc:
            raise ToolExecutionError(tool, str(exc)) from exc

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return response.text
