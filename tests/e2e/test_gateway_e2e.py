"""E2E tests: the real Evolution tool set behind both transports.

Evolution API traffic is served by an ``httpx.MockTransport`` so the full
path (adapter, dispatcher, tool handler, HTTP client) runs in-process.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from evomcp.core.config import GatewaySettings
from evomcp.core.registry import ToolRegistry
from evomcp.server.app import create_app
from evomcp.tools import create_tools


def _evolution_api(request: httpx.Request) -> httpx.Response:
    if request.headers.get("apikey") != "secret":
        return httpx.Response(401, json={"message": "Unauthorized"})
    if request.url.path == "/message/sendText/main":
        body = json.loads(request.content)
        return httpx.Response(201, json={"key": {"remoteJid": body["number"]}, "status": "PENDING"})
    if request.url.path == "/instance/connectionState/main":
        return httpx.Response(200, json={"instance": {"instanceName": "main", "state": "open"}})
    return httpx.Response(404, text="Not Found")


def _client(**overrides: Any) -> TestClient:
    values: dict[str, Any] = {
        "evolution_api_url": "http://evo.local",
        "evolution_api_key": "secret",
        "evolution_instance": "main",
    }
    values.update(overrides)
    settings = GatewaySettings(**values)
    tools = create_tools(settings, transport=httpx.MockTransport(_evolution_api))
    return TestClient(create_app(ToolRegistry(tools), settings))


@pytest.fixture
def client() -> TestClient:
    return _client()


class TestHttpEndToEnd:
    def test_send_message(self, client: TestClient) -> None:
        resp = client.post("/tools/sendMessage", json={"number": "5511999", "text": "hi"})
        assert resp.status_code == 200
        assert resp.json()["result"] == {"key": {"remoteJid": "5511999"}, "status": "PENDING"}

    def test_upstream_404_is_execution_failure(self, client: TestClient) -> None:
        resp = client.post("/tools/listChats", json={"instance": "ghost"})
        assert resp.status_code == 500
        assert "HTTP 404" in resp.json()["message"]

    def test_unconfigured_gateway_asks_for_credentials(self) -> None:
        client = _client(evolution_api_url=None, evolution_api_key=None)
        resp = client.post("/tools/getConnectionState", json={})
        assert resp.status_code == 401
        assert resp.json()["error"] == "Authentication required"


class TestMcpEndToEnd:
    def test_session(self, client: TestClient) -> None:
        with client.websocket_connect("/mcp") as ws:
            ws.send_json({"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}})
            assert ws.receive_json()["result"]["protocolVersion"] == "2024-11-05"

            ws.send_json({"jsonrpc": "2.0", "id": 2, "method": "tools/list"})
            names = [t["name"] for t in ws.receive_json()["result"]["tools"]]
            assert "getConnectionState" in names

            ws.send_json({
                "jsonrpc": "2.0",
                "id": 3,
                "method": "tools/call",
                "params": {"name": "getConnectionState", "arguments": {}},
            })
            reply = ws.receive_json()
            text = reply["result"]["content"][0]["text"]
            assert json.loads(text) == {"instance": {"instanceName": "main", "state": "open"}}

    def test_unconfigured_gateway_reports_internal_error(self) -> None:
        client = _client(evolution_api_key=None)
        with client.websocket_connect("/mcp") as ws:
            ws.send_json({"jsonrpc": "2.0", "id": 1, "method": "initialize"})
            ws.receive_json()
            ws.send_json({
                "jsonrpc": "2.0",
                "id": 2,
                "method": "tools/call",
                "params": {"name": "listChats"},
            })
            error = ws.receive_json()["error"]
            assert error["code"] == -32603
            assert "EVOLUTION_API_KEY" in error["message"]
