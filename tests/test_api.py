"""Tests for the FastAPI app: REST endpoints and the /mcp JSON-RPC endpoint."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from mcp_base.api import create_app
from mcp_base.config import Settings
from mcp_base.registry import ServiceRegistry


@pytest.fixture
def client(demo_registry: ServiceRegistry, settings: Settings):
	app = create_app(demo_registry, settings)
	with TestClient(app) as c:
		yield c


def _echoed(resp_json: dict) -> dict:
	return json.loads(resp_json["result"]["content"][0]["text"])


class TestRoot:
	def test_index(self, client: TestClient) -> None:
		resp = client.get("/")
		assert resp.status_code == 200
		data = resp.json()
		assert data["name"] == "MCP Base API"
		assert data["endpoints"] == {"api": "/api/services", "mcp": "/mcp", "health": "/api/health"}

	def test_health(self, client: TestClient) -> None:
		assert client.get("/api/health").json() == {"status": "ok", "services": 1}

	def test_app_exposes_registry(self, demo_registry: ServiceRegistry, client: TestClient) -> None:
		assert client.app.state.registry is demo_registry


class TestServiceListing:
	def test_list_services(self, client: TestClient) -> None:
		resp = client.get("/api/services")
		assert resp.status_code == 200
		services = resp.json()["services"]
		assert [s["name"] for s in services] == ["demo"]
		assert "handlers" not in services[0]

	def test_list_tools(self, client: TestClient) -> None:
		resp = client.get("/api/services/demo/tools")
		assert resp.status_code == 200
		data = resp.json()
		assert data["service"] == "demo"
		assert [t["name"] for t in data["tools"]] == ["echo", "nested__tool"]
		assert data["configSchema"]["required"] == ["DEMO_TOKEN"]

	def test_list_tools_unknown_service(self, client: TestClient) -> None:
		resp = client.get("/api/services/nope/tools")
		assert resp.status_code == 404
		assert resp.json() == {"error": 'Service "nope" not found'}


class TestRestExecute:
	def test_execute_with_params(self, client: TestClient) -> None:
		resp = client.post("/api/services/demo/tools/echo", json={"params": {"value": "x"}})
		assert resp.status_code == 200
		assert resp.json()["result"]["isError"] is False
		assert _echoed(resp.json())["params"] == {"value": "x"}

	def test_execute_empty_body(self, client: TestClient) -> None:
		resp = client.post("/api/services/demo/tools/echo")
		assert resp.status_code == 200
		assert _echoed(resp.json())["params"] == {}

	def test_execute_malformed_body(self, client: TestClient) -> None:
		resp = client.post(
			"/api/services/demo/tools/echo",
			content=b"{not json",
			headers={"Content-Type": "application/json"},
		)
		assert resp.status_code == 200
		assert _echoed(resp.json())["params"] == {}

	def test_execute_non_object_params(self, client: TestClient) -> None:
		resp = client.post("/api/services/demo/tools/echo", json={"params": [1, 2]})
		assert _echoed(resp.json())["params"] == {}

	def test_execute_passes_header_config(self, client: TestClient) -> None:
		resp = client.post(
			"/api/services/demo/tools/echo",
			json={"params": {}},
			headers={
				"X-GitHub-Token": "gh-token",
				"X-N8N-API-URL": "https://n8n.example.com",
				"X-N8N-API-KEY": "n8n-key",
			},
		)
		assert _echoed(resp.json())["config"] == {
			"GITHUB_TOKEN": "gh-token",
			"N8N_API_URL": "https://n8n.example.com",
			"N8N_API_KEY": "n8n-key",
		}

	def test_execute_unknown_service(self, client: TestClient) -> None:
		resp = client.post("/api/services/nope/tools/echo", json={})
		assert resp.status_code == 404
		assert "nope" in resp.json()["error"]

	def test_execute_unknown_tool(self, client: TestClient) -> None:
		resp = client.post("/api/services/demo/tools/missing", json={})
		assert resp.status_code == 404
		assert resp.json() == {"error": 'Tool "missing" not found in service "demo"'}


class TestMcpEndpoint:
	def test_initialize(self, client: TestClient) -> None:
		resp = client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "initialize"})
		assert resp.status_code == 200
		assert resp.json()["result"]["serverInfo"]["name"] == "mcp-base"

	def test_parse_error(self, client: TestClient) -> None:
		resp = client.post("/mcp", content=b"{oops", headers={"Content-Type": "application/json"})
		assert resp.status_code == 400
		assert resp.json() == {"jsonrpc": "2.0", "error": {"code": -32700, "message": "Parse error"}, "id": None}

	def test_tools_call_with_headers(self, client: TestClient) -> None:
		resp = client.post(
			"/mcp",
			json={
				"jsonrpc": "2.0",
				"id": "abc",
				"method": "tools/call",
				"params": {"name": "demo__echo", "arguments": {"value": "v"}},
			},
			headers={"X-GitHub-Token": "tok"},
		)
		data = resp.json()
		assert data["id"] == "abc"
		assert _echoed(data) == {"params": {"value": "v"}, "config": {"GITHUB_TOKEN": "tok"}}

	def test_tools_call_bad_name(self, client: TestClient) -> None:
		resp = client.post(
			"/mcp",
			json={"jsonrpc": "2.0", "id": 2, "method": "tools/call", "params": {"name": "__echo"}},
		)
		assert resp.status_code == 200
		assert resp.json()["error"]["code"] == -32602

	def test_notification_accepted(self, client: TestClient) -> None:
		resp = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})
		assert resp.status_code == 202
		assert resp.content == b""


class TestEnvFallback:
	@pytest.fixture()
	def fallback_settings(self) -> Settings:
		settings = Settings()
		settings.server.env_fallback = True
		return settings

	def test_env_ignored_by_default(
		self, demo_registry: ServiceRegistry, monkeypatch: pytest.MonkeyPatch,
	) -> None:
		monkeypatch.setenv("GITHUB_TOKEN", "from-env")
		with TestClient(create_app(demo_registry)) as c:
			resp = c.post("/api/services/demo/tools/echo", json={})
		assert _echoed(resp.json())["config"] == {}

	def test_env_credentials_used_when_enabled(
		self, demo_registry: ServiceRegistry, fallback_settings: Settings, monkeypatch: pytest.MonkeyPatch,
	) -> None:
		monkeypatch.setenv("GITHUB_TOKEN", "from-env")
		monkeypatch.delenv("N8N_API_URL", raising=False)
		monkeypatch.delenv("N8N_API_KEY", raising=False)
		with TestClient(create_app(demo_registry, fallback_settings)) as c:
			resp = c.post("/api/services/demo/tools/echo", json={})
		assert _echoed(resp.json())["config"] == {"GITHUB_TOKEN": "from-env"}

	def test_header_overrides_env(
		self, demo_registry: ServiceRegistry, fallback_settings: Settings, monkeypatch: pytest.MonkeyPatch,
	) -> None:
		monkeypatch.setenv("GITHUB_TOKEN", "from-env")
		with TestClient(create_app(demo_registry, fallback_settings)) as c:
			resp = c.post("/api/services/demo/tools/echo", json={}, headers={"X-GitHub-Token": "hdr"})
		assert _echoed(resp.json())["config"]["GITHUB_TOKEN"] == "hdr"

