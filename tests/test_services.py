"""Tests for the built-in service bootstrap."""

from __future__ import annotations

import pytest

from mcp_base.config import UpstreamConfig
from mcp_base.jsonrpc import list_flattened_tools
from mcp_base.services import build_registry


class TestBuildRegistry:
	def test_registers_builtin_services(self) -> None:
		registry = build_registry()
		assert [s.name for s in registry.get_services()] == ["github", "n8n"]

	def test_every_declared_tool_is_dispatchable(self) -> None:
		registry = build_registry()
		for service in registry.get_services():
			record = registry.get_service(service.name)
			for tool in service.tools:
				assert tool.name in record.handlers

	def test_flattened_names(self) -> None:
		names = {t["name"] for t in list_flattened_tools(build_registry())}
		assert "github__get_file_content" in names
		assert "n8n__list_workflows" in names
		assert len(names) == 15

	def test_registries_are_independent(self) -> None:
		first = build_registry(UpstreamConfig(timeout=5))
		second = build_registry()
		assert first is not second
		assert first.get_service("github") is not second.get_service("github")

	@pytest.mark.asyncio
	async def test_call_without_credentials_reports_missing_key(self) -> None:
		result = await build_registry().execute_tool("github", "find_repo", {"query": "x"}, {})
		assert result.is_error is True
		assert "GITHUB_TOKEN" in result.text
