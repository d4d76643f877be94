"""Shared pytest fixtures and factory functions for mcp-base tests."""

from __future__ import annotations

from typing import Any

import pytest

from mcp_base.config import Settings
from mcp_base.models import ServiceConfig, ServiceDescriptor, ToolDescriptor, ToolResult, json_content, tool_result
from mcp_base.registry import ServiceRegistry


async def echo_handler(params: dict[str, Any], config: ServiceConfig) -> ToolResult:
	"""Handler that reflects its inputs back as JSON."""
	return tool_result([json_content({"params": params, "config": config})])


def make_tool(name: str = "echo", **overrides: Any) -> ToolDescriptor:
	"""Create a ToolDescriptor with sensible defaults, overridable via kwargs."""
	defaults: dict[str, Any] = {
		"name": name,
		"description": f"{name} tool",
		"input_schema": {"type": "object", "properties": {"value": {"type": "string"}}},
	}
	defaults.update(overrides)
	return ToolDescriptor(**defaults)


def make_service(name: str = "demo", tools: list[str] | None = None, **overrides: Any) -> ServiceDescriptor:
	"""Create a ServiceDescriptor whose tools are named by `tools`."""
	tool_names = tools if tools is not None else ["echo"]
	defaults: dict[str, Any] = {
		"name": name,
		"description": f"{name} service",
		"tools": tuple(make_tool(t) for t in tool_names),
		"config_schema": {
			"type": "object",
			"properties": {"DEMO_TOKEN": {"type": "string"}},
			"required": ["DEMO_TOKEN"],
		},
	}
	defaults.update(overrides)
	return ServiceDescriptor(**defaults)


@pytest.fixture()
def registry() -> ServiceRegistry:
	"""Empty registry."""
	return ServiceRegistry()


@pytest.fixture()
def demo_registry() -> ServiceRegistry:
	"""Registry with one 'demo' service exposing 'echo' and 'nested__tool'."""
	reg = ServiceRegistry()
	reg.register(
		make_service("demo", ["echo", "nested__tool"]),
		{"echo": echo_handler, "nested__tool": echo_handler},
	)
	return reg


@pytest.fixture()
def settings() -> Settings:
	"""Default settings; environment fallback is off."""
	return Settings()
