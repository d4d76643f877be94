"""MCP server over stdio, for desktop MCP hosts.

Exposes the same registry and flattened tool names as the HTTP JSON-RPC
endpoint, but through the official SDK. Credentials come from the process
environment since there are no request headers.
"""

from __future__ import annotations

import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
	BlobResourceContents,
	CallToolResult,
	EmbeddedResource,
	ImageContent,
	TextContent,
	TextResourceContents,
	Tool,
)

from mcp_base import __version__
from mcp_base.config import Settings, service_config_from_env
from mcp_base.errors import InvalidToolNameError
from mcp_base.jsonrpc import list_flattened_tools, split_tool_name
from mcp_base.models import (
	ContentItem,
	ResourceContent,
	ServiceConfig,
	ToolResult,
	error_result,
)
from mcp_base.models import ImageContent as BaseImageContent
from mcp_base.registry import ServiceRegistry
from mcp_base.services import build_registry

logger = logging.getLogger(__name__)


def to_mcp_tools(registry: ServiceRegistry) -> list[Tool]:
	return [Tool(**tool) for tool in list_flattened_tools(registry)]


def _to_mcp_content(item: ContentItem) -> TextContent | ImageContent | EmbeddedResource:
	if isinstance(item, BaseImageContent):
		return ImageContent(type="image", data=item.data, mimeType=item.mime_type)
	if isinstance(item, ResourceContent):
		res = item.resource
		contents: TextResourceContents | BlobResourceContents
		if res.blob is not None:
			contents = BlobResourceContents(uri=res.uri, mimeType=res.mime_type, blob=res.blob)
		else:
			contents = TextResourceContents(uri=res.uri, mimeType=res.mime_type, text=res.text or "")
		return EmbeddedResource(type="resource", resource=contents)
	return TextContent(type="text", text=item.text)


def to_call_tool_result(result: ToolResult) -> CallToolResult:
	return CallToolResult(
		content=[_to_mcp_content(c) for c in result.content],
		isError=result.is_error,
	)


async def call_flattened_tool(
	registry: ServiceRegistry,
	name: str,
	arguments: dict[str, Any] | None,
	config: ServiceConfig,
) -> ToolResult:
	"""Resolve a service__tool name and execute it; bad names become error results."""
	try:
		service_name, tool_name = split_tool_name(name)
	except InvalidToolNameError as exc:
		return error_result(str(exc))
	return await registry.execute_tool(service_name, tool_name, arguments or {}, config)


def create_mcp_server(registry: ServiceRegistry, config: ServiceConfig) -> Server:
	"""Build an SDK server bound to one registry and one configuration object."""
	server: Server = Server("mcp-base", version=__version__)

	@server.list_tools()
	async def list_tools() -> list[Tool]:
		return to_mcp_tools(registry)

	@server.call_tool()
	async def call_tool(name: str, arguments: dict) -> CallToolResult:
		result = await call_flattened_tool(registry, name, arguments, config)
		return to_call_tool_result(result)

	return server


def run_mcp_server(settings: Settings | None = None) -> None:
	"""Entry point for the `mcp-base stdio` CLI command."""
	import asyncio

	settings = settings or Settings()
	registry = build_registry(settings.upstream)
	server = create_mcp_server(registry, service_config_from_env())
	logger.info("MCP stdio server starting with %d services", len(registry))

	async def _run():
		async with stdio_server() as (read_stream, write_stream):
			await server.run(read_stream, write_stream, server.create_initialization_options())

	asyncio.run(_run())
