"""JSON-RPC 2.0 (MCP-compatible) adapter over the service registry.

Tools are exposed under flattened names of the form ``service__tool``.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, ValidationError

from mcp_base import __version__
from mcp_base.errors import InvalidToolNameError
from mcp_base.models import ServiceConfig
from mcp_base.registry import ServiceRegistry

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SEPARATOR = "__"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


def join_tool_name(service: str, tool: str) -> str:
	return f"{service}{SEPARATOR}{tool}"


def split_tool_name(full_name: object) -> tuple[str, str]:
	"""Split ``service__tool`` on the first separator.

	The remainder is the tool name and may itself contain ``__``.

	Raises:
		InvalidToolNameError: If there is no separator or either side is empty.
	"""
	if not isinstance(full_name, str):
		raise InvalidToolNameError("Invalid tool name format. Expected: service__tool")
	service, sep, tool = full_name.partition(SEPARATOR)
	if not sep or not service or not tool:
		raise InvalidToolNameError("Invalid tool name format. Expected: service__tool")
	return service, tool


def list_flattened_tools(registry: ServiceRegistry) -> list[dict[str, Any]]:
	"""Every registered tool, named service__tool, description tagged with its service."""
	return [
		{
			"name": join_tool_name(service.name, tool.name),
			"description": f"[{service.name}] {tool.description}",
			"inputSchema": tool.input_schema,
		}
		for service in registry.get_services()
		for tool in service.tools
	]


class JsonRpcRequest(BaseModel):
	"""Inbound JSON-RPC request or notification."""

	jsonrpc: Literal["2.0"] = "2.0"
	method: str
	params: dict[str, Any] | None = None
	id: str | int | None = None

	@property
	def is_notification(self) -> bool:
		return "id" not in self.model_fields_set


class ToolCallParams(BaseModel):
	"""``params`` of a tools/call request."""

	name: Any = None
	arguments: dict[str, Any] | None = None


def make_response(request_id: str | int | None, result: Any) -> dict[str, Any]:
	return {"jsonrpc": "2.0", "result": result, "id": request_id}


def make_error(request_id: str | int | None, code: int, message: str) -> dict[str, Any]:
	return {"jsonrpc": "2.0", "error": {"code": code, "message": message}, "id": request_id}


class JsonRpcHandler:
	"""Dispatches JSON-RPC messages to the registry.

	Stateless between calls: the service configuration arrives with each
	message and is passed straight through to the tool handler.
	"""

	def __init__(self, registry: ServiceRegistry, server_name: str = "mcp-base") -> None:
		self._registry = registry
		self._server_info = {"name": server_name, "version": __version__}

	async def handle(self, message: Any, config: ServiceConfig) -> dict[str, Any] | None:
		"""Handle one decoded JSON message.

		Returns the response envelope, or None for notifications.
		"""
		raw_id = message.get("id") if isinstance(message, dict) else None
		request_id = raw_id if isinstance(raw_id, (str, int)) else None
		try:
			request = JsonRpcRequest.model_validate(message)
		except ValidationError:
			return make_error(request_id, INVALID_REQUEST, "Invalid Request")

		response = await self._dispatch(request, config)
		if request.is_notification:
			logger.debug("Notification processed: %s", request.method)
			return None
		return response

	async def _dispatch(self, request: JsonRpcRequest, config: ServiceConfig) -> dict[str, Any]:
		if request.method == "initialize":
			return make_response(request.id, {
				"protocolVersion": PROTOCOL_VERSION,
				"capabilities": {"tools": {}},
				"serverInfo": self._server_info,
			})
		if request.method == "ping":
			return make_response(request.id, {})
		if request.method == "tools/list":
			return make_response(request.id, {"tools": list_flattened_tools(self._registry)})
		if request.method == "tools/call":
			return await self._call_tool(request, config)
		return make_error(request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}")

	async def _call_tool(self, request: JsonRpcRequest, config: ServiceConfig) -> dict[str, Any]:
		try:
			call = ToolCallParams.model_validate(request.params or {})
		except ValidationError:
			return make_error(request.id, INVALID_PARAMS, "Invalid params: arguments must be an object")

		try:
			service_name, tool_name = split_tool_name(call.name)
		except InvalidToolNameError as exc:
			return make_error(request.id, INVALID_PARAMS, str(exc))

		logger.info("tools/call %s/%s", service_name, tool_name)
		result = await self._registry.execute_tool(service_name, tool_name, call.arguments or {}, config)
		return make_response(request.id, result.to_dict())
