"""Service registry: maps (service, tool) pairs to handlers and dispatches calls.

One registry instance is built at startup and handed to every wire adapter.
It is written only during registration and read-only while serving requests.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from mcp_base.errors import DuplicateToolError, MissingHandlerError
from mcp_base.models import (
	ServiceConfig,
	ServiceDescriptor,
	ToolDescriptor,
	ToolResult,
	error_result,
	get_error_message,
)

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict[str, Any], ServiceConfig], Awaitable[ToolResult]]


@dataclass(frozen=True)
class RegisteredService:
	"""A service descriptor together with its handler table."""

	descriptor: ServiceDescriptor
	handlers: Mapping[str, ToolHandler]

	@property
	def name(self) -> str:
		return self.descriptor.name

	@property
	def tools(self) -> tuple[ToolDescriptor, ...]:
		return self.descriptor.tools

	def find_tool(self, name: str) -> ToolDescriptor | None:
		for tool in self.descriptor.tools:
			if tool.name == name:
				return tool
		return None


class ServiceRegistry:
	"""In-process registry of services and their tool handlers."""

	def __init__(self) -> None:
		self._services: dict[str, RegisteredService] = {}

	def register(self, descriptor: ServiceDescriptor, handlers: Mapping[str, ToolHandler]) -> None:
		"""Register a service. Every declared tool must have a handler.

		Raises:
			DuplicateToolError: If the descriptor lists a tool name twice.
			MissingHandlerError: If a declared tool has no handler. Nothing is
				stored in that case.
		"""
		seen: set[str] = set()
		for tool in descriptor.tools:
			if tool.name in seen:
				raise DuplicateToolError(descriptor.name, tool.name)
			seen.add(tool.name)
			if tool.name not in handlers:
				raise MissingHandlerError(descriptor.name, tool.name)

		if descriptor.name in self._services:
			logger.warning("Service '%s' is already registered; replacing it", descriptor.name)

		self._services[descriptor.name] = RegisteredService(
			descriptor=descriptor,
			handlers=MappingProxyType(dict(handlers)),
		)
		logger.debug("Registered service '%s' with %d tools", descriptor.name, len(descriptor.tools))

	def get_services(self) -> list[ServiceDescriptor]:
		"""All registered service descriptors, in registration order, without handlers."""
		return [s.descriptor for s in self._services.values()]

	def get_service(self, name: str) -> RegisteredService | None:
		return self._services.get(name)

	def __len__(self) -> int:
		return len(self._services)

	def __contains__(self, name: object) -> bool:
		return name in self._services

	async def execute_tool(
		self,
		service_name: str,
		tool_name: str,
		params: dict[str, Any],
		config: ServiceConfig,
	) -> ToolResult:
		"""Dispatch one tool call.

		Unknown services and tools come back as error results rather than
		exceptions. Faults raised by the handler are logged and converted into
		an error result as well.
		"""
		service = self._services.get(service_name)
		if service is None:
			return error_result(f'Service "{service_name}" not found')

		handler = service.handlers.get(tool_name)
		if handler is None:
			return error_result(f'Tool "{tool_name}" not found in service "{service_name}"')

		try:
			result = await handler(params, config)
		except Exception as exc:
			logger.exception("Handler for %s/%s raised", service_name, tool_name)
			return error_result(get_error_message(exc))

		if not isinstance(result, ToolResult):
			logger.error(
				"Handler for %s/%s returned %s instead of ToolResult",
				service_name, tool_name, type(result).__name__,
			)
			return error_result(f'Tool "{tool_name}" in service "{service_name}" returned an invalid result')
		return result
