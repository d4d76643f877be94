"""Exception types raised by mcp-base.

Registration problems are raised and are fatal at startup. Dispatch problems
never escape the registry: they become error results instead.
"""

from __future__ import annotations


class MCPBaseError(Exception):
	"""Base class for all mcp-base errors."""


class MissingHandlerError(MCPBaseError):
	"""A declared tool has no handler bound to it."""

	def __init__(self, service: str, tool: str) -> None:
		self.service = service
		self.tool = tool
		super().__init__(f'Service "{service}" tool "{tool}" has no handler')


class DuplicateToolError(MCPBaseError):
	"""A service declares the same tool name twice."""

	def __init__(self, service: str, tool: str) -> None:
		self.service = service
		self.tool = tool
		super().__init__(f'Service "{service}" declares tool "{tool}" more than once')


class InvalidToolNameError(MCPBaseError, ValueError):
	"""A flattened tool name is not of the form service__tool."""


class MissingConfigError(MCPBaseError):
	"""A required per-request configuration key was not supplied."""

	def __init__(self, key: str) -> None:
		self.key = key
		super().__init__(f"{key} is required")


class UpstreamError(MCPBaseError):
	"""An upstream REST API answered with a non-success status."""

	def __init__(self, api: str, status_code: int, body: str = "") -> None:
		self.api = api
		self.status_code = status_code
		self.body = body
		if body:
			super().__init__(f"{api} API error ({status_code}): {body}")
		else:
			super().__init__(f"{api} API error ({status_code})")
