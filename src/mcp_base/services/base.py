"""Shared async HTTP plumbing for upstream service clients."""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from mcp_base.errors import MCPBaseError, MissingConfigError, UpstreamError
from mcp_base.models import ServiceConfig, ToolResult, error_result, get_error_message

logger = logging.getLogger(__name__)


def require(config: ServiceConfig, key: str) -> str:
	"""Return config[key], raising MissingConfigError when absent or empty."""
	value = config.get(key)
	if not value:
		raise MissingConfigError(key)
	return value


class UpstreamClient:
	"""Thin wrapper over httpx.AsyncClient that maps error statuses to UpstreamError.

	One client lives for the duration of one tool call; use it as an async
	context manager so the connection pool is released afterwards.
	"""

	api_name = "Upstream"

	def __init__(
		self,
		base_url: str,
		headers: dict[str, str],
		timeout: float = 30.0,
		transport: httpx.AsyncBaseTransport | None = None,
	) -> None:
		self._client = httpx.AsyncClient(
			base_url=base_url,
			headers=headers,
			timeout=timeout,
			transport=transport,
		)

	async def __aenter__(self) -> UpstreamClient:
		return self

	async def __aexit__(self, *exc_info: object) -> None:
		await self.close()

	async def close(self) -> None:
		await self._client.aclose()

	async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
		resp = await self._client.request(method, url, **kwargs)
		if resp.is_error:
			logger.debug("%s %s -> %d", method, url, resp.status_code)
			raise UpstreamError(self.api_name, resp.status_code, resp.text)
		return resp

	async def request_json(self, method: str, url: str, **kwargs: Any) -> Any:
		resp = await self._send(method, url, **kwargs)
		return resp.json()

	async def request_text(self, method: str, url: str, **kwargs: Any) -> str:
		resp = await self._send(method, url, **kwargs)
		return resp.text


def catch_errors(
	func: Callable[..., Awaitable[ToolResult]],
) -> Callable[..., Awaitable[ToolResult]]:
	"""Turn any exception raised by a tool handler into an error result."""

	@functools.wraps(func)
	async def wrapper(*args: Any, **kwargs: Any) -> ToolResult:
		try:
			return await func(*args, **kwargs)
		except (MCPBaseError, httpx.HTTPError) as exc:
			logger.warning("%s failed: %s", func.__name__, exc)
			return error_result(get_error_message(exc))
		except KeyError as exc:
			return error_result(f"Missing required parameter: {exc.args[0]}")
		except Exception as exc:
			logger.exception("%s raised unexpectedly", func.__name__)
			return error_result(get_error_message(exc))

	return wrapper
