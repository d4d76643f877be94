"""Built-in upstream services and registry bootstrap."""

from __future__ import annotations

import httpx

from mcp_base.config import UpstreamConfig
from mcp_base.registry import ServiceRegistry
from mcp_base.services.github import GitHubService
from mcp_base.services.n8n import N8nService

__all__ = [
	"GitHubService",
	"N8nService",
	"build_registry",
]


def build_registry(
	upstream: UpstreamConfig | None = None,
	transport: httpx.AsyncBaseTransport | None = None,
) -> ServiceRegistry:
	"""Create a registry with every built-in service registered."""
	registry = ServiceRegistry()
	for service in (GitHubService(upstream, transport), N8nService(upstream, transport)):
		registry.register(service.descriptor, service.handlers())
	return registry
