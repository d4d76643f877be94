"""TOML settings loader and per-request service configuration for mcp-base."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mcp_base.models import ServiceConfig

DEFAULT_SETTINGS_FILE = "mcp-base.toml"

# Request header -> service configuration key
HEADER_CONFIG_KEYS: dict[str, str] = {
	"X-GitHub-Token": "GITHUB_TOKEN",
	"X-N8N-API-URL": "N8N_API_URL",
	"X-N8N-API-KEY": "N8N_API_KEY",
}


@dataclass
class ServerConfig:
	"""HTTP server settings."""

	host: str = "127.0.0.1"
	port: int = 8787
	env_fallback: bool = False  # read missing credentials from the process environment


@dataclass
class CorsConfig:
	"""Cross-origin settings for browser clients."""

	allow_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class UpstreamConfig:
	"""Outbound HTTP settings shared by all service clients."""

	timeout: float = 30.0
	github_api_base: str = "https://api.github.com"
	user_agent: str = "mcp-base"


@dataclass
class Settings:
	"""Top-level mcp-base configuration."""

	server: ServerConfig = field(default_factory=ServerConfig)
	cors: CorsConfig = field(default_factory=CorsConfig)
	upstream: UpstreamConfig = field(default_factory=UpstreamConfig)


def _build_server(data: dict[str, Any]) -> ServerConfig:
	sc = ServerConfig()
	if "host" in data:
		sc.host = str(data["host"])
	if "port" in data:
		sc.port = int(data["port"])
	if "env_fallback" in data:
		sc.env_fallback = bool(data["env_fallback"])
	return sc


def _build_cors(data: dict[str, Any]) -> CorsConfig:
	cc = CorsConfig()
	if "allow_origins" in data:
		cc.allow_origins = [str(o) for o in data["allow_origins"]]
	return cc


def _build_upstream(data: dict[str, Any]) -> UpstreamConfig:
	uc = UpstreamConfig()
	if "timeout" in data:
		uc.timeout = float(data["timeout"])
	if "github_api_base" in data:
		uc.github_api_base = str(data["github_api_base"]).rstrip("/")
	if "user_agent" in data:
		uc.user_agent = str(data["user_agent"])
	return uc


def _apply_env_overrides(settings: Settings) -> None:
	host = os.environ.get("MCP_BASE_HOST")
	if host:
		settings.server.host = host
	port = os.environ.get("MCP_BASE_PORT")
	if port:
		settings.server.port = int(port)


def load_settings(path: str | Path | None = None) -> Settings:
	"""Load an mcp-base.toml settings file.

	Args:
		path: Path to the TOML file, or None for built-in defaults.

	Returns:
		Parsed Settings, with MCP_BASE_HOST / MCP_BASE_PORT applied on top.

	Raises:
		FileNotFoundError: If a path is given and the file doesn't exist.
		tomllib.TOMLDecodeError: If the file is invalid TOML.
	"""
	settings = Settings()
	if path is not None:
		settings_path = Path(path)
		if not settings_path.exists():
			raise FileNotFoundError(f"Settings file not found: {settings_path}")

		with open(settings_path, "rb") as f:
			data = tomllib.load(f)

		if "server" in data:
			settings.server = _build_server(data["server"])
		if "cors" in data:
			settings.cors = _build_cors(data["cors"])
		if "upstream" in data:
			settings.upstream = _build_upstream(data["upstream"])

	_apply_env_overrides(settings)
	return settings


def validate_settings(settings: Settings) -> list[tuple[str, str]]:
	"""Semantic checks on loaded settings.

	Returns a list of (level, message) tuples where level is 'error' or 'warning'.
	"""
	issues: list[tuple[str, str]] = []

	if not 0 < settings.server.port < 65536:
		issues.append(("error", f"server.port out of range: {settings.server.port}"))
	if settings.upstream.timeout <= 0:
		issues.append(("error", f"upstream.timeout must be positive: {settings.upstream.timeout}"))
	if not settings.upstream.github_api_base.startswith(("http://", "https://")):
		issues.append(("error", f"upstream.github_api_base is not an http(s) URL: {settings.upstream.github_api_base}"))

	if settings.server.host not in ("127.0.0.1", "localhost", "::1"):
		issues.append(("warning", f"server binds to non-loopback host {settings.server.host}; there is no authentication"))
	if "*" in settings.cors.allow_origins and settings.server.host not in ("127.0.0.1", "localhost", "::1"):
		issues.append(("warning", "cors.allow_origins is '*' on a public bind"))
	if settings.server.env_fallback and settings.server.host not in ("127.0.0.1", "localhost", "::1"):
		issues.append(("warning", "server.env_fallback lends the operator's credentials to any caller on a public bind"))
	if settings.upstream.timeout > 300:
		issues.append(("warning", f"upstream.timeout is very high: {settings.upstream.timeout}s"))

	return issues


def service_config_from_env() -> ServiceConfig:
	"""Collect every known service configuration key present in the environment."""
	config: ServiceConfig = {}
	for key in HEADER_CONFIG_KEYS.values():
		value = os.environ.get(key)
		if value:
			config[key] = value
	return config


def service_config_from_headers(headers: Mapping[str, str], env_fallback: bool = False) -> ServiceConfig:
	"""Build the per-request configuration object from request headers.

	Header lookup is case-insensitive when given a case-insensitive mapping
	(e.g. Starlette Headers). Keys with no header fall back to the process
	environment when env_fallback is set.
	"""
	config: ServiceConfig = service_config_from_env() if env_fallback else {}
	for header, key in HEADER_CONFIG_KEYS.items():
		value = headers.get(header)
		if value:
			config[key] = value
	return config
