"""CLI interface for mcp-base."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from mcp_base.config import DEFAULT_SETTINGS_FILE, Settings, load_settings, service_config_from_env, validate_settings
from mcp_base.services import build_registry

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="mcp-base",
		description="MCP Base - uniform tool-calling layer over GitHub and n8n",
	)
	parser.add_argument("--config", default=None, help=f"Settings file (e.g. {DEFAULT_SETTINGS_FILE})")
	parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
	sub = parser.add_subparsers(dest="command")

	# mcp-base serve
	serve = sub.add_parser("serve", help="Run the HTTP API (REST + JSON-RPC)")
	serve.add_argument("--host", default=None, help="Host to bind to (overrides settings)")
	serve.add_argument("--port", type=int, default=None, help="Port to serve on (overrides settings)")

	# mcp-base stdio
	sub.add_parser("stdio", help="Run the MCP server over stdio")

	# mcp-base services
	sub.add_parser("services", help="List registered services and their tools")

	# mcp-base call
	call = sub.add_parser("call", help="Execute one tool locally, credentials from the environment")
	call.add_argument("service", help="Service name, e.g. github")
	call.add_argument("tool", help="Tool name, e.g. find_repo")
	call.add_argument("--params", default="{}", help="Tool parameters as a JSON object")

	# mcp-base validate-config
	sub.add_parser("validate-config", help="Validate the settings file semantically")

	return parser


def _load(args: argparse.Namespace) -> Settings:
	return load_settings(args.config)


def cmd_serve(args: argparse.Namespace) -> int:
	"""Start the HTTP API with uvicorn."""
	import uvicorn

	from mcp_base.api import create_app

	settings = _load(args)
	if args.host:
		settings.server.host = args.host
	if args.port:
		settings.server.port = args.port

	registry = build_registry(settings.upstream)
	app = create_app(registry, settings)
	logger.info("Serving %d services on %s:%d", len(registry), settings.server.host, settings.server.port)
	uvicorn.run(app, host=settings.server.host, port=settings.server.port, log_level="info")
	return 0


def cmd_stdio(args: argparse.Namespace) -> int:
	"""Start the MCP stdio server."""
	from mcp_base.mcp_server import run_mcp_server

	run_mcp_server(_load(args))
	return 0


def cmd_services(args: argparse.Namespace) -> int:
	settings = _load(args)
	registry = build_registry(settings.upstream)
	for service in registry.get_services():
		print(f"{service.name}: {service.description}")
		required = (service.config_schema or {}).get("required", [])
		if required:
			print(f"  config: {', '.join(required)}")
		for tool in service.tools:
			print(f"  - {tool.name}: {tool.description}")
	return 0


def cmd_call(args: argparse.Namespace) -> int:
	try:
		params = json.loads(args.params)
	except json.JSONDecodeError as e:
		print(f"Error: --params is not valid JSON: {e}")
		return 1
	if not isinstance(params, dict):
		print("Error: --params must be a JSON object")
		return 1

	settings = _load(args)
	registry = build_registry(settings.upstream)
	result = asyncio.run(
		registry.execute_tool(args.service, args.tool, params, service_config_from_env()),
	)
	print(json.dumps(result.to_dict(), indent=2))
	return 1 if result.is_error else 0


def cmd_validate_config(args: argparse.Namespace) -> int:
	settings = _load(args)
	issues = validate_settings(settings)
	if not issues:
		print("Settings OK")
		return 0

	errors = [msg for level, msg in issues if level == "error"]
	warnings = [msg for level, msg in issues if level == "warning"]
	for msg in errors:
		print(f"ERROR: {msg}")
	for msg in warnings:
		print(f"WARNING: {msg}")
	print(f"\n{len(errors)} error(s), {len(warnings)} warning(s)")
	return 1 if errors else 0


COMMANDS = {
	"serve": cmd_serve,
	"stdio": cmd_stdio,
	"services": cmd_services,
	"call": cmd_call,
	"validate-config": cmd_validate_config,
}


def main(argv: list[str] | None = None) -> int:
	parser = build_parser()
	args = parser.parse_args(argv)
	# stdout belongs to the protocol in stdio mode, so logs go to stderr
	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.INFO,
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
		datefmt="%H:%M:%S",
		stream=sys.stderr,
		force=True,
	)

	if args.command is None:
		parser.print_help()
		return 0

	handler = COMMANDS.get(args.command)
	if handler is None:
		print(f"Unknown command: {args.command}")
		return 1

	try:
		return handler(args)
	except FileNotFoundError as e:
		print(f"Error: {e}")
		return 1


if __name__ == "__main__":
	sys.exit(main())
