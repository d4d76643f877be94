"""FastAPI application exposing the registry over REST and JSON-RPC."""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ValidationError

from mcp_base import __version__
from mcp_base.config import Settings, service_config_from_headers
from mcp_base.jsonrpc import PARSE_ERROR, JsonRpcHandler, make_error
from mcp_base.registry import ServiceRegistry

logger = logging.getLogger(__name__)


class ToolExecuteRequest(BaseModel):
	"""Body of POST /api/services/{name}/tools/{tool}."""

	params: dict[str, Any] = {}


async def _read_params(request: Request) -> dict[str, Any]:
	"""Tool params from the request body. A missing or malformed body means no params."""
	try:
		body = await request.json()
	except (json.JSONDecodeError, UnicodeDecodeError):
		return {}
	if not isinstance(body, dict):
		return {}
	try:
		return ToolExecuteRequest.model_validate(body).params
	except ValidationError:
		return {}


def create_app(registry: ServiceRegistry, settings: Settings | None = None) -> FastAPI:
	"""Factory: build the API app around an already-populated registry."""
	settings = settings or Settings()
	rpc = JsonRpcHandler(registry)

	app = FastAPI(title="MCP Base API", version=__version__)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.cors.allow_origins,
		allow_methods=["*"],
		allow_headers=["*"],
	)
	app.state.registry = registry

	def request_config(request: Request) -> dict[str, str]:
		return service_config_from_headers(request.headers, env_fallback=settings.server.env_fallback)

	@app.get("/")
	async def index() -> dict[str, Any]:
		return {
			"name": "MCP Base API",
			"version": __version__,
			"endpoints": {
				"api": "/api/services",
				"mcp": "/mcp",
				"health": "/api/health",
			},
		}

	# -- REST --

	@app.get("/api/health")
	async def health() -> dict[str, Any]:
		return {"status": "ok", "services": len(registry.get_services())}

	@app.get("/api/services")
	async def list_services() -> dict[str, Any]:
		return {"services": [s.to_dict() for s in registry.get_services()]}

	@app.get("/api/services/{name}/tools")
	async def list_tools(name: str) -> JSONResponse:
		service = registry.get_service(name)
		if service is None:
			return JSONResponse({"error": f'Service "{name}" not found'}, status_code=404)
		return JSONResponse({
			"service": service.name,
			"tools": [t.to_dict() for t in service.tools],
			"configSchema": service.descriptor.config_schema,
		})

	@app.post("/api/services/{name}/tools/{tool}")
	async def execute_tool(name: str, tool: str, request: Request) -> JSONResponse:
		service = registry.get_service(name)
		if service is None:
			return JSONResponse({"error": f'Service "{name}" not found'}, status_code=404)
		if service.find_tool(tool) is None:
			return JSONResponse(
				{"error": f'Tool "{tool}" not found in service "{name}"'}, status_code=404,
			)

		params = await _read_params(request)
		logger.info("REST call %s/%s", name, tool)
		result = await registry.execute_tool(name, tool, params, request_config(request))
		return JSONResponse({"result": result.to_dict()})

	# -- JSON-RPC --

	@app.post("/mcp")
	async def mcp_endpoint(request: Request) -> Response:
		try:
			message = await request.json()
		except (json.JSONDecodeError, UnicodeDecodeError):
			return JSONResponse(make_error(None, PARSE_ERROR, "Parse error"), status_code=400)

		response = await rpc.handle(message, request_config(request))
		if response is None:
			return Response(status_code=202)
		return JSONResponse(response)

	return app
