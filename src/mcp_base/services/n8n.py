"""n8n service: list, inspect, toggle and execute workflows."""

from __future__ import annotations

from typing import Any

import httpx

from mcp_base.config import UpstreamConfig
from mcp_base.models import ServiceConfig, ServiceDescriptor, ToolDescriptor, ToolResult, json_content, tool_result
from mcp_base.registry import ToolHandler
from mcp_base.services.base import UpstreamClient, catch_errors, require

DEFAULT_WORKFLOW_LIMIT = 100
DEFAULT_EXECUTION_LIMIT = 20

_WORKFLOW_ID = {"type": "string", "description": "Workflow ID"}


# -- Tool definitions --

TOOLS = (
	ToolDescriptor(
		name="list_workflows",
		description="List all n8n workflows",
		input_schema={
			"type": "object",
			"properties": {
				"limit": {
					"type": "number",
					"description": "Maximum number of workflows to return",
					"default": DEFAULT_WORKFLOW_LIMIT,
				},
			},
		},
	),
	ToolDescriptor(
		name="get_workflow",
		description="Get details of a specific workflow including nodes and connections",
		input_schema={"type": "object", "properties": {"id": _WORKFLOW_ID}, "required": ["id"]},
	),
	ToolDescriptor(
		name="activate_workflow",
		description="Activate a workflow",
		input_schema={"type": "object", "properties": {"id": _WORKFLOW_ID}, "required": ["id"]},
	),
	ToolDescriptor(
		name="deactivate_workflow",
		description="Deactivate a workflow",
		input_schema={"type": "object", "properties": {"id": _WORKFLOW_ID}, "required": ["id"]},
	),
	ToolDescriptor(
		name="execute_workflow",
		description="Execute a workflow with optional input data",
		input_schema={
			"type": "object",
			"properties": {
				"id": _WORKFLOW_ID,
				"data": {
					"type": "object",
					"description": "Optional input data for the workflow",
					"additionalProperties": True,
				},
			},
			"required": ["id"],
		},
	),
	ToolDescriptor(
		name="list_executions",
		description="List workflow executions",
		input_schema={
			"type": "object",
			"properties": {
				"workflow_id": {"type": "string", "description": "Filter by workflow ID"},
				"limit": {
					"type": "number",
					"description": "Maximum number of executions to return",
					"default": DEFAULT_EXECUTION_LIMIT,
				},
			},
		},
	),
	ToolDescriptor(
		name="get_execution",
		description="Get details of a specific execution",
		input_schema={
			"type": "object",
			"properties": {"id": {"type": "string", "description": "Execution ID"}},
			"required": ["id"],
		},
	),
)

SERVICE = ServiceDescriptor(
	name="n8n",
	description="n8n workflow automation - manage and execute workflows",
	tools=TOOLS,
	config_schema={
		"type": "object",
		"properties": {
			"N8N_API_URL": {"type": "string", "description": "n8n instance URL (e.g., https://n8n.example.com)"},
			"N8N_API_KEY": {"type": "string", "description": "n8n API Key"},
		},
		"required": ["N8N_API_URL", "N8N_API_KEY"],
	},
)


# -- Client --

class N8nClient(UpstreamClient):
	"""n8n public REST API (v1) client."""

	api_name = "n8n"

	def __init__(
		self,
		config: ServiceConfig,
		upstream: UpstreamConfig | None = None,
		transport: httpx.AsyncBaseTransport | None = None,
	) -> None:
		base_url = require(config, "N8N_API_URL")
		api_key = require(config, "N8N_API_KEY")
		upstream = upstream or UpstreamConfig()
		super().__init__(
			base_url=f"{base_url.rstrip('/')}/api/v1",
			headers={
				"X-N8N-API-KEY": api_key,
				"Content-Type": "application/json",
				"User-Agent": upstream.user_agent,
			},
			timeout=upstream.timeout,
			transport=transport,
		)

	async def list_workflows(self, limit: int = DEFAULT_WORKFLOW_LIMIT) -> dict[str, Any]:
		return await self.request_json("GET", "/workflows", params={"limit": limit})

	async def get_workflow(self, workflow_id: str) -> dict[str, Any]:
		return await self.request_json("GET", f"/workflows/{workflow_id}")

	async def activate_workflow(self, workflow_id: str) -> dict[str, Any]:
		return await self.request_json("POST", f"/workflows/{workflow_id}/activate")

	async def deactivate_workflow(self, workflow_id: str) -> dict[str, Any]:
		return await self.request_json("POST", f"/workflows/{workflow_id}/deactivate")

	async def execute_workflow(self, workflow_id: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
		body = {"data": data} if data is not None else None
		return await self.request_json("POST", f"/workflows/{workflow_id}/run", json=body)

	async def list_executions(
		self, workflow_id: str | None = None, limit: int = DEFAULT_EXECUTION_LIMIT,
	) -> dict[str, Any]:
		params: dict[str, Any] = {"limit": limit}
		if workflow_id:
			params["workflowId"] = workflow_id
		return await self.request_json("GET", "/executions", params=params)

	async def get_execution(self, execution_id: str) -> dict[str, Any]:
		return await self.request_json("GET", f"/executions/{execution_id}")


def _tag_names(item: dict[str, Any]) -> list[str] | None:
	tags = item.get("tags")
	if tags is None:
		return None
	return [t.get("name") for t in tags]


# -- Handlers --

class N8nService:
	"""Binds the n8n tool declarations to handlers sharing one upstream config."""

	descriptor = SERVICE

	def __init__(
		self,
		upstream: UpstreamConfig | None = None,
		transport: httpx.AsyncBaseTransport | None = None,
	) -> None:
		self._upstream = upstream or UpstreamConfig()
		self._transport = transport

	def client(self, config: ServiceConfig) -> N8nClient:
		return N8nClient(config, self._upstream, self._transport)

	def handlers(self) -> dict[str, ToolHandler]:
		return {
			"list_workflows": self.list_workflows,
			"get_workflow": self.get_workflow,
			"activate_workflow": self.activate_workflow,
			"deactivate_workflow": self.deactivate_workflow,
			"execute_workflow": self.execute_workflow,
			"list_executions": self.list_executions,
			"get_execution": self.get_execution,
		}

	@catch_errors
	async def list_workflows(self, params: dict[str, Any], config: ServiceConfig) -> ToolResult:
		limit = int(params.get("limit") or DEFAULT_WORKFLOW_LIMIT)
		async with self.client(config) as client:
			result = await client.list_workflows(limit)

		workflows = [
			{
				"id": w.get("id"),
				"name": w.get("name"),
				"active": w.get("active"),
				"updatedAt": w.get("updatedAt"),
				"tags": _tag_names(w),
			}
			for w in result.get("data", [])
		]
		return tool_result([json_content({"workflows": workflows, "count": len(workflows)})])

	@catch_errors
	async def get_workflow(self, params: dict[str, Any], config: ServiceConfig) -> ToolResult:
		async with self.client(config) as client:
			workflow = await client.get_workflow(params["id"])

		nodes = workflow.get("nodes")
		return tool_result([json_content({
			"id": workflow.get("id"),
			"name": workflow.get("name"),
			"active": workflow.get("active"),
			"nodes": [
				{"id": n.get("id"), "name": n.get("name"), "type": n.get("type")}
				for n in nodes
			] if nodes is not None else None,
			"tags": _tag_names(workflow),
			"createdAt": workflow.get("createdAt"),
			"updatedAt": workflow.get("updatedAt"),
		})])

	@catch_errors
	async def activate_workflow(self, params: dict[str, Any], config: ServiceConfig) -> ToolResult:
		async with self.client(config) as client:
			workflow = await client.activate_workflow(params["id"])

		return tool_result([json_content({
			"id": workflow.get("id"),
			"name": workflow.get("name"),
			"active": workflow.get("active"),
			"message": "Workflow activated successfully",
		})])

	@catch_errors
	async def deactivate_workflow(self, params: dict[str, Any], config: ServiceConfig) -> ToolResult:
		async with self.client(config) as client:
			workflow = await client.deactivate_workflow(params["id"])

		return tool_result([json_content({
			"id": workflow.get("id"),
			"name": workflow.get("name"),
			"active": workflow.get("active"),
			"message": "Workflow deactivated successfully",
		})])

	@catch_errors
	async def execute_workflow(self, params: dict[str, Any], config: ServiceConfig) -> ToolResult:
		async with self.client(config) as client:
			execution = await client.execute_workflow(params["id"], params.get("data"))

		return tool_result([json_content({
			"executionId": execution.get("id"),
			"status": execution.get("status"),
			"startedAt": execution.get("startedAt"),
			"workflowId": execution.get("workflowId"),
		})])

	@catch_errors
	async def list_executions(self, params: dict[str, Any], config: ServiceConfig) -> ToolResult:
		limit = int(params.get("limit") or DEFAULT_EXECUTION_LIMIT)
		async with self.client(config) as client:
			result = await client.list_executions(params.get("workflow_id"), limit)

		executions = [
			{
				"id": e.get("id"),
				"workflowId": e.get("workflowId"),
				"workflowName": e.get("workflowName"),
				"status": e.get("status"),
				"startedAt": e.get("startedAt"),
				"stoppedAt": e.get("stoppedAt"),
			}
			for e in result.get("data", [])
		]
		return tool_result([json_content({"executions": executions, "count": len(executions)})])

	@catch_errors
	async def get_execution(self, params: dict[str, Any], config: ServiceConfig) -> ToolResult:
		async with self.client(config) as client:
			execution = await client.get_execution(params["id"])

		error = ((execution.get("data") or {}).get("resultData") or {}).get("error") or {}
		return tool_result([json_content({
			"id": execution.get("id"),
			"workflowId": execution.get("workflowId"),
			"status": execution.get("status"),
			"finished": execution.get("finished"),
			"startedAt": execution.get("startedAt"),
			"stoppedAt": execution.get("stoppedAt"),
			"error": error.get("message"),
		})])
