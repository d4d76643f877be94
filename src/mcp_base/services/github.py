"""GitHub service: repository search, code exploration, issues and pull requests."""

from __future__ import annotations

import asyncio
import base64
from collections.abc import Awaitable
from typing import Any

import httpx

from mcp_base.config import UpstreamConfig
from mcp_base.models import (
	ServiceConfig,
	ServiceDescriptor,
	ToolDescriptor,
	ToolResult,
	error_result,
	json_content,
	success_result,
	text_content,
	tool_result,
)
from mcp_base.registry import ToolHandler
from mcp_base.services.base import UpstreamClient, catch_errors, require

TIMELINE_LIMIT = 50

_REPOSITORY = {"type": "string", "description": 'Repository in "owner/repo" format'}


# -- Tool definitions --

TOOLS = (
	ToolDescriptor(
		name="find_repo",
		description="Search GitHub to find repositories by name or keywords",
		input_schema={
			"type": "object",
			"properties": {
				"query": {"type": "string", "description": "Search query for repository name or keywords"},
			},
			"required": ["query"],
		},
	),
	ToolDescriptor(
		name="search_code",
		description="Search for code within a specific GitHub repository",
		input_schema={
			"type": "object",
			"properties": {
				"repository": _REPOSITORY,
				"query": {
					"type": "string",
					"description": "Code to search for: function names, class names, keywords",
				},
			},
			"required": ["repository", "query"],
		},
	),
	ToolDescriptor(
		name="get_file_content",
		description="Read the complete source code of a specific file",
		input_schema={
			"type": "object",
			"properties": {
				"repository": _REPOSITORY,
				"path": {"type": "string", "description": "File path from repository root"},
				"ref": {"type": "string", "description": "Optional branch, tag, or commit SHA"},
			},
			"required": ["repository", "path"],
		},
	),
	ToolDescriptor(
		name="list_files",
		description="List files and folders in a repository directory",
		input_schema={
			"type": "object",
			"properties": {
				"repository": _REPOSITORY,
				"path": {"type": "string", "description": "Directory path (empty for root)", "default": ""},
			},
			"required": ["repository"],
		},
	),
	ToolDescriptor(
		name="get_repo_info",
		description="Get metadata about a GitHub repository",
		input_schema={
			"type": "object",
			"properties": {"repository": _REPOSITORY},
			"required": ["repository"],
		},
	),
	ToolDescriptor(
		name="get_issue",
		description="Get detailed information about a GitHub issue with timeline",
		input_schema={
			"type": "object",
			"properties": {
				"repository": _REPOSITORY,
				"issue_number": {"type": "number", "description": "The issue number"},
			},
			"required": ["repository", "issue_number"],
		},
	),
	ToolDescriptor(
		name="get_pull_request",
		description="Get detailed information about a pull request with diff",
		input_schema={
			"type": "object",
			"properties": {
				"repository": _REPOSITORY,
				"pull_number": {"type": "number", "description": "The pull request number"},
			},
			"required": ["repository", "pull_number"],
		},
	),
	ToolDescriptor(
		name="get_commit",
		description="Get detailed information about a specific commit",
		input_schema={
			"type": "object",
			"properties": {
				"repository": _REPOSITORY,
				"sha": {"type": "string", "description": "The commit SHA"},
			},
			"required": ["repository", "sha"],
		},
	),
)

SERVICE = ServiceDescriptor(
	name="github",
	description="GitHub repository search, code exploration, issues, and pull requests",
	tools=TOOLS,
	config_schema={
		"type": "object",
		"properties": {
			"GITHUB_TOKEN": {"type": "string", "description": "GitHub Personal Access Token"},
		},
		"required": ["GITHUB_TOKEN"],
	},
)


# -- Client --

class GitHubClient(UpstreamClient):
	"""Authenticated GitHub REST API client."""

	api_name = "GitHub"

	def __init__(
		self,
		config: ServiceConfig,
		upstream: UpstreamConfig | None = None,
		transport: httpx.AsyncBaseTransport | None = None,
	) -> None:
		token = require(config, "GITHUB_TOKEN")
		upstream = upstream or UpstreamConfig()
		super().__init__(
			base_url=upstream.github_api_base,
			headers={
				"Authorization": f"Bearer {token}",
				"Accept": "application/vnd.github.v3+json",
				"User-Agent": upstream.user_agent,
			},
			timeout=upstream.timeout,
			transport=transport,
		)

	async def search_repositories(self, query: str) -> dict[str, Any]:
		return await self.request_json("GET", "/search/repositories", params={"q": query, "per_page": 10})

	async def search_code(self, repository: str, query: str) -> dict[str, Any]:
		return await self.request_json(
			"GET", "/search/code", params={"q": f"{query} repo:{repository}", "per_page": 20},
		)

	async def get_repository(self, repository: str) -> dict[str, Any]:
		return await self.request_json("GET", f"/repos/{repository}")

	async def get_file_content(self, repository: str, path: str, ref: str | None = None) -> dict[str, Any]:
		params = {"ref": ref} if ref else None
		return await self.request_json("GET", f"/repos/{repository}/contents/{path}", params=params)

	async def list_files(self, repository: str, path: str = "") -> list[dict[str, Any]]:
		return await self.request_json("GET", f"/repos/{repository}/contents/{path}")

	async def get_issue(self, repository: str, issue_number: int) -> dict[str, Any]:
		return await self.request_json("GET", f"/repos/{repository}/issues/{issue_number}")

	async def get_issue_timeline(self, repository: str, issue_number: int) -> list[dict[str, Any]]:
		return await self.request_json(
			"GET", f"/repos/{repository}/issues/{issue_number}/timeline",
			headers={"Accept": "application/vnd.github.mockingbird-preview+json"},
		)

	async def get_pull_request(self, repository: str, pull_number: int) -> dict[str, Any]:
		return await self.request_json("GET", f"/repos/{repository}/pulls/{pull_number}")

	async def get_pull_request_diff(self, repository: str, pull_number: int) -> str:
		return await self.request_text(
			"GET", f"/repos/{repository}/pulls/{pull_number}",
			headers={"Accept": "application/vnd.github.v3.diff"},
		)

	async def get_commit(self, repository: str, sha: str) -> dict[str, Any]:
		return await self.request_json("GET", f"/repos/{repository}/commits/{sha}")


def _login(user: dict[str, Any] | None) -> str | None:
	return user.get("login") if user else None


async def _fetch_pair(first: Awaitable[Any], second: Awaitable[Any]) -> tuple[Any, Any]:
	"""Await two requests concurrently; if one fails the other is cancelled.

	Re-raises the first failure itself rather than the ExceptionGroup.
	"""
	try:
		async with asyncio.TaskGroup() as tg:
			first_task = tg.create_task(first)
			second_task = tg.create_task(second)
	except ExceptionGroup as group:
		raise group.exceptions[0] from None
	return first_task.result(), second_task.result()


# -- Handlers --

class GitHubService:
	"""Binds the GitHub tool declarations to handlers sharing one upstream config."""

	descriptor = SERVICE

	def __init__(
		self,
		upstream: UpstreamConfig | None = None,
		transport: httpx.AsyncBaseTransport | None = None,
	) -> None:
		self._upstream = upstream or UpstreamConfig()
		self._transport = transport

	def client(self, config: ServiceConfig) -> GitHubClient:
		return GitHubClient(config, self._upstream, self._transport)

	def handlers(self) -> dict[str, ToolHandler]:
		return {
			"find_repo": self.find_repo,
			"search_code": self.search_code,
			"get_file_content": self.get_file_content,
			"list_files": self.list_files,
			"get_repo_info": self.get_repo_info,
			"get_issue": self.get_issue,
			"get_pull_request": self.get_pull_request,
			"get_commit": self.get_commit,
		}

	@catch_errors
	async def find_repo(self, params: dict[str, Any], config: ServiceConfig) -> ToolResult:
		async with self.client(config) as client:
			result = await client.search_repositories(params["query"])

		repos = [
			{
				"full_name": repo.get("full_name"),
				"description": repo.get("description"),
				"stars": repo.get("stargazers_count"),
				"language": repo.get("language"),
				"url": repo.get("html_url"),
			}
			for repo in result.get("items", [])
		]
		return tool_result([json_content({"total_count": result.get("total_count", 0), "repositories": repos})])

	@catch_errors
	async def search_code(self, params: dict[str, Any], config: ServiceConfig) -> ToolResult:
		async with self.client(config) as client:
			result = await client.search_code(params["repository"], params["query"])

		matches = [
			{"path": item.get("path"), "name": item.get("name"), "url": item.get("html_url")}
			for item in result.get("items", [])
		]
		return tool_result([json_content({"total_count": result.get("total_count", 0), "matches": matches})])

	@catch_errors
	async def get_file_content(self, params: dict[str, Any], config: ServiceConfig) -> ToolResult:
		async with self.client(config) as client:
			result = await client.get_file_content(params["repository"], params["path"], params.get("ref"))

		if isinstance(result, dict) and result.get("content") and result.get("encoding") == "base64":
			decoded = base64.b64decode(result["content"]).decode("utf-8", errors="replace")
			return success_result(decoded)
		return error_result("File content not available")

	@catch_errors
	async def list_files(self, params: dict[str, Any], config: ServiceConfig) -> ToolResult:
		async with self.client(config) as client:
			result = await client.list_files(params["repository"], params.get("path") or "")

		# A file path returns a single object instead of a listing
		entries = result if isinstance(result, list) else [result]
		files = [
			{"name": f.get("name"), "type": f.get("type"), "path": f.get("path"), "size": f.get("size")}
			for f in entries
		]
		return tool_result([json_content(files)])

	@catch_errors
	async def get_repo_info(self, params: dict[str, Any], config: ServiceConfig) -> ToolResult:
		async with self.client(config) as client:
			repo = await client.get_repository(params["repository"])

		return tool_result([json_content({
			"name": repo.get("name"),
			"full_name": repo.get("full_name"),
			"description": repo.get("description"),
			"stars": repo.get("stargazers_count"),
			"forks": repo.get("forks_count"),
			"language": repo.get("language"),
			"topics": repo.get("topics", []),
			"default_branch": repo.get("default_branch"),
			"url": repo.get("html_url"),
			"created_at": repo.get("created_at"),
			"updated_at": repo.get("updated_at"),
		})])

	@catch_errors
	async def get_issue(self, params: dict[str, Any], config: ServiceConfig) -> ToolResult:
		repository = params["repository"]
		number = int(params["issue_number"])
		async with self.client(config) as client:
			issue, timeline = await _fetch_pair(
				client.get_issue(repository, number),
				client.get_issue_timeline(repository, number),
			)

		return tool_result([json_content({
			"number": issue.get("number"),
			"title": issue.get("title"),
			"body": issue.get("body"),
			"state": issue.get("state"),
			"author": _login(issue.get("user")),
			"labels": [label.get("name") for label in issue.get("labels", [])],
			"assignees": [a.get("login") for a in issue.get("assignees", [])],
			"created_at": issue.get("created_at"),
			"updated_at": issue.get("updated_at"),
			"url": issue.get("html_url"),
			"timeline": timeline[:TIMELINE_LIMIT],
		})])

	@catch_errors
	async def get_pull_request(self, params: dict[str, Any], config: ServiceConfig) -> ToolResult:
		repository = params["repository"]
		number = int(params["pull_number"])
		async with self.client(config) as client:
			pr, diff = await _fetch_pair(
				client.get_pull_request(repository, number),
				client.get_pull_request_diff(repository, number),
			)

		summary = json_content({
			"number": pr.get("number"),
			"title": pr.get("title"),
			"body": pr.get("body"),
			"state": pr.get("state"),
			"author": _login(pr.get("user")),
			"head": (pr.get("head") or {}).get("ref"),
			"base": (pr.get("base") or {}).get("ref"),
			"merged": pr.get("merged"),
			"additions": pr.get("additions"),
			"deletions": pr.get("deletions"),
			"changed_files": pr.get("changed_files"),
			"url": pr.get("html_url"),
		})
		return tool_result([summary, text_content(f"\n--- Diff ---\n{diff}")])

	@catch_errors
	async def get_commit(self, params: dict[str, Any], config: ServiceConfig) -> ToolResult:
		async with self.client(config) as client:
			commit = await client.get_commit(params["repository"], params["sha"])

		details = commit.get("commit") or {}
		return tool_result([json_content({
			"sha": commit.get("sha"),
			"message": details.get("message"),
			"author": details.get("author"),
			"stats": commit.get("stats"),
			"files": [
				{
					"filename": f.get("filename"),
					"status": f.get("status"),
					"additions": f.get("additions"),
					"deletions": f.get("deletions"),
					"patch": f.get("patch"),
				}
				for f in commit.get("files", [])
			],
			"url": commit.get("html_url"),
		})])
