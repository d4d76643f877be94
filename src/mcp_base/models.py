"""Data models for tool descriptors and tool results."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Literal, Union

# JSON-Schema-like structure. Declarative metadata only, never enforced here.
JSONSchema = dict[str, Any]

# Per-request credentials and settings (tokens, base URLs).
ServiceConfig = dict[str, str]


@dataclass(frozen=True)
class ToolDescriptor:
	"""A single callable operation exposed by a service."""

	name: str
	description: str
	input_schema: JSONSchema = field(default_factory=lambda: {"type": "object", "properties": {}})

	def to_dict(self) -> dict[str, Any]:
		return {
			"name": self.name,
			"description": self.description,
			"inputSchema": self.input_schema,
		}


@dataclass(frozen=True)
class ServiceDescriptor:
	"""A named bundle of tools sharing one configuration schema."""

	name: str
	description: str
	tools: tuple[ToolDescriptor, ...] = ()
	config_schema: JSONSchema | None = None

	def to_dict(self) -> dict[str, Any]:
		data: dict[str, Any] = {
			"name": self.name,
			"description": self.description,
			"tools": [t.to_dict() for t in self.tools],
		}
		if self.config_schema is not None:
			data["configSchema"] = self.config_schema
		return data


# -- Result content --

@dataclass
class TextContent:
	text: str
	type: Literal["text"] = "text"

	def to_dict(self) -> dict[str, Any]:
		return {"type": self.type, "text": self.text}


@dataclass
class ImageContent:
	data: str  # base64
	mime_type: str
	type: Literal["image"] = "image"

	def to_dict(self) -> dict[str, Any]:
		return {"type": self.type, "data": self.data, "mimeType": self.mime_type}


@dataclass
class Resource:
	uri: str
	mime_type: str | None = None
	text: str | None = None
	blob: str | None = None

	def to_dict(self) -> dict[str, Any]:
		data: dict[str, Any] = {"uri": self.uri}
		if self.mime_type is not None:
			data["mimeType"] = self.mime_type
		if self.text is not None:
			data["text"] = self.text
		if self.blob is not None:
			data["blob"] = self.blob
		return data


@dataclass
class ResourceContent:
	resource: Resource
	type: Literal["resource"] = "resource"

	def to_dict(self) -> dict[str, Any]:
		return {"type": self.type, "resource": self.resource.to_dict()}


ContentItem = Union[TextContent, ImageContent, ResourceContent]


@dataclass
class ToolResult:
	"""Uniform envelope returned by every tool execution, success or failure."""

	content: list[ContentItem] = field(default_factory=list)
	is_error: bool = False

	def to_dict(self) -> dict[str, Any]:
		return {
			"content": [c.to_dict() for c in self.content],
			"isError": self.is_error,
		}

	@property
	def text(self) -> str:
		"""Concatenated text of all text items."""
		return "\n".join(c.text for c in self.content if isinstance(c, TextContent))


# -- Result helpers --

def text_content(text: str) -> TextContent:
	return TextContent(text=text)


def safe_json_dumps(data: Any, pretty: bool = True) -> str:
	"""Serialize data to JSON, falling back to str() for unserializable input."""
	try:
		return json.dumps(data, indent=2 if pretty else None)
	except (TypeError, ValueError):
		return str(data)


def json_content(data: Any) -> TextContent:
	return text_content(safe_json_dumps(data))


def success_result(text: str) -> ToolResult:
	return ToolResult(content=[text_content(text)], is_error=False)


def error_result(message: str) -> ToolResult:
	return ToolResult(content=[text_content(message)], is_error=True)


def tool_result(content: list[ContentItem], is_error: bool = False) -> ToolResult:
	return ToolResult(content=list(content), is_error=is_error)


def get_error_message(error: object) -> str:
	"""Extract a human-readable message from an exception or arbitrary value."""
	if isinstance(error, BaseException):
		return str(error) or type(error).__name__
	if isinstance(error, str):
		return error
	return "Unknown error occurred"
