"""Tests for descriptors, result content and result helpers."""

from __future__ import annotations

import json

from conftest import make_service

from mcp_base.models import (
	ImageContent,
	Resource,
	ResourceContent,
	ToolResult,
	error_result,
	get_error_message,
	json_content,
	safe_json_dumps,
	success_result,
	text_content,
	tool_result,
)


class TestDescriptors:
	def test_service_to_dict_uses_wire_keys(self) -> None:
		data = make_service("demo", ["a", "b"]).to_dict()
		assert data["name"] == "demo"
		assert [t["name"] for t in data["tools"]] == ["a", "b"]
		assert "inputSchema" in data["tools"][0]
		assert data["configSchema"]["required"] == ["DEMO_TOKEN"]

	def test_config_schema_omitted_when_absent(self) -> None:
		data = make_service("demo", config_schema=None).to_dict()
		assert "configSchema" not in data


class TestContent:
	def test_text(self) -> None:
		assert text_content("hi").to_dict() == {"type": "text", "text": "hi"}

	def test_image(self) -> None:
		item = ImageContent(data="aGk=", mime_type="image/png")
		assert item.to_dict() == {"type": "image", "data": "aGk=", "mimeType": "image/png"}

	def test_resource_omits_unset_fields(self) -> None:
		item = ResourceContent(resource=Resource(uri="file:///a.txt", text="body"))
		assert item.to_dict() == {"type": "resource", "resource": {"uri": "file:///a.txt", "text": "body"}}

	def test_resource_with_blob(self) -> None:
		item = ResourceContent(resource=Resource(uri="file:///a.bin", mime_type="application/octet-stream", blob="AA=="))
		assert item.to_dict()["resource"] == {
			"uri": "file:///a.bin",
			"mimeType": "application/octet-stream",
			"blob": "AA==",
		}


class TestResultHelpers:
	def test_success_result(self) -> None:
		assert success_result("done").to_dict() == {
			"content": [{"type": "text", "text": "done"}],
			"isError": False,
		}

	def test_error_result(self) -> None:
		result = error_result("boom")
		assert result.is_error is True
		assert result.text == "boom"

	def test_tool_result_copies_content(self) -> None:
		items = [text_content("a")]
		result = tool_result(items, is_error=True)
		items.append(text_content("b"))
		assert len(result.content) == 1
		assert result.is_error is True

	def test_json_content_pretty_prints(self) -> None:
		item = json_content({"a": 1})
		assert item.text == '{\n  "a": 1\n}'
		assert json.loads(item.text) == {"a": 1}

	def test_safe_json_dumps_falls_back_to_str(self) -> None:
		value = {1, 2}
		assert safe_json_dumps(value) == str(value)
		assert safe_json_dumps([1], pretty=False) == "[1]"

	def test_text_joins_text_items_only(self) -> None:
		result = ToolResult(content=[
			text_content("one"),
			ImageContent(data="x", mime_type="image/png"),
			text_content("two"),
		])
		assert result.text == "one\ntwo"

	def test_get_error_message(self) -> None:
		assert get_error_message(ValueError("bad")) == "bad"
		assert get_error_message(KeyError()) == "KeyError"
		assert get_error_message("plain") == "plain"
		assert get_error_message(42) == "Unknown error occurred"
