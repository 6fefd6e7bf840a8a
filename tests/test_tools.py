"""Tests for tool definitions and result normalization."""

import json

import pytest

from mcp_stdio_server.features.content import (
    EmbeddedResource,
    ImageContent,
    TextContent,
    TextResourceContents,
)
from mcp_stdio_server.features.tools import (
    CallToolResult,
    Tool,
    ToolExecutionError,
    ToolParameter,
    ToolReturnTypeError,
    normalize_result,
)


def make_tool(handler, return_type=TextContent, parameters=None):
    return Tool(
        name="t",
        description="test tool",
        handler=handler,
        parameters=parameters or [],
        return_type=return_type,
    )


class TestToolDefinition:
    """Tests for the tools/list projection."""

    def test_to_dict_builds_input_schema(self):
        """Should list properties and required parameter names."""
        tool = make_tool(
            lambda args: "x",
            parameters=[
                ToolParameter("path", "File path", "string", required=True),
                ToolParameter("limit", "Max results", "integer", default=10),
            ],
        )

        assert tool.to_dict() == {
            "name": "t",
            "description": "test tool",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "path": {"type": "string", "description": "File path"},
                    "limit": {"type": "integer", "description": "Max results", "default": 10},
                },
                "required": ["path"],
            },
        }

    def test_schema_without_parameters(self):
        """Should produce an empty object schema."""
        schema = make_tool(lambda args: "x").input_schema()

        assert schema == {"type": "object", "properties": {}, "required": []}


class TestNormalizeResult:
    """Tests for handler return value normalization."""

    def test_content_passes_through(self):
        """Should return content items unchanged."""
        content = TextContent(text="a")

        assert normalize_result(content) is content

    def test_string_becomes_text(self):
        """Should wrap strings verbatim in TextContent."""
        assert normalize_result("hello") == TextContent(text="hello")

    def test_dict_becomes_json_text(self):
        """Should JSON-encode dicts."""
        result = normalize_result({"a": 1, "b": [1, 2]})

        assert isinstance(result, TextContent)
        assert json.loads(result.text) == {"a": 1, "b": [1, 2]}

    def test_bytes_and_mime_type_become_image(self):
        """Should wrap a (bytes, mime type) pair in ImageContent."""
        assert normalize_result((b"\x00\x01", "image/png")) == ImageContent(
            data=b"\x00\x01", mime_type="image/png"
        )

    def test_list_of_content_passes_through(self):
        """Should accept lists made only of content."""
        items = [TextContent(text="a"), ImageContent(data=b"", mime_type="image/png")]

        assert normalize_result(items) == items

    def test_list_with_other_values_rejected(self):
        """Should reject lists containing non-content items."""
        with pytest.raises(ToolReturnTypeError):
            normalize_result([TextContent(text="a"), "b"])

    @pytest.mark.parametrize("value", [42, None, 1.5, (b"x",), ("a", "b")])
    def test_unsupported_values_rejected(self, value):
        """Should reject values with no content conversion."""
        with pytest.raises(ToolReturnTypeError):
            normalize_result(value)


class TestToolCall:
    """Tests for invoking tools."""

    def test_call_wraps_single_content(self):
        """Should produce a one-item content list."""
        result = make_tool(lambda args: f"hi {args['who']}").call({"who": "bob"})

        assert result.to_dict() == {
            "content": [{"type": "text", "text": "hi bob", "annotations": {}}],
            "isError": False,
        }

    def test_call_result_is_forwarded(self):
        """Should forward a CallToolResult untouched."""
        direct = CallToolResult(content=[{"type": "text", "text": "raw"}], is_error=True)
        tool = make_tool(lambda args: direct, return_type=ImageContent)

        assert tool.call({}) is direct

    def test_list_return_type(self):
        """Should accept a list when the tool declares list."""
        tool = make_tool(
            lambda args: [
                TextContent(text="a"),
                EmbeddedResource(resource=TextResourceContents(uri="u:/", text="b")),
            ],
            return_type=list,
        )

        content = tool.call({}).content

        assert [item["type"] for item in content] == ["text", "resource"]

    def test_return_type_mismatch(self):
        """Should raise when the normalized result is not the declared type."""
        tool = make_tool(lambda args: (b"img", "image/png"))

        with pytest.raises(ToolReturnTypeError, match="ImageContent"):
            tool.call({})

    def test_list_rejected_for_single_return_type(self):
        """Should reject a list when a single content type is declared."""
        tool = make_tool(lambda args: [TextContent(text="a")])

        with pytest.raises(ToolReturnTypeError):
            tool.call({})

    def test_handler_exception_is_wrapped(self):
        """Should wrap handler exceptions and keep the cause."""

        def boom(args):
            raise RuntimeError("kaput")

        with pytest.raises(ToolExecutionError, match="kaput") as exc_info:
            make_tool(boom).call({})

        assert isinstance(exc_info.value.__cause__, RuntimeError)
