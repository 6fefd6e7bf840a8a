"""Tool definitions and tool result normalization.

A tool handler receives the call arguments and may return:

- a content item, or a list of content items (used as-is)
- a string (wrapped verbatim in ``TextContent``)
- a dict (JSON-encoded and wrapped in ``TextContent``)
- a ``(bytes, mime_type)`` tuple (wrapped in ``ImageContent``)
- a ``CallToolResult`` (forwarded untouched)
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from mcp_stdio_server.features.content import (
    Content,
    EmbeddedResource,
    ImageContent,
    TextContent,
    content_to_dict,
    is_content,
)


class ToolNotFoundError(Exception):
    """Raised when a tool is not found."""

    pass


class ToolExecutionError(Exception):
    """Raised when a tool handler raises."""

    pass


class ToolReturnTypeError(Exception):
    """Raised when a tool returns something other than its declared type."""

    pass


@dataclass
class ToolParameter:
    """Definition of a single tool parameter."""

    name: str
    description: str
    type: str
    required: bool = False
    default: Any = None

    def to_schema(self) -> dict[str, Any]:
        """Convert to a JSON schema property.

        Returns:
            Property schema with type, description and default if declared.
        """
        schema: dict[str, Any] = {"type": self.type, "description": self.description}
        if self.default is not None:
            schema["default"] = self.default
        return schema


@dataclass
class CallToolResult:
    """Result of a tool call in MCP format.

    Handlers may return this directly to control ``isError`` and the raw
    content list themselves.
    """

    content: list[dict[str, Any]]
    is_error: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP result format.

        Returns:
            Dictionary in MCP tools/call result format.
        """
        return {
            "content": self.content,
            "isError": self.is_error,
        }


@dataclass
class Tool:
    """A named, callable server capability."""

    name: str
    description: str
    handler: Callable[[dict[str, Any]], Any]
    parameters: list[ToolParameter] = field(default_factory=list)
    return_type: Any = TextContent

    def input_schema(self) -> dict[str, Any]:
        """Build the JSON schema advertised for this tool's arguments."""
        return {
            "type": "object",
            "properties": {param.name: param.to_schema() for param in self.parameters},
            "required": [param.name for param in self.parameters if param.required],
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP tools/list format."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }

    def call(self, arguments: dict[str, Any]) -> CallToolResult:
        """Invoke the handler and normalize its return value.

        Args:
            arguments: Tool arguments from the client.

        Returns:
            CallToolResult ready to send.

        Raises:
            ToolExecutionError: If the handler raises.
            ToolReturnTypeError: If the result does not match ``return_type``.
        """
        try:
            result = self.handler(arguments)
        except Exception as e:
            raise ToolExecutionError(f"Tool '{self.name}' execution failed: {e}") from e

        if isinstance(result, CallToolResult):
            return result

        normalized = normalize_result(result)
        if not isinstance(normalized, self.return_type):
            raise ToolReturnTypeError(
                f"Tool '{self.name}' returned {_describe(normalized)}, "
                f"expected {_describe_type(self.return_type)}"
            )

        items = normalized if isinstance(normalized, list) else [normalized]
        return CallToolResult(content=[content_to_dict(item) for item in items])


def normalize_result(result: Any) -> Content | list[Content]:
    """Convert a handler return value into content.

    Args:
        result: Raw value returned by a tool handler.

    Returns:
        A single content item or a list of content items.

    Raises:
        ToolReturnTypeError: If the value cannot be converted.
    """
    match result:
        case TextContent() | ImageContent() | EmbeddedResource():
            return result
        case str():
            return TextContent(text=result)
        case dict():
            return TextContent(text=json.dumps(result))
        case tuple((bytes() as data, str() as mime_type)):
            return ImageContent(data=data, mime_type=mime_type)
        case list():
            invalid = [item for item in result if not is_content(item)]
            if invalid:
                raise ToolReturnTypeError(
                    f"Tool result list contains unsupported item: {_describe(invalid[0])}"
                )
            return result
        case _:
            raise ToolReturnTypeError(f"Unsupported tool result type: {_describe(result)}")


def _describe(value: Any) -> str:
    if isinstance(value, list):
        return "list"
    return type(value).__name__


def _describe_type(expected: Any) -> str:
    return getattr(expected, "__name__", None) or str(expected)
