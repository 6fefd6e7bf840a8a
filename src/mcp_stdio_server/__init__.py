"""MCP server over stdio: tools, resources and prompts for LLM hosts."""

from mcp_stdio_server.features.content import (
    BlobResourceContents,
    Content,
    EmbeddedResource,
    ImageContent,
    TextContent,
    TextResourceContents,
)
from mcp_stdio_server.features.prompts import Prompt, PromptArgument, PromptMessage, Role
from mcp_stdio_server.features.resources import Resource
from mcp_stdio_server.features.tools import CallToolResult, Tool, ToolParameter
from mcp_stdio_server.protocol.capabilities import (
    LoggingCapability,
    PromptCapability,
    ResourceCapability,
    ToolCapability,
    default_capabilities,
    merge_capabilities,
)
from mcp_stdio_server.server import Server, ServerConfig, mcp_server

__version__ = "1.0.0"

__all__ = [
    "BlobResourceContents",
    "CallToolResult",
    "Content",
    "EmbeddedResource",
    "ImageContent",
    "LoggingCapability",
    "Prompt",
    "PromptArgument",
    "PromptCapability",
    "PromptMessage",
    "Resource",
    "ResourceCapability",
    "Role",
    "Server",
    "ServerConfig",
    "TextContent",
    "TextResourceContents",
    "Tool",
    "ToolCapability",
    "ToolParameter",
    "default_capabilities",
    "mcp_server",
    "merge_capabilities",
]
