"""Shared fixtures for server tests."""

import io
import json
from typing import Any

import pytest

from mcp_stdio_server.features.content import TextContent
from mcp_stdio_server.features.tools import Tool, ToolParameter
from mcp_stdio_server.logger import StderrLogger
from mcp_stdio_server.server import Server, ServerConfig


def request(method: str, params: dict[str, Any] | None = None, msg_id: int | str = 1) -> str:
    """Build a raw JSON-RPC request line."""
    message: dict[str, Any] = {"jsonrpc": "2.0", "id": msg_id, "method": method}
    if params is not None:
        message["params"] = params
    return json.dumps(message)


def notification(method: str, params: dict[str, Any] | None = None) -> str:
    """Build a raw JSON-RPC notification line."""
    message: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if params is not None:
        message["params"] = params
    return json.dumps(message)


def call(server: Server, method: str, params: dict[str, Any] | None = None, msg_id=1) -> dict:
    """Send a request through the server and decode the response."""
    response = server.process_message(request(method, params, msg_id))
    assert response is not None
    return json.loads(response)


def make_echo_tool(name: str = "echo") -> Tool:
    """Tool returning the 'text' argument as text content."""
    return Tool(
        name=name,
        description="Echoes input",
        parameters=[ToolParameter("text", "Text to echo", "string", required=True)],
        handler=lambda args: TextContent(text=args["text"]),
    )


@pytest.fixture
def log_stream() -> io.StringIO:
    """Captured diagnostic output."""
    return io.StringIO()


@pytest.fixture
def server(log_stream: io.StringIO) -> Server:
    """Create a server with default capabilities and a captured log."""
    return Server(
        ServerConfig(name="test-server", version="0.1.0", instructions="Be nice"),
        logger=StderrLogger(stream=log_stream, level="debug"),
    )


@pytest.fixture
def initialized_server(server: Server) -> Server:
    """Create a server that completed the initialize handshake."""
    server.process_message(
        request(
            "initialize",
            {
                "protocolVersion": "2024-11-05",
                "clientInfo": {"name": "test", "version": "1.0"},
                "capabilities": {},
            },
        )
    )
    server.process_message(notification("notifications/initialized"))
    return server
