"""MCP Protocol layer for JSON-RPC communication."""

from mcp_stdio_server.protocol.jsonrpc import (
    InvalidMessage,
    JsonRpcErrorResponse,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    format_error,
    format_notification,
    format_response,
    parse_message,
    serialize_message,
)
from mcp_stdio_server.protocol.lifecycle import (
    MCP_PROTOCOL_VERSION,
    ServerError,
    ServerState,
)
from mcp_stdio_server.protocol.transport import StdioTransport

__all__ = [
    "InvalidMessage",
    "JsonRpcErrorResponse",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "MCP_PROTOCOL_VERSION",
    "ServerError",
    "ServerState",
    "StdioTransport",
    "format_error",
    "format_notification",
    "format_response",
    "parse_message",
    "serialize_message",
]
