"""Error codes and error types for the MCP protocol layer."""

from __future__ import annotations

from enum import Enum
from typing import Any

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# MCP specific error codes
RESOURCE_NOT_FOUND = -32000
TOOL_NOT_FOUND = -32001
INVALID_URI = -32002
PROMPT_NOT_FOUND = -32003


class _Missing:
    """Marks an absent optional member, as opposed to an explicit null."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class ErrorCause(Enum):
    """Why a message could not be answered with a result."""

    PARSE = "parse"
    PROTOCOL = "protocol"
    LOOKUP = "lookup"
    HANDLER = "handler"
    INTERNAL = "internal"


_CAUSE_BY_CODE = {
    PARSE_ERROR: ErrorCause.PARSE,
    INVALID_REQUEST: ErrorCause.PARSE,
    METHOD_NOT_FOUND: ErrorCause.PROTOCOL,
    INVALID_PARAMS: ErrorCause.PROTOCOL,
    INVALID_URI: ErrorCause.PROTOCOL,
    RESOURCE_NOT_FOUND: ErrorCause.LOOKUP,
    TOOL_NOT_FOUND: ErrorCause.LOOKUP,
    PROMPT_NOT_FOUND: ErrorCause.LOOKUP,
    INTERNAL_ERROR: ErrorCause.INTERNAL,
}


def cause_for_code(code: int) -> ErrorCause:
    """Return the default cause for an error code.

    Unknown codes are treated as internal errors.
    """
    return _CAUSE_BY_CODE.get(code, ErrorCause.INTERNAL)


class JsonRpcError(Exception):
    """JSON-RPC error with code and message."""

    def __init__(self, code: int, message: str, data: Any = MISSING) -> None:
        """Initialize the error.

        Args:
            code: JSON-RPC error code.
            message: Human-readable error message.
            data: Optional additional error data (omitted from the wire when MISSING).
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data
