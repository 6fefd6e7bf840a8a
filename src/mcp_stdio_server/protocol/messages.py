"""Method-specific parameter and result shapes.

Each params type builds itself from the raw ``params`` object of a request
with ``from_dict`` and converts back with ``to_dict``. ``REQUEST_PARAMS_MAP``
maps method names to their params type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from mcp_stdio_server.protocol.errors import INVALID_PARAMS, JsonRpcError
from mcp_stdio_server.protocol.lifecycle import MCP_PROTOCOL_VERSION


def _require(params: dict[str, Any], key: str, kind: type | tuple[type, ...]) -> Any:
    if key not in params:
        raise JsonRpcError(INVALID_PARAMS, f"Invalid params: missing required field '{key}'")
    return _typed(params, key, kind)


def _optional(
    params: dict[str, Any], key: str, kind: type | tuple[type, ...], default: Any = None
) -> Any:
    if params.get(key) is None:
        return default
    return _typed(params, key, kind)


def _typed(params: dict[str, Any], key: str, kind: type | tuple[type, ...]) -> Any:
    value = params[key]
    # bool is an int subclass, but never a valid number or id here
    if not isinstance(value, kind) or (isinstance(value, bool) and bool not in _kinds(kind)):
        raise JsonRpcError(INVALID_PARAMS, f"Invalid params: field '{key}' has wrong type")
    return value


def _kinds(kind: type | tuple[type, ...]) -> tuple[type, ...]:
    return kind if isinstance(kind, tuple) else (kind,)


@dataclass
class Implementation:
    """Name and version of a client or server implementation."""

    name: str = "default-client"
    version: str = "1.0.0"

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "version": self.version}


@dataclass
class InitializeParams:
    """Parameters of the initialize request."""

    protocol_version: str = MCP_PROTOCOL_VERSION
    capabilities: dict[str, Any] = field(default_factory=dict)
    client_info: Implementation = field(default_factory=Implementation)

    @classmethod
    def from_dict(cls, params: dict[str, Any]) -> InitializeParams:
        client_info = _optional(params, "clientInfo", dict, {})
        return cls(
            protocol_version=_optional(params, "protocolVersion", str, MCP_PROTOCOL_VERSION),
            capabilities=_optional(params, "capabilities", dict, {}),
            client_info=Implementation(
                name=client_info.get("name", "default-client"),
                version=client_info.get("version", "1.0.0"),
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "protocolVersion": self.protocol_version,
            "capabilities": self.capabilities,
            "clientInfo": self.client_info.to_dict(),
        }


@dataclass
class PaginatedParams:
    """Parameters carrying an optional opaque pagination cursor."""

    cursor: str | None = None

    @classmethod
    def from_dict(cls, params: dict[str, Any]) -> PaginatedParams:
        return cls(cursor=_optional(params, "cursor", str))

    def to_dict(self) -> dict[str, Any]:
        if self.cursor is None:
            return {}
        return {"cursor": self.cursor}


class ListResourcesParams(PaginatedParams):
    """Parameters of resources/list."""


class ListToolsParams(PaginatedParams):
    """Parameters of tools/list."""


class ListPromptsParams(PaginatedParams):
    """Parameters of prompts/list."""


@dataclass
class ReadResourceParams:
    """Parameters of resources/read."""

    uri: str

    @classmethod
    def from_dict(cls, params: dict[str, Any]) -> ReadResourceParams:
        return cls(uri=_require(params, "uri", str))

    def to_dict(self) -> dict[str, Any]:
        return {"uri": self.uri}


@dataclass
class CallToolParams:
    """Parameters of tools/call."""

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, params: dict[str, Any]) -> CallToolParams:
        return cls(
            name=_require(params, "name", str),
            arguments=_optional(params, "arguments", dict, {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "arguments": self.arguments}


@dataclass
class GetPromptParams:
    """Parameters of prompts/get."""

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, params: dict[str, Any]) -> GetPromptParams:
        return cls(
            name=_require(params, "name", str),
            arguments=_optional(params, "arguments", dict, {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "arguments": self.arguments}


@dataclass
class ProgressParams:
    """Parameters of the progress notification."""

    progress_token: str | int
    progress: float
    total: float | None = None
    message: str | None = None

    @classmethod
    def from_dict(cls, params: dict[str, Any]) -> ProgressParams:
        return cls(
            progress_token=_require(params, "progressToken", (str, int)),
            progress=_require(params, "progress", (int, float)),
            total=_optional(params, "total", (int, float)),
            message=_optional(params, "message", str),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"progressToken": self.progress_token, "progress": self.progress}
        if self.total is not None:
            data["total"] = self.total
        if self.message is not None:
            data["message"] = self.message
        return data


@dataclass
class CancelledParams:
    """Parameters of the cancelled notification."""

    request_id: str | int
    reason: str | None = None

    @classmethod
    def from_dict(cls, params: dict[str, Any]) -> CancelledParams:
        return cls(
            request_id=_require(params, "requestId", (str, int)),
            reason=_optional(params, "reason", str),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"requestId": self.request_id}
        if self.reason is not None:
            data["reason"] = self.reason
        return data


# Methods handled by the server
INITIALIZE = "initialize"
RESOURCES_LIST = "resources/list"
RESOURCES_READ = "resources/read"
TOOLS_LIST = "tools/list"
TOOLS_CALL = "tools/call"
PROMPTS_LIST = "prompts/list"
PROMPTS_GET = "prompts/get"

NOTIFICATION_INITIALIZED = "notifications/initialized"
NOTIFICATION_CANCELLED = "notifications/cancelled"
NOTIFICATION_PROGRESS = "notifications/progress"

REQUEST_PARAMS_MAP: dict[str, Any] = {
    INITIALIZE: InitializeParams,
    RESOURCES_LIST: ListResourcesParams,
    RESOURCES_READ: ReadResourceParams,
    TOOLS_LIST: ListToolsParams,
    TOOLS_CALL: CallToolParams,
    PROMPTS_LIST: ListPromptsParams,
    PROMPTS_GET: GetPromptParams,
    NOTIFICATION_PROGRESS: ProgressParams,
    NOTIFICATION_CANCELLED: CancelledParams,
}


def get_params_type(method: str) -> Any | None:
    """Get the params type for a method, or None if the method is unknown."""
    return REQUEST_PARAMS_MAP.get(method)


@dataclass
class InitializeResult:
    """Result of the initialize request."""

    server_info: dict[str, str]
    capabilities: dict[str, Any]
    protocol_version: str
    instructions: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "serverInfo": self.server_info,
            "capabilities": self.capabilities,
            "protocolVersion": self.protocol_version,
            "instructions": self.instructions,
        }


@dataclass
class ListResourcesResult:
    """Result of resources/list."""

    resources: list[dict[str, Any]]
    next_cursor: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"resources": self.resources}
        if self.next_cursor:
            result["nextCursor"] = self.next_cursor
        return result


@dataclass
class ReadResourceResult:
    """Result of resources/read."""

    contents: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        return {"contents": self.contents}


@dataclass
class ListToolsResult:
    """Result of tools/list."""

    tools: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        return {"tools": self.tools}


@dataclass
class ListPromptsResult:
    """Result of prompts/list."""

    prompts: list[dict[str, Any]]
    next_cursor: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"prompts": self.prompts}
        if self.next_cursor:
            result["nextCursor"] = self.next_cursor
        return result


@dataclass
class GetPromptResult:
    """Result of prompts/get."""

    description: str
    messages: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        return {"description": self.description, "messages": self.messages}
