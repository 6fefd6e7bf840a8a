"""JSON-RPC 2.0 message parsing and formatting.

Implements the JSON-RPC 2.0 specification for MCP protocol communication.
``parse_message`` never raises: anything it cannot turn into a message comes
back as an ``InvalidMessage`` carrying the error to report.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from mcp_stdio_server.protocol.errors import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    MISSING,
    PARSE_ERROR,
    JsonRpcError,
)
from mcp_stdio_server.protocol.messages import get_params_type

# Maximum message size (1 MB)
MAX_MESSAGE_SIZE = 1_048_576

RequestId = int | str
ProgressToken = int | str


@dataclass
class RequestMeta:
    """Request metadata carried in ``params._meta``."""

    progress_token: ProgressToken | None = None


@dataclass
class ErrorInfo:
    """The ``error`` member of a JSON-RPC error response."""

    code: int
    message: str
    data: Any = MISSING

    @classmethod
    def from_dict(cls, error: dict[str, Any]) -> ErrorInfo:
        return cls(code=error["code"], message=error["message"], data=error.get("data", MISSING))

    def to_dict(self) -> dict[str, Any]:
        error_obj: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.data is not MISSING:
            error_obj["data"] = self.data
        return error_obj


@dataclass
class JsonRpcRequest:
    """Represents a JSON-RPC request (has id)."""

    id: RequestId
    method: str
    params: Any = None
    meta: RequestMeta = field(default_factory=RequestMeta)


@dataclass
class JsonRpcNotification:
    """Represents a JSON-RPC notification (no id)."""

    method: str
    params: Any = None


@dataclass
class JsonRpcResponse:
    """Represents a successful JSON-RPC response."""

    id: RequestId
    result: Any


@dataclass
class JsonRpcErrorResponse:
    """Represents a JSON-RPC error response."""

    id: RequestId | None
    error: ErrorInfo


class InvalidMessage(JsonRpcErrorResponse):
    """Error produced locally because an incoming message could not be parsed."""


Message = JsonRpcRequest | JsonRpcNotification | JsonRpcResponse | JsonRpcErrorResponse


def parse_message(raw: str) -> Message:
    """Parse a JSON-RPC message from a string.

    Args:
        raw: Raw JSON string.

    Returns:
        Parsed request, notification, response or error response. Messages
        that cannot be parsed produce an ``InvalidMessage``.
    """
    # Check message size before parsing to prevent DoS
    if len(raw) > MAX_MESSAGE_SIZE:
        return _invalid(
            None,
            PARSE_ERROR,
            f"Message too large: {len(raw)} bytes exceeds {MAX_MESSAGE_SIZE} limit",
        )

    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, RecursionError) as e:
        # Nesting deeper than the decoder can follow counts as malformed
        return _invalid(None, PARSE_ERROR, f"Parse error: {e}")

    # Must be an object
    if not isinstance(data, dict):
        return _invalid(None, INVALID_REQUEST, "Invalid Request: message must be an object")

    msg_id = data.get("id")
    if data.get("jsonrpc") != "2.0":
        return _invalid(_safe_id(msg_id), INVALID_REQUEST, "Invalid Request: jsonrpc must be '2.0'")

    try:
        if "method" in data:
            if "id" in data:
                return _parse_request(data)
            return _parse_notification(data)
        if "result" in data:
            return JsonRpcResponse(id=_require_id(msg_id), result=data["result"])
        if "error" in data:
            return JsonRpcErrorResponse(
                id=_safe_id(msg_id), error=ErrorInfo.from_dict(data["error"])
            )
        return _invalid(_safe_id(msg_id), INVALID_REQUEST, "Invalid Request: unknown message shape")
    except JsonRpcError as e:
        return _invalid(_safe_id(msg_id), e.code, e.message, e.data)
    except Exception as e:
        return _invalid(_safe_id(msg_id), INTERNAL_ERROR, f"Error parsing message: {e}")


def _parse_request(data: dict[str, Any]) -> JsonRpcRequest:
    method = _require_method(data)
    msg_id = _require_id(data["id"])
    raw_params = _raw_params(data)

    meta = raw_params.get("_meta") if isinstance(raw_params, dict) else None
    progress_token = meta.get("progressToken") if isinstance(meta, dict) else None

    params_type = get_params_type(method)
    if params_type is None:
        params = raw_params
    else:
        params = params_type.from_dict(raw_params or {})

    return JsonRpcRequest(
        id=msg_id, method=method, params=params, meta=RequestMeta(progress_token=progress_token)
    )


def _parse_notification(data: dict[str, Any]) -> JsonRpcNotification:
    method = _require_method(data)
    raw_params = _raw_params(data) or {}

    params: Any = raw_params
    params_type = get_params_type(method)
    if params_type is not None and raw_params:
        try:
            params = params_type.from_dict(raw_params)
        except JsonRpcError:
            # Notifications cannot be answered, keep the raw params
            params = raw_params

    return JsonRpcNotification(method=method, params=params)


def _require_method(data: dict[str, Any]) -> str:
    method = data["method"]
    if not isinstance(method, str):
        raise JsonRpcError(INVALID_REQUEST, "Invalid Request: method must be a string")
    return method


def _require_id(msg_id: Any) -> RequestId:
    if isinstance(msg_id, bool) or not isinstance(msg_id, int | str):
        raise JsonRpcError(INVALID_REQUEST, "Invalid Request: id must be integer or string")
    return msg_id


def _safe_id(msg_id: Any) -> RequestId | None:
    if isinstance(msg_id, bool) or not isinstance(msg_id, int | str):
        return None
    return msg_id


def _raw_params(data: dict[str, Any]) -> dict[str, Any] | None:
    params = data.get("params")
    if params is not None and not isinstance(params, dict):
        raise JsonRpcError(INVALID_REQUEST, "Invalid Request: params must be an object")
    return params


def _invalid(
    msg_id: RequestId | None, code: int, message: str, data: Any = MISSING
) -> InvalidMessage:
    return InvalidMessage(id=msg_id, error=ErrorInfo(code=code, message=message, data=data))


def _to_wire(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return value


def serialize_message(msg: Message) -> str:
    """Serialize a message to a single compact JSON line.

    Args:
        msg: Message to serialize.

    Returns:
        JSON string without a trailing newline.

    Raises:
        TypeError: If ``msg`` is not a message.
    """
    match msg:
        case JsonRpcRequest(id=msg_id, method=method, params=params, meta=meta):
            request: dict[str, Any] = {"jsonrpc": "2.0", "id": msg_id, "method": method}
            wire_params = _to_wire(params)
            if meta.progress_token is not None:
                wire_params = dict(wire_params or {})
                wire_params["_meta"] = {"progressToken": meta.progress_token}
            if wire_params is not None:
                request["params"] = wire_params
            return _dumps(request)
        case JsonRpcNotification(method=method, params=params):
            return format_notification(method, _to_wire(params))
        case JsonRpcResponse(id=msg_id, result=result):
            return format_response(msg_id, _to_wire(result))
        case JsonRpcErrorResponse(id=msg_id, error=error):
            return format_error(msg_id, error.code, error.message, error.data)
        case _:
            raise TypeError(f"Unknown message type: {type(msg).__name__}")


def _dumps(payload: dict[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"))


def format_response(msg_id: RequestId, result: Any) -> str:
    """Format a successful JSON-RPC response.

    Args:
        msg_id: Request ID to echo back.
        result: Result payload.

    Returns:
        JSON string.
    """
    response = {
        "jsonrpc": "2.0",
        "id": msg_id,
        "result": result,
    }
    return _dumps(response)


def format_error(
    msg_id: RequestId | None,
    code: int,
    message: str,
    data: Any = MISSING,
) -> str:
    """Format a JSON-RPC error response.

    Args:
        msg_id: Request ID (or None for parse errors).
        code: Error code.
        message: Error message.
        data: Optional error data. An explicit None is sent as null.

    Returns:
        JSON string.
    """
    response = {
        "jsonrpc": "2.0",
        "id": msg_id,
        "error": ErrorInfo(code=code, message=message, data=data).to_dict(),
    }
    return _dumps(response)


def format_notification(method: str, params: dict[str, Any] | None = None) -> str:
    """Format a JSON-RPC notification.

    Args:
        method: Notification method name.
        params: Optional parameters.

    Returns:
        JSON string.
    """
    notification: dict[str, Any] = {
        "jsonrpc": "2.0",
        "method": method,
    }
    if params is not None:
        notification["params"] = params

    return _dumps(notification)
