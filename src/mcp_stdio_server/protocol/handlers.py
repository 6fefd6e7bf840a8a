"""MCP request handlers.

Routes typed requests to their method handler. Every handler returns a
``HandlerResult`` holding either a response or an error and never raises;
``handle_request`` adds a final guard so nothing escapes dispatch.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from mcp_stdio_server.features.tools import (
    ToolExecutionError,
    ToolNotFoundError,
    ToolReturnTypeError,
)
from mcp_stdio_server.protocol.capabilities import capabilities_to_protocol
from mcp_stdio_server.protocol.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_URI,
    METHOD_NOT_FOUND,
    MISSING,
    PROMPT_NOT_FOUND,
    RESOURCE_NOT_FOUND,
    TOOL_NOT_FOUND,
    ErrorCause,
    cause_for_code,
)
from mcp_stdio_server.protocol.jsonrpc import (
    ErrorInfo,
    JsonRpcErrorResponse,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    ProgressToken,
    RequestId,
)
from mcp_stdio_server.protocol.lifecycle import SUPPORTED_PROTOCOL_VERSIONS
from mcp_stdio_server.protocol.messages import (
    INITIALIZE,
    NOTIFICATION_CANCELLED,
    NOTIFICATION_INITIALIZED,
    NOTIFICATION_PROGRESS,
    PROMPTS_GET,
    PROMPTS_LIST,
    RESOURCES_LIST,
    RESOURCES_READ,
    TOOLS_CALL,
    TOOLS_LIST,
    CallToolParams,
    GetPromptParams,
    GetPromptResult,
    InitializeParams,
    InitializeResult,
    ListPromptsParams,
    ListPromptsResult,
    ListResourcesParams,
    ListResourcesResult,
    ListToolsParams,
    ListToolsResult,
    ReadResourceParams,
    ReadResourceResult,
)

if TYPE_CHECKING:
    from mcp_stdio_server.server import Server


@dataclass
class RequestContext:
    """Context passed to every request handler."""

    server: Server
    request_id: RequestId | None = None
    progress_token: ProgressToken | None = None


@dataclass
class HandlerResult:
    """Outcome of a handler: exactly one of response or error is set."""

    response: JsonRpcResponse | None = None
    error: ErrorInfo | None = None
    cause: ErrorCause | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _success(ctx: RequestContext, result: Any) -> HandlerResult:
    return HandlerResult(response=JsonRpcResponse(id=ctx.request_id, result=result))


def _failure(
    code: int, message: str, data: Any = MISSING, cause: ErrorCause | None = None
) -> HandlerResult:
    return HandlerResult(
        error=ErrorInfo(code=code, message=message, data=data),
        cause=cause or cause_for_code(code),
    )


def handle_initialize(ctx: RequestContext, params: InitializeParams) -> HandlerResult:
    """Handle initialize request.

    Echoes the client's protocol version and advertises the configured
    capabilities together with the registered resources.
    """
    server = ctx.server
    if params.protocol_version not in SUPPORTED_PROTOCOL_VERSIONS:
        server.logger.warning(
            "Client requested unknown protocol version",
            protocol_version=params.protocol_version,
        )

    server.state.record_client(
        params.protocol_version, params.client_info.to_dict(), params.capabilities
    )

    result = InitializeResult(
        server_info={"name": server.config.name, "version": server.config.version},
        capabilities=capabilities_to_protocol(server.config.capabilities, server),
        protocol_version=params.protocol_version,
        instructions=server.config.instructions,
    )
    return _success(ctx, result)


def handle_list_resources(ctx: RequestContext, params: ListResourcesParams) -> HandlerResult:
    """Handle resources/list request.

    All resources are returned in one page. A supplied cursor is echoed back
    as ``nextCursor``.
    """
    try:
        resources = [resource.to_dict() for resource in ctx.server.resources]
    except Exception as e:
        return _failure(INTERNAL_ERROR, f"Failed to list resources: {e}")

    return _success(ctx, ListResourcesResult(resources=resources, next_cursor=params.cursor))


def handle_read_resource(ctx: RequestContext, params: ReadResourceParams) -> HandlerResult:
    """Handle resources/read request."""
    try:
        httpx.URL(params.uri)
    except httpx.InvalidURL:
        return _failure(INVALID_URI, f"Invalid URI format: {params.uri}")

    resource = ctx.server.find_resource(params.uri)
    if resource is None:
        return _failure(RESOURCE_NOT_FOUND, f"Resource not found: {params.uri}")

    try:
        contents = resource.read()
    except Exception as e:
        return _failure(
            INTERNAL_ERROR, f"Error reading resource: {e}", cause=ErrorCause.HANDLER
        )

    return _success(ctx, ReadResourceResult(contents=[contents]))


def handle_list_tools(ctx: RequestContext, params: ListToolsParams) -> HandlerResult:
    """Handle tools/list request."""
    try:
        tools = ctx.server.list_tools()
    except Exception as e:
        return _failure(INTERNAL_ERROR, f"Failed to list tools: {e}")

    return _success(ctx, ListToolsResult(tools=tools))


def handle_call_tool(ctx: RequestContext, params: CallToolParams) -> HandlerResult:
    """Handle tools/call request.

    The first registered tool with a matching name is invoked.
    """
    try:
        tool = ctx.server.find_tool(params.name)
        if tool is None:
            raise ToolNotFoundError(f"Tool not found: {params.name}")
        result = tool.call(params.arguments)
    except ToolNotFoundError as e:
        return _failure(TOOL_NOT_FOUND, str(e))
    except ToolExecutionError as e:
        ctx.server.logger.error("Tool handler failed", tool=params.name, error=e.__cause__)
        return _failure(INTERNAL_ERROR, str(e), cause=ErrorCause.HANDLER)
    except ToolReturnTypeError as e:
        return _failure(INTERNAL_ERROR, str(e), cause=ErrorCause.HANDLER)
    except Exception as e:
        return _failure(INTERNAL_ERROR, f"Tool execution failed: {e}")

    return _success(ctx, result)


def handle_list_prompts(ctx: RequestContext, params: ListPromptsParams) -> HandlerResult:
    """Handle prompts/list request."""
    try:
        prompts = [prompt.to_dict() for prompt in ctx.server.prompts]
    except Exception as e:
        return _failure(INTERNAL_ERROR, f"Failed to list prompts: {e}")

    return _success(ctx, ListPromptsResult(prompts=prompts, next_cursor=params.cursor))


def handle_get_prompt(ctx: RequestContext, params: GetPromptParams) -> HandlerResult:
    """Handle prompts/get request.

    Checks required arguments, then renders every text message of the prompt.
    """
    prompt = ctx.server.find_prompt(params.name)
    if prompt is None:
        return _failure(PROMPT_NOT_FOUND, f"Prompt not found: {params.name}")

    missing = prompt.missing_arguments(params.arguments)
    if missing:
        return _failure(
            INVALID_PARAMS,
            f"Missing required arguments: {', '.join(missing)}",
            data={"missing": missing},
        )

    try:
        messages = [message.to_dict() for message in prompt.render(params.arguments)]
    except Exception as e:
        return _failure(INTERNAL_ERROR, f"Error rendering prompt: {e}")

    return _success(ctx, GetPromptResult(description=prompt.description, messages=messages))


REQUEST_HANDLERS = {
    INITIALIZE: handle_initialize,
    RESOURCES_LIST: handle_list_resources,
    RESOURCES_READ: handle_read_resource,
    TOOLS_LIST: handle_list_tools,
    TOOLS_CALL: handle_call_tool,
    PROMPTS_LIST: handle_list_prompts,
    PROMPTS_GET: handle_get_prompt,
}


def dispatch(ctx: RequestContext, request: JsonRpcRequest) -> HandlerResult:
    """Route a request to its handler.

    Args:
        ctx: Request context.
        request: Parsed request with typed params.

    Returns:
        HandlerResult from the method handler, or METHOD_NOT_FOUND.
    """
    handler = REQUEST_HANDLERS.get(request.method)
    if handler is None:
        return _failure(METHOD_NOT_FOUND, f"Unknown method: {request.method}")

    try:
        return handler(ctx, request.params)
    except Exception as e:
        ctx.server.logger.error("Request handler error", method=request.method, error=e)
        return _failure(INTERNAL_ERROR, f"Internal error: {e}")


def handle_request(
    server: Server, request: JsonRpcRequest
) -> JsonRpcResponse | JsonRpcErrorResponse:
    """Handle a request and build the response message.

    Args:
        server: Server the request is addressed to.
        request: Parsed request.

    Returns:
        Success response or error response carrying the request id.
    """
    ctx = RequestContext(
        server=server,
        request_id=request.id,
        progress_token=request.meta.progress_token,
    )
    result = dispatch(ctx, request)

    if result.error is not None:
        return JsonRpcErrorResponse(id=request.id, error=result.error)
    if result.response is None:
        return JsonRpcErrorResponse(
            id=request.id,
            error=ErrorInfo(code=INTERNAL_ERROR, message="Handler produced no response"),
        )
    return result.response


def handle_notification(ctx: RequestContext, notification: JsonRpcNotification) -> None:
    """Handle a notification (no response).

    ``initialized`` activates the server. Cancellation and progress are
    accepted and ignored; requests run to completion one at a time.
    """
    method = notification.method

    if method == NOTIFICATION_INITIALIZED:
        ctx.server.active = True
        ctx.server.logger.info("Client initialized", client=ctx.server.state.connected_client)
    elif method in (NOTIFICATION_CANCELLED, NOTIFICATION_PROGRESS):
        ctx.server.logger.debug("Notification ignored", method=method)
    else:
        ctx.server.logger.debug("Unknown notification", method=method)
