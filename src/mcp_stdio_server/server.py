"""MCP Server - main entry point.

Integrates all components into a complete MCP server: the component
registry, the message pipeline and the stdio run loop.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from mcp_stdio_server.features.prompts import Prompt
from mcp_stdio_server.features.resources import Resource
from mcp_stdio_server.features.tools import Tool
from mcp_stdio_server.loader import register_components
from mcp_stdio_server.logger import StderrLogger
from mcp_stdio_server.protocol.capabilities import Capability, default_capabilities
from mcp_stdio_server.protocol.errors import INTERNAL_ERROR, PARSE_ERROR
from mcp_stdio_server.protocol.handlers import (
    RequestContext,
    handle_notification,
    handle_request,
)
from mcp_stdio_server.protocol.jsonrpc import (
    InvalidMessage,
    JsonRpcErrorResponse,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    format_error,
    parse_message,
    serialize_message,
)
from mcp_stdio_server.protocol.lifecycle import ServerError, ServerState
from mcp_stdio_server.protocol.transport import MessageDecodeError, StdioTransport
from mcp_stdio_server.traffic import TrafficLogger

Component = Tool | Resource | Prompt


@dataclass
class ServerConfig:
    """Configuration for an MCP server."""

    name: str
    version: str = "1.0.0"
    description: str = ""
    capabilities: list[Capability] = field(default_factory=default_capabilities)
    instructions: str = ""
    log_level: str = "info"
    traffic_log: str = ""
    components: list[str] = field(default_factory=list)


@dataclass
class Subscription:
    """A callback subscribed to updates of one resource."""

    uri: str
    callback: Callable[..., Any]
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class Server:
    """MCP Server implementation.

    Holds registered tools, resources and prompts and answers JSON-RPC
    messages about them, one at a time. Names and uris are not required to be
    unique; lookups return the first registered match.
    """

    def __init__(self, config: ServerConfig, logger: StderrLogger | None = None) -> None:
        """Initialize the server.

        Args:
            config: Server configuration.
            logger: Diagnostic logger (defaults to stderr at the configured level).
        """
        self.config = config
        self.logger = logger or StderrLogger(level=config.log_level)
        self.tools: list[Tool] = []
        self.resources: list[Resource] = []
        self.prompts: list[Prompt] = []
        self.subscriptions: defaultdict[str, list[Subscription]] = defaultdict(list)
        self.active = False
        self.state = ServerState()

    def __repr__(self) -> str:
        status = "active" if self.active else "inactive"
        return f"Server({self.config.name}, {status})"

    def register(self, component: Component) -> Server:
        """Register a tool, resource, or prompt.

        Duplicate names are allowed but logged; the earlier registration
        shadows the later one.

        Args:
            component: Component to register.

        Returns:
            The server, for chaining.

        Raises:
            TypeError: If the component is not a Tool, Resource or Prompt.
        """
        match component:
            case Tool(name=name):
                registry: list[Any] = self.tools
                key = name
                duplicate = self.find_tool(name) is not None
            case Resource(uri=uri):
                registry = self.resources
                key = uri
                duplicate = self.find_resource(uri) is not None
            case Prompt(name=name):
                registry = self.prompts
                key = name
                duplicate = self.find_prompt(name) is not None
            case _:
                raise TypeError(f"Cannot register {type(component).__name__}")

        if duplicate:
            self.logger.warning(
                f"Duplicate {type(component).__name__.lower()} registered; "
                "the first registration wins",
                key=key,
            )
        registry.append(component)
        return self

    def register_all(self, components: Iterable[Component]) -> Server:
        """Register several components in order."""
        for component in components:
            self.register(component)
        return self

    def find_tool(self, name: str) -> Tool | None:
        return next((tool for tool in self.tools if tool.name == name), None)

    def find_resource(self, uri: str) -> Resource | None:
        return next((resource for resource in self.resources if resource.uri == uri), None)

    def find_prompt(self, name: str) -> Prompt | None:
        return next((prompt for prompt in self.prompts if prompt.name == name), None)

    def list_tools(self) -> list[dict[str, Any]]:
        """List all registered tools.

        Returns:
            List of tool definitions.
        """
        return [tool.to_dict() for tool in self.tools]

    def subscribe(self, uri: str, callback: Callable[..., Any]) -> Server:
        """Subscribe a callback to updates of a resource.

        Returns:
            The server, for chaining.
        """
        self.subscriptions[uri].append(Subscription(uri=uri, callback=callback))
        return self

    def unsubscribe(self, uri: str, callback: Callable[..., Any]) -> Server:
        """Remove every subscription of ``callback`` (by identity) for a uri.

        A uri left without subscribers is dropped from ``subscriptions``.

        Returns:
            The server, for chaining.
        """
        if uri not in self.subscriptions:
            return self
        remaining = [s for s in self.subscriptions[uri] if s.callback is not callback]
        if remaining:
            self.subscriptions[uri] = remaining
        else:
            del self.subscriptions[uri]
        return self

    def process_message(self, raw_message: str) -> str | None:
        """Handle an incoming JSON-RPC message.

        Args:
            raw_message: Raw JSON-RPC message string.

        Returns:
            Response string, or None for notifications and inbound responses.
        """
        message = None
        try:
            message = parse_message(raw_message)
            match message:
                case InvalidMessage():
                    return serialize_message(message)
                case JsonRpcRequest():
                    return serialize_message(handle_request(self, message))
                case JsonRpcNotification():
                    self._handle_notification(message)
                    return None
                case JsonRpcResponse() | JsonRpcErrorResponse():
                    self.logger.debug("Ignoring response sent by client", id=message.id)
                    return None
        except Exception as e:
            msg_id = message.id if isinstance(message, JsonRpcRequest) else None
            self.logger.error("Failed to process message", error=e)
            return format_error(msg_id, INTERNAL_ERROR, f"Internal server error: {e}")
        return None

    def _handle_notification(self, notification: JsonRpcNotification) -> None:
        # Notifications never produce output, even when handling fails
        try:
            handle_notification(RequestContext(server=self), notification)
        except Exception as e:
            self.logger.error(
                "Notification handling failed", method=notification.method, error=e
            )

    def start(
        self,
        transport: StdioTransport | None = None,
        traffic_log: TrafficLogger | None = None,
    ) -> None:
        """Run the read-process-write loop until EOF or ``stop()``.

        Args:
            transport: Transport to use (defaults to stdin/stdout).
            traffic_log: Optional traffic logger recording every message.

        Raises:
            ServerError: If the server is already running.
        """
        if self.state.running:
            self.logger.error("Server already running")
            raise ServerError("Server already running")

        transport = transport or StdioTransport()
        self.state.running = True
        self.logger.info(f"Starting MCP server: {self.config.name}")

        try:
            self._run_loop(transport, traffic_log)
        finally:
            self.state.running = False
            self.active = False
            self.logger.info("Server stopped")

    def _run_loop(self, transport: StdioTransport, traffic_log: TrafficLogger | None) -> None:
        while self.state.running:
            try:
                message = transport.read_message()
            except MessageDecodeError as e:
                self.logger.warning("Discarding undecodable input line", error=e)
                response = format_error(None, PARSE_ERROR, f"Parse error: {e}")
                self._send_error(transport, traffic_log, response)
                continue
            if message is None:
                self.logger.info("Input stream closed, shutting down")
                break

            try:
                if traffic_log is not None:
                    traffic_log.log_request(message)

                response = self.process_message(message)
                if response is not None:
                    transport.write_message(response)
                    if traffic_log is not None:
                        traffic_log.log_response(response)
            except Exception as e:
                self.logger.error("Error processing message", error=e)
                response = format_error(None, INTERNAL_ERROR, f"Internal server error: {e}")
                self._send_error(transport, traffic_log, response)

    def _send_error(
        self,
        transport: StdioTransport,
        traffic_log: TrafficLogger | None,
        response: str,
    ) -> None:
        try:
            transport.write_message(response)
            if traffic_log is not None:
                traffic_log.log_error(response)
        except Exception as e:
            self.logger.error("Failed to send error response", error=e)

    def stop(self) -> None:
        """Ask the run loop to exit after the current message.

        Raises:
            ServerError: If the server is not running.
        """
        if not self.state.running:
            raise ServerError("Server not running")
        self.state.running = False


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list | tuple):
        return list(value)
    return [value]


def mcp_server(
    name: str,
    version: str = "1.0.0",
    tools: Tool | list[Tool] | None = None,
    resources: Resource | list[Resource] | None = None,
    prompts: Prompt | list[Prompt] | None = None,
    description: str = "",
    capabilities: list[Capability] | None = None,
    instructions: str = "",
    components: list[str] | None = None,
    logger: StderrLogger | None = None,
) -> Server:
    """Create and populate a server.

    Args:
        name: Server name reported in serverInfo.
        version: Server version reported in serverInfo.
        tools: Tool or tools to register.
        resources: Resource or resources to register.
        prompts: Prompt or prompts to register.
        description: Free-form server description.
        capabilities: Capabilities to advertise (defaults to resources, tools, prompts).
        instructions: Usage instructions returned from initialize.
        components: Importable modules to load additional components from.
        logger: Diagnostic logger.

    Returns:
        Server ready to start.
    """
    config = ServerConfig(
        name=name,
        version=version,
        description=description,
        capabilities=capabilities if capabilities is not None else default_capabilities(),
        instructions=instructions,
        components=list(components or []),
    )
    server = Server(config, logger=logger)

    server.register_all(_as_list(tools))
    server.register_all(_as_list(resources))
    server.register_all(_as_list(prompts))

    if config.components:
        register_components(server, config.components)

    return server
