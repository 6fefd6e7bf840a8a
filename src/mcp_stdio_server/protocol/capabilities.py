"""Server capability declarations.

Capabilities are value objects describing which feature groups the server
supports. They are projected into the ``capabilities`` map of the
initialize result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcp_stdio_server.server import Server


@dataclass(frozen=True)
class ResourceCapability:
    """Resource listing, reading and subscription support."""

    list_changed: bool = False
    subscribe: bool = False

    key = "resources"

    def to_protocol_format(self) -> dict[str, Any]:
        return {"listChanged": self.list_changed, "subscribe": self.subscribe}


@dataclass(frozen=True)
class ToolCapability:
    """Tool listing and invocation support."""

    list_changed: bool = False

    key = "tools"

    def to_protocol_format(self) -> dict[str, Any]:
        return {"listChanged": self.list_changed}


@dataclass(frozen=True)
class PromptCapability:
    """Prompt listing and retrieval support."""

    list_changed: bool = False

    key = "prompts"

    def to_protocol_format(self) -> dict[str, Any]:
        return {"listChanged": self.list_changed}


@dataclass(frozen=True)
class LoggingCapability:
    """Logging support. Only its presence is advertised."""

    levels: tuple[str, ...] = field(default=("info", "warn", "error"))

    key = "logging"

    def to_protocol_format(self) -> dict[str, Any]:
        return {}


Capability = ResourceCapability | ToolCapability | PromptCapability | LoggingCapability

CAPABILITY_TYPES: dict[str, Any] = {
    ResourceCapability.key: ResourceCapability,
    ToolCapability.key: ToolCapability,
    PromptCapability.key: PromptCapability,
    LoggingCapability.key: LoggingCapability,
}


def default_capabilities() -> list[Capability]:
    """Create the default capability set: resources, tools and prompts."""
    return [
        ResourceCapability(list_changed=True, subscribe=True),
        ToolCapability(list_changed=True),
        PromptCapability(list_changed=True),
    ]


def merge_capabilities(base: list[Capability], override: list[Capability]) -> list[Capability]:
    """Merge two capability lists.

    An override replaces the base entry of the same kind in place; kinds not
    present in ``base`` are appended.

    Args:
        base: Starting capabilities.
        override: Capabilities taking precedence.

    Returns:
        New merged list. Neither input is modified.
    """
    result = list(base)
    for cap in override:
        for index, existing in enumerate(result):
            if type(existing) is type(cap):
                result[index] = cap
                break
        else:
            result.append(cap)
    return result


def capabilities_to_protocol(capabilities: list[Capability], server: Server) -> dict[str, Any]:
    """Build the capabilities map sent in the initialize result.

    Registered resources are listed under ``resources.resources``. Tool
    definitions are never included here; clients fetch them with tools/list.

    Args:
        capabilities: Declared server capabilities.
        server: Server whose registered resources are advertised.

    Returns:
        Capabilities keyed by feature group.
    """
    result: dict[str, Any] = {}
    for cap in capabilities:
        result[cap.key] = cap.to_protocol_format()

    if ResourceCapability.key in result and server.resources:
        result[ResourceCapability.key]["resources"] = [
            resource.summary() for resource in server.resources
        ]

    return result


def capability_from_dict(kind: str, options: dict[str, Any] | None) -> Capability:
    """Build a capability from its configuration entry.

    Args:
        kind: Capability key (resources, tools, prompts, logging).
        options: Snake-case options for the capability.

    Returns:
        Capability instance.

    Raises:
        ValueError: If the kind or an option is unknown.
    """
    capability_type = CAPABILITY_TYPES.get(kind)
    if capability_type is None:
        raise ValueError(f"Unknown capability: {kind}")

    if options is not None and not isinstance(options, dict):
        raise ValueError(f"Options for capability '{kind}' must be a mapping")
    options = dict(options or {})
    if "levels" in options:
        options["levels"] = tuple(options["levels"])
    try:
        return capability_type(**options)
    except TypeError as e:
        raise ValueError(f"Invalid options for capability '{kind}': {e}") from e
