"""Component loader - registers components listed in a manifest.

A manifest is a list of importable module names. Each module either exposes
a ``get_components()`` callable returning tools, resources and prompts, or
defines them as module-level values.
"""

from __future__ import annotations

import importlib
from collections.abc import Iterable
from types import ModuleType
from typing import TYPE_CHECKING, Any

from mcp_stdio_server.features.prompts import Prompt
from mcp_stdio_server.features.resources import Resource
from mcp_stdio_server.features.tools import Tool

if TYPE_CHECKING:
    from mcp_stdio_server.server import Server

COMPONENT_TYPES = (Tool, Resource, Prompt)
FACTORY_NAME = "get_components"


class ComponentLoadError(Exception):
    """Raised when a component module fails to load."""

    pass


def load_module_components(module_name: str) -> list[Tool | Resource | Prompt]:
    """Import a module and collect its components.

    Args:
        module_name: Dotted module name.

    Returns:
        Components in declaration order.

    Raises:
        ComponentLoadError: If the module cannot be imported or yields a
            value that is not a component.
    """
    try:
        module = importlib.import_module(module_name)
    except Exception as e:
        raise ComponentLoadError(f"Cannot import component module '{module_name}': {e}") from e

    factory = getattr(module, FACTORY_NAME, None)
    if callable(factory):
        return _from_factory(module_name, factory)
    return _from_module_values(module)


def _from_factory(module_name: str, factory: Any) -> list[Tool | Resource | Prompt]:
    try:
        components = list(factory())
    except Exception as e:
        raise ComponentLoadError(f"{module_name}.{FACTORY_NAME}() failed: {e}") from e

    for component in components:
        if not isinstance(component, COMPONENT_TYPES):
            raise ComponentLoadError(
                f"{module_name}.{FACTORY_NAME}() returned {type(component).__name__}, "
                "expected Tool, Resource or Prompt"
            )
    return components


def _from_module_values(module: ModuleType) -> list[Tool | Resource | Prompt]:
    return [value for value in vars(module).values() if isinstance(value, COMPONENT_TYPES)]


def register_components(server: Server, module_names: Iterable[str]) -> Server:
    """Register the components of every module in the manifest.

    Modules that fail to load are logged and skipped.

    Args:
        server: Server to register with.
        module_names: Manifest of dotted module names.

    Returns:
        The server, for chaining.
    """
    for module_name in module_names:
        try:
            components = load_module_components(module_name)
        except ComponentLoadError as e:
            server.logger.warning(str(e), module=module_name)
            continue

        server.register_all(components)
        server.logger.info(
            f"Registered {len(components)} components from {module_name}", module=module_name
        )

    return server
