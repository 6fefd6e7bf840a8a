"""Resource definitions."""

from __future__ import annotations

import inspect
import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

DEFAULT_AUDIENCE = ["assistant"]
DEFAULT_PRIORITY = 0.0


@dataclass
class Resource:
    """A URI-addressed data source readable on demand.

    The data provider is called with no arguments, or with the requested
    uri if it has a required positional parameter.
    """

    uri: str
    name: str
    data_provider: Callable[..., Any]
    description: str = ""
    mime_type: str = "application/json"
    annotations: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP resources/list format.

        Returns:
            Dictionary with uri, name, mimeType, description and annotations.
        """
        return {
            "uri": self.uri,
            "name": self.name,
            "mimeType": self.mime_type,
            "description": self.description,
            "annotations": {
                "audience": self.annotations.get("audience", DEFAULT_AUDIENCE),
                "priority": self.annotations.get("priority", DEFAULT_PRIORITY),
            },
        }

    def summary(self) -> dict[str, Any]:
        """Short form advertised in the initialize capabilities."""
        return {
            "uri": self.uri,
            "name": self.name,
            "mimeType": self.mime_type,
            "description": self.description,
        }

    def read(self) -> dict[str, Any]:
        """Call the data provider and wrap the result as text contents.

        Returns:
            A single resources/read contents entry.
        """
        if _accepts_uri(self.data_provider):
            data = self.data_provider(self.uri)
        else:
            data = self.data_provider()

        return {
            "uri": self.uri,
            "text": json.dumps(data),
            "mimeType": self.mime_type,
        }


def _accepts_uri(func: Callable[..., Any]) -> bool:
    # Only a required positional parameter receives the uri
    try:
        params = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return False
    return any(
        p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD) and p.default is p.empty
        for p in params
    )
