"""Prompt definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from mcp_stdio_server.features.content import (
    Content,
    TextContent,
    content_to_dict,
)
from mcp_stdio_server.protocol.templates import render_template


class Role(Enum):
    """Author of a prompt message."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class PromptArgument:
    """An argument a prompt accepts."""

    name: str
    description: str = ""
    required: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "required": self.required,
        }


@dataclass
class PromptMessage:
    """A single message of a prompt."""

    content: Content
    role: Role = Role.USER

    def render(self, arguments: dict[str, Any]) -> PromptMessage:
        """Substitute arguments into text content.

        Non-text content is returned unchanged.
        """
        match self.content:
            case TextContent(text=text, annotations=annotations):
                rendered = TextContent(
                    text=render_template(text, arguments), annotations=annotations
                )
                return PromptMessage(content=rendered, role=self.role)
            case _:
                return self

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role.value, "content": content_to_dict(self.content)}


@dataclass
class Prompt:
    """A named, argument-parameterized message template."""

    name: str
    description: str = ""
    arguments: list[PromptArgument] = field(default_factory=list)
    messages: list[PromptMessage] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP prompts/list format."""
        return {
            "name": self.name,
            "description": self.description,
            "arguments": [argument.to_dict() for argument in self.arguments],
        }

    def missing_arguments(self, supplied: dict[str, Any]) -> list[str]:
        """List required arguments absent from ``supplied``."""
        return [arg.name for arg in self.arguments if arg.required and arg.name not in supplied]

    def render(self, arguments: dict[str, Any]) -> list[PromptMessage]:
        """Render every message with the given arguments."""
        return [message.render(arguments) for message in self.messages]
