"""Prompt template substitution.

Templates support two constructs:

    {name}          replaced with the argument value, left intact if absent
    {?name?body}    body kept only when ``name`` is supplied

A conditional body may contain placeholders, further conditional blocks and
other balanced braces. Malformed blocks (no closing ``?`` or unbalanced
braces) are left as literal text.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

PLACEHOLDER_PATTERN = re.compile(r"\{([^{}?][^{}]*)\}")
CONDITIONAL_OPEN = "{?"


def render_template(template: str, arguments: Mapping[str, Any]) -> str:
    """Render a prompt template.

    Args:
        template: Template text.
        arguments: Argument values keyed by name.

    Returns:
        Rendered text.
    """
    resolved = resolve_conditionals(template, arguments)
    return substitute_placeholders(resolved, arguments)


def resolve_conditionals(text: str, arguments: Mapping[str, Any]) -> str:
    """Keep or drop every ``{?name?body}`` block in ``text``.

    Placeholders inside kept bodies are not substituted here.
    """
    parts: list[str] = []
    pos = 0

    while True:
        start = text.find(CONDITIONAL_OPEN, pos)
        if start == -1:
            parts.append(text[pos:])
            break

        parts.append(text[pos:start])

        name_end = text.find("?", start + len(CONDITIONAL_OPEN))
        body_end = -1 if name_end == -1 else _matching_brace(text, name_end + 1)
        if body_end == -1:
            # Unterminated block: keep the rest verbatim
            parts.append(text[start:])
            break

        name = text[start + len(CONDITIONAL_OPEN) : name_end]
        if name in arguments:
            parts.append(resolve_conditionals(text[name_end + 1 : body_end], arguments))
        pos = body_end + 1

    return "".join(parts)


def substitute_placeholders(text: str, arguments: Mapping[str, Any]) -> str:
    """Replace ``{name}`` placeholders with argument values.

    Unknown placeholders are left unchanged.
    """

    def replacer(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in arguments:
            return str(arguments[name])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(replacer, text)


def _matching_brace(text: str, start: int) -> int:
    """Find the brace closing a block whose body begins at ``start``.

    Returns:
        Index of the closing brace, or -1 if braces never balance.
    """
    depth = 1
    for index in range(start, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return -1
