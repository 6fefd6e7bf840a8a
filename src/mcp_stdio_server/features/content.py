"""Content payloads exchanged in tool and prompt results.

The content set is closed: ``TextContent``, ``ImageContent`` and
``EmbeddedResource``. Conversion to and from the wire format matches on the
concrete variant.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any


@dataclass
class TextResourceContents:
    """Text contents of a resource."""

    uri: str
    text: str
    mime_type: str | None = None


@dataclass
class BlobResourceContents:
    """Binary contents of a resource."""

    uri: str
    blob: bytes
    mime_type: str | None = None


ResourceContents = TextResourceContents | BlobResourceContents


@dataclass
class TextContent:
    """Text-based content."""

    text: str
    annotations: dict[str, Any] = field(default_factory=dict)

    type = "text"


@dataclass
class ImageContent:
    """Image content holding raw bytes."""

    data: bytes
    mime_type: str
    annotations: dict[str, Any] = field(default_factory=dict)

    type = "image"


@dataclass
class EmbeddedResource:
    """Resource contents embedded in a message."""

    resource: ResourceContents
    annotations: dict[str, Any] = field(default_factory=dict)

    type = "resource"


Content = TextContent | ImageContent | EmbeddedResource


def is_content(value: Any) -> bool:
    """Check whether a value is one of the content variants."""
    return isinstance(value, Content)


def resource_contents_to_dict(contents: ResourceContents) -> dict[str, Any]:
    """Convert resource contents to MCP format.

    Args:
        contents: Text or blob resource contents.

    Returns:
        Dictionary with ``uri``, ``text`` or ``blob``, and ``mimeType`` if set.
    """
    match contents:
        case TextResourceContents(uri=uri, text=text):
            result: dict[str, Any] = {"uri": uri, "text": text}
        case BlobResourceContents(uri=uri, blob=blob):
            result = {"uri": uri, "blob": base64.b64encode(blob).decode("ascii")}
        case _:
            raise TypeError(f"Unsupported resource contents: {type(contents).__name__}")

    if contents.mime_type is not None:
        result["mimeType"] = contents.mime_type
    return result


def resource_contents_from_dict(data: dict[str, Any]) -> ResourceContents:
    """Build resource contents from MCP format.

    Raises:
        ValueError: If neither ``text`` nor ``blob`` is present.
    """
    uri = data.get("uri", "")
    mime_type = data.get("mimeType")
    if "text" in data:
        return TextResourceContents(uri=uri, text=data["text"], mime_type=mime_type)
    if "blob" in data:
        return BlobResourceContents(
            uri=uri, blob=base64.b64decode(data["blob"]), mime_type=mime_type
        )
    raise ValueError("Resource contents need 'text' or 'blob'")


def content_to_dict(content: Content) -> dict[str, Any]:
    """Convert a content item to MCP format.

    Args:
        content: Content item to convert.

    Returns:
        Dictionary in MCP content format.

    Raises:
        TypeError: If the value is not a content variant.
    """
    match content:
        case TextContent(text=text, annotations=annotations):
            return {"type": "text", "text": text, "annotations": annotations}
        case ImageContent(data=data, mime_type=mime_type, annotations=annotations):
            return {
                "type": "image",
                "data": base64.b64encode(data).decode("ascii"),
                "mimeType": mime_type,
                "annotations": annotations,
            }
        case EmbeddedResource(resource=resource, annotations=annotations):
            return {
                "type": "resource",
                "resource": resource_contents_to_dict(resource),
                "annotations": annotations,
            }
        case _:
            raise TypeError(f"Unsupported content type: {type(content).__name__}")


def content_from_dict(data: dict[str, Any]) -> Content:
    """Build a content item from MCP format.

    Raises:
        ValueError: If the content type tag is unknown.
    """
    annotations = data.get("annotations") or {}
    match data.get("type"):
        case "text":
            return TextContent(text=data.get("text", ""), annotations=annotations)
        case "image":
            return ImageContent(
                data=base64.b64decode(data.get("data", "")),
                mime_type=data.get("mimeType", ""),
                annotations=annotations,
            )
        case "resource":
            return EmbeddedResource(
                resource=resource_contents_from_dict(data.get("resource") or {}),
                annotations=annotations,
            )
        case other:
            raise ValueError(f"Unknown content type: {other!r}")
