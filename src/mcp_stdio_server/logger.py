"""Diagnostic logging to stderr.

Stdout carries protocol traffic, so all diagnostics go to stderr. Each record
is one JSON line shaped like an MCP ``notifications/message`` so clients that
capture stderr can parse it.
"""

from __future__ import annotations

import sys
from datetime import UTC, datetime
from typing import Any, TextIO

from mcp_stdio_server.protocol.jsonrpc import format_notification

LOG_LEVELS = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "error": 40,
}


def _get_timestamp() -> str:
    """Get current UTC timestamp in ISO 8601 format."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


class StderrLogger:
    """Leveled logger writing MCP-shaped log lines."""

    def __init__(self, stream: TextIO | None = None, level: str = "info") -> None:
        """Initialize the logger.

        Args:
            stream: Output stream (defaults to sys.stderr).
            level: Minimum level to write.

        Raises:
            ValueError: If the level is unknown.
        """
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        self._stream = stream
        self._min_level = LOG_LEVELS[level]

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so tests capturing sys.stderr see our output
        return self._stream or sys.stderr

    def is_enabled(self, level: str) -> bool:
        return LOG_LEVELS[level] >= self._min_level

    def log(self, level: str, message: str, **context: Any) -> None:
        """Write a log record.

        Args:
            level: One of debug, info, warning, error.
            message: Log message.
            **context: Extra values recorded as strings under metadata.context.
        """
        if not self.is_enabled(level):
            return

        data: dict[str, Any] = {
            "message": message,
            "timestamp": _get_timestamp(),
            "metadata": {},
        }
        if context:
            data["metadata"]["context"] = {key: str(value) for key, value in context.items()}

        line = format_notification("notifications/message", {"level": level, "data": data})
        self.stream.write(line + "\n")
        self.stream.flush()

    def debug(self, message: str, **context: Any) -> None:
        self.log("debug", message, **context)

    def info(self, message: str, **context: Any) -> None:
        self.log("info", message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self.log("warning", message, **context)

    def error(self, message: str, **context: Any) -> None:
        self.log("error", message, **context)
