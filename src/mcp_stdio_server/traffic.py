"""Traffic logging for the stdio connection.

Every line read from or written to the client can be appended to a JSON
Lines file for later inspection. Records look like::

    {"type": "request", "timestamp": "2025-01-01T00:00:00Z", "message": {...}}

``tools/call`` arguments whose keys look like credentials are replaced with
``[REDACTED]`` before anything reaches the disk.
"""

from __future__ import annotations

import json
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

REDACTED = "[REDACTED]"

# Argument keys whose values never reach the log
SENSITIVE_KEY_PATTERN = re.compile(
    r"password|secret|api[_-]?key|token|auth|credential|private[_-]?key",
    re.IGNORECASE,
)


def _redact(arguments: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``arguments`` with sensitive values replaced.

    Nested mappings are redacted recursively.
    """
    redacted: dict[str, Any] = {}
    for key, value in arguments.items():
        if SENSITIVE_KEY_PATTERN.search(key):
            redacted[key] = REDACTED
        elif isinstance(value, dict):
            redacted[key] = _redact(value)
        else:
            redacted[key] = value
    return redacted


def _decode_for_log(raw: str) -> Any:
    """Decode a raw line, redacting tool call arguments.

    Lines that are not JSON are logged as the raw string.
    """
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        return raw

    if isinstance(message, dict):
        params = message.get("params")
        if isinstance(params, dict) and isinstance(params.get("arguments"), dict):
            message["params"] = {**params, "arguments": _redact(params["arguments"])}
    return message


class TrafficLogger:
    """Append-only JSON Lines log of protocol traffic.

    The file is flushed after every record so a crash loses nothing that was
    already exchanged.
    """

    def __init__(self, log_path: Path) -> None:
        """Open (or create) the log file.

        Args:
            log_path: Destination file. Missing parent directories are created.
        """
        log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(log_path, "a", encoding="utf-8")  # noqa: SIM115

    def record(self, kind: str, raw: str) -> None:
        """Append one record.

        Args:
            kind: ``request``, ``response`` or ``error``.
            raw: The line as it crossed the wire.
        """
        entry = {
            "type": kind,
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "message": _decode_for_log(raw),
        }
        self._file.write(json.dumps(entry) + "\n")
        self._file.flush()

    def log_request(self, raw: str) -> None:
        self.record("request", raw)

    def log_response(self, raw: str) -> None:
        self.record("response", raw)

    def log_error(self, raw: str) -> None:
        """Log a fallback error written after a processing failure."""
        self.record("error", raw)

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    def __enter__(self) -> TrafficLogger:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
