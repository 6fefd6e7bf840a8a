"""Newline-delimited message framing over stdin/stdout.

Each protocol message occupies exactly one line. Blank lines between
messages are tolerated and skipped.
"""

from __future__ import annotations

import sys
from typing import TextIO


class MessageDecodeError(ValueError):
    """An input line was not valid UTF-8.

    Only that line is lost; the next read continues with the following one.
    """


class StdioTransport:
    """Reads and writes one JSON-RPC message per line.

    Only protocol messages pass through here; diagnostics belong on stderr.
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        """Initialize the transport.

        Args:
            stdin: Stream messages are read from (defaults to sys.stdin).
                When it exposes a binary ``buffer``, lines are read from
                that and decoded one at a time.
            stdout: Stream messages are written to (defaults to sys.stdout).
        """
        self._reader = stdin or sys.stdin
        self._binary = getattr(self._reader, "buffer", None)
        self._writer = stdout or sys.stdout

    def read_message(self) -> str | None:
        """Return the next non-blank line without surrounding whitespace.

        Returns:
            The message text, or None once the input is exhausted or closed.

        Raises:
            MessageDecodeError: If the next line is not valid UTF-8.
        """
        for line in iter(self._next_line, ""):
            message = line.strip()
            if message:
                return message
        return None

    def _next_line(self) -> str:
        try:
            if self._binary is None:
                return self._reader.readline()
            return self._binary.readline().decode("utf-8")
        except UnicodeDecodeError as e:
            raise MessageDecodeError(f"Invalid UTF-8 in input line: {e.reason}") from e
        except (OSError, ValueError):
            # A closed or broken input reads as end of stream
            return ""

    def write_message(self, message: str) -> None:
        """Send one message terminated by a newline and flush it."""
        self._writer.write(f"{message}\n")
        self._writer.flush()
