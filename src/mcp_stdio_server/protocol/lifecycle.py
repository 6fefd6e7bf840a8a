"""MCP lifecycle state.

Tracks the run loop and what the client told us during the
initialize/initialized handshake.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Supported MCP protocol versions (newest first)
SUPPORTED_PROTOCOL_VERSIONS = ["2025-03-26", "2024-11-05"]
# Version assumed when the client does not send one
MCP_PROTOCOL_VERSION = "2024-11-05"


class ServerError(Exception):
    """Raised when the server is started or stopped in the wrong state."""

    pass


@dataclass
class ServerState:
    """Runtime state of a server connection."""

    running: bool = False
    protocol_version: str | None = None
    client_info: dict[str, str] | None = None
    client_capabilities: dict[str, Any] | None = None

    @property
    def connected_client(self) -> dict[str, str] | None:
        """Get information about the connected client.

        Returns:
            Client info dict with 'name' and 'version', or None if not initialized.
        """
        return self.client_info

    @property
    def client_caps(self) -> dict[str, Any]:
        """Get the connected client's capabilities.

        Returns:
            Client capabilities dict, or empty dict if not initialized.
        """
        return self.client_capabilities or {}

    def record_client(
        self, protocol_version: str, client_info: dict[str, str], capabilities: dict[str, Any]
    ) -> None:
        """Remember what the client sent in its initialize request."""
        self.protocol_version = protocol_version
        self.client_info = client_info
        self.client_capabilities = capabilities
