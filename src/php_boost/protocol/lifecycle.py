"""MCP lifecycle management.

Handles the initialize handshake and tracks connection state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from php_boost import __version__
from php_boost.protocol.jsonrpc import INTERNAL_ERROR, JsonRpcError

# Protocol revision advertised in the initialize result
MCP_PROTOCOL_VERSION = "2024-11-05"


class LifecycleState(Enum):
    """MCP connection lifecycle states."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"


class LifecycleError(JsonRpcError):
    """Raised when a method is called before the server is initialized."""

    def __init__(self, message: str = "Server not initialized") -> None:
        super().__init__(INTERNAL_ERROR, message)


@dataclass
class LifecycleManager:
    """Manages MCP connection lifecycle.

    The transition from UNINITIALIZED to READY happens on the first
    ``initialize`` request and is never undone for the life of the process.
    """

    server_info: dict[str, str] = field(
        default_factory=lambda: {"name": "php-boost", "version": __version__}
    )
    capabilities: dict[str, Any] = field(default_factory=lambda: {"tools": {}})
    state: LifecycleState = LifecycleState.UNINITIALIZED
    client_info: dict[str, Any] | None = None
    client_capabilities: dict[str, Any] | None = None

    @property
    def is_ready(self) -> bool:
        """Check if the connection is ready for operations."""
        return self.state == LifecycleState.READY

    @property
    def connected_client(self) -> dict[str, Any] | None:
        """Get information about the connected client.

        Returns:
            Client info dict with 'name' and 'version', or None if not initialized.
        """
        return self.client_info

    def require_ready(self) -> None:
        """Assert that the connection is ready.

        Raises:
            LifecycleError: If initialize has not been called yet.
        """
        if self.state != LifecycleState.READY:
            raise LifecycleError()

    def handle_initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle initialize request.

        Repeated calls are accepted and return the same result.

        Args:
            params: Initialize request parameters.

        Returns:
            Initialize response result.
        """
        client_info = params.get("clientInfo")
        if isinstance(client_info, dict):
            self.client_info = client_info

        client_capabilities = params.get("capabilities")
        if isinstance(client_capabilities, dict):
            self.client_capabilities = client_capabilities

        self.state = LifecycleState.READY

        return {
            "protocolVersion": MCP_PROTOCOL_VERSION,
            "capabilities": self.capabilities,
            "serverInfo": self.server_info,
        }
