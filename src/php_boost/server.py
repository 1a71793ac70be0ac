"""MCP Server - message loop and method dispatch.

Integrates the codec, lifecycle, and tool handling into a complete MCP
server.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

from php_boost.audit import AuditLogger
from php_boost.config import BoostConfig
from php_boost.protocol.jsonrpc import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    JsonRpcError,
    Message,
    ProtocolError,
    Response,
    decode,
    encode,
)
from php_boost.protocol.lifecycle import LifecycleManager
from php_boost.protocol.tools import ToolsHandler
from php_boost.protocol.transport import Transport
from php_boost.tools.base import Tool
from php_boost.tools.registry import ToolRegistry


class Method(str, Enum):
    """Request methods the server understands."""

    INITIALIZE = "initialize"
    PING = "ping"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"

    @classmethod
    def resolve(cls, name: str) -> Method | None:
        try:
            return cls(name)
        except ValueError:
            return None


# Methods that may be called before initialize
UNGATED_METHODS = frozenset({Method.INITIALIZE, Method.PING})


class MCPServer:
    """MCP Server implementation.

    Provides a complete MCP server that handles:
    - Lifecycle management (initialize)
    - Tool listing and execution
    - The blocking read/dispatch/write loop over a transport

    One request is processed end to end before the next one is read, so
    responses leave in the order requests arrived.
    """

    def __init__(
        self,
        config: BoostConfig | None = None,
        registry: ToolRegistry | None = None,
    ) -> None:
        """Initialize the server.

        Args:
            config: Server configuration; an empty configuration by default.
            registry: Tool registry; a new empty registry by default.
        """
        self._config = config or BoostConfig()
        self._registry = registry if registry is not None else ToolRegistry()
        self._lifecycle = LifecycleManager(
            server_info={"name": self._config.server_name, "version": self._config.server_version}
        )

        self._audit: AuditLogger | None = None
        if self._config.audit_log_file:
            self._audit = AuditLogger(
                Path(self._config.audit_log_file), on_error=lambda message: self._log(message)
            )

        self._tools_handler = ToolsHandler(
            self._registry,
            timeout=self._config.tool_timeout,
            audit=self._audit,
        )
        self._log: Callable[[str], None] = lambda message: None

        self._handlers: dict[Method, Callable[[Message], Any]] = {
            Method.INITIALIZE: self._handle_initialize,
            Method.PING: self._handle_ping,
            Method.TOOLS_LIST: self._handle_tools_list,
            Method.TOOLS_CALL: self._handle_tools_call,
        }

    @property
    def config(self) -> BoostConfig:
        return self._config

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def is_initialized(self) -> bool:
        return self._lifecycle.is_ready

    @property
    def lifecycle(self) -> LifecycleManager:
        return self._lifecycle

    def register_tool(self, tool: Tool) -> None:
        """Register a tool.

        Args:
            tool: Tool to register.
        """
        self._registry.register(tool)

    def list_tools(self) -> list[dict[str, Any]]:
        """List all registered tools.

        Returns:
            List of tool definitions.
        """
        return self._registry.list_tools()

    def serve(self, transport: Transport) -> None:
        """Run the message loop until the transport reaches end of stream.

        Args:
            transport: Transport to read requests from and write responses to.

        Raises:
            TransportError: If a response cannot be written.
        """
        self._log = transport.log
        self._log(f"Serving {len(self._registry)} tools")

        while True:
            raw = transport.read_message()
            if raw is None:
                self._log("EOF received, shutting down")
                break

            response = self.handle_message(raw)
            if response is not None:
                transport.write_message(response)

    def handle_message(self, raw_message: str) -> str | None:
        """Handle an incoming JSON-RPC message.

        Undecodable lines are answered with an error response whose id is
        the recovered request id, or null when none could be recovered.

        Args:
            raw_message: Raw JSON-RPC message string.

        Returns:
            Response string or None when nothing should be sent.
        """
        try:
            message = decode(raw_message)
        except ProtocolError as e:
            self._log(f"Rejected message: {e.message}")
            return encode(Response.from_error(e.msg_id, e))

        response = self.dispatch(message)
        if response is None:
            return None
        return encode(response)

    def dispatch(self, message: Message) -> Response | None:
        """Route a decoded message to its handler.

        Args:
            message: Decoded message.

        Returns:
            Response to send, or None for notifications and stray responses.
        """
        if message.is_notification:
            return None

        if message.is_response:
            # The server never sends requests, so there is nothing to match
            return None

        if message.method is None:
            return Response.failure(message.id, INVALID_REQUEST, "Invalid Request: missing method")

        method = Method.resolve(message.method)
        if method is None:
            return Response.failure(
                message.id, METHOD_NOT_FOUND, f"Method '{message.method}' not found"
            )

        try:
            if method not in UNGATED_METHODS:
                self._lifecycle.require_ready()
            result = self._handlers[method](message)
        except JsonRpcError as e:
            return Response.from_error(message.id, e)

        return Response.success(message.id, result)

    def _handle_initialize(self, message: Message) -> dict[str, Any]:
        params = message.params if isinstance(message.params, dict) else {}
        result = self._lifecycle.handle_initialize(params)
        client = self._lifecycle.connected_client or {}
        self._log(f"Initialized by {client.get('name', 'unknown client')}")
        return result

    def _handle_ping(self, message: Message) -> dict[str, Any]:
        return {}

    def _handle_tools_list(self, message: Message) -> dict[str, Any]:
        return self._tools_handler.handle_list().to_dict()

    def _handle_tools_call(self, message: Message) -> dict[str, Any]:
        if not isinstance(message.params, dict):
            raise JsonRpcError(INVALID_PARAMS, "tools/call params must be an object")
        try:
            return self._tools_handler.handle_call(message.params, message.id).to_dict()
        except JsonRpcError as e:
            self._log(f"tools/call {message.params.get('name')!r} failed: {e.message}")
            raise

    def close(self) -> None:
        """Close the server and clean up resources."""
        self._registry.cleanup()
        if self._audit is not None:
            self._audit.close()

    def __enter__(self) -> MCPServer:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()
