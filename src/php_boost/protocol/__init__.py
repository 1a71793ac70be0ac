"""MCP Protocol layer for JSON-RPC communication."""

from php_boost.protocol.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
    Message,
    ProtocolError,
    Response,
    decode,
    encode,
)
from php_boost.protocol.lifecycle import (
    MCP_PROTOCOL_VERSION,
    LifecycleError,
    LifecycleManager,
    LifecycleState,
)
from php_boost.protocol.tools import ToolsCallResult, ToolsHandler, ToolsListResult
from php_boost.protocol.transport import StdioTransport, Transport, TransportError

__all__ = [
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "JsonRpcError",
    "LifecycleError",
    "LifecycleManager",
    "LifecycleState",
    "MCP_PROTOCOL_VERSION",
    "METHOD_NOT_FOUND",
    "Message",
    "PARSE_ERROR",
    "ProtocolError",
    "Response",
    "StdioTransport",
    "ToolsCallResult",
    "ToolsHandler",
    "ToolsListResult",
    "Transport",
    "TransportError",
    "decode",
    "encode",
]
