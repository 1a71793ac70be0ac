"""JSON-RPC 2.0 message decoding and encoding.

Implements the subset of JSON-RPC 2.0 the MCP server needs: it decodes
requests and notifications sent by the peer and encodes the responses it
sends back.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

JSONRPC_VERSION = "2.0"

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Maximum message size (1 MB)
MAX_MESSAGE_SIZE = 1_048_576

MessageId = int | str | None


class JsonRpcError(Exception):
    """JSON-RPC error with code and message."""

    def __init__(self, code: int, message: str, data: Any | None = None) -> None:
        """Initialize the error.

        Args:
            code: JSON-RPC error code.
            message: Human-readable error message.
            data: Optional additional error data.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


class ProtocolError(JsonRpcError):
    """Raised when an incoming line cannot be decoded into a message.

    Carries the request id when one could still be recovered from the
    payload, so the server can answer it.
    """

    def __init__(
        self,
        code: int,
        message: str,
        msg_id: MessageId = None,
        data: Any | None = None,
    ) -> None:
        super().__init__(code, message, data)
        self.msg_id = msg_id


@dataclass
class Message:
    """A decoded JSON-RPC envelope.

    A request has a method and a non-null id, a notification has a method
    and no id, a response has ``result`` or ``error`` and no method.
    """

    id: MessageId = None
    method: str | None = None
    params: dict[str, Any] | list[Any] = field(default_factory=dict)
    result: Any | None = None
    error: dict[str, Any] | None = None
    jsonrpc: str | None = JSONRPC_VERSION

    @property
    def is_request(self) -> bool:
        return self.method is not None and self.id is not None

    @property
    def is_notification(self) -> bool:
        return self.method is not None and self.id is None

    @property
    def is_response(self) -> bool:
        return self.method is None and ((self.result is not None) != (self.error is not None))


@dataclass
class ErrorObject:
    """The ``error`` member of a JSON-RPC error response."""

    code: int
    message: str
    data: Any | None = None

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


@dataclass
class Response:
    """An outgoing JSON-RPC response carrying exactly one of result or error."""

    id: MessageId
    result: Any | None = None
    error: ErrorObject | None = None

    @classmethod
    def success(cls, msg_id: MessageId, result: Any) -> Response:
        """Build a success response.

        Args:
            msg_id: Request ID to echo back.
            result: Result payload.

        Returns:
            Response with ``result`` set.
        """
        return cls(id=msg_id, result=result)

    @classmethod
    def failure(
        cls,
        msg_id: MessageId,
        code: int,
        message: str,
        data: Any | None = None,
    ) -> Response:
        """Build an error response.

        Args:
            msg_id: Request ID (or None when it could not be recovered).
            code: Error code.
            message: Error message.
            data: Optional error data.

        Returns:
            Response with ``error`` set.
        """
        return cls(id=msg_id, error=ErrorObject(code=code, message=message, data=data))

    @classmethod
    def from_error(cls, msg_id: MessageId, error: JsonRpcError) -> Response:
        """Build an error response from a raised JsonRpcError."""
        return cls.failure(msg_id, error.code, error.message, error.data)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire representation.

        Returns:
            Dictionary with ``jsonrpc``, ``id`` and one of ``result``/``error``.
        """
        payload: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.to_dict()
        else:
            # A null result is still a success response
            payload["result"] = {} if self.result is None else self.result
        return payload


def _recover_id(data: dict[str, Any]) -> MessageId:
    msg_id = data.get("id")
    if isinstance(msg_id, bool) or not isinstance(msg_id, int | str):
        return None
    return msg_id


def decode(raw: str) -> Message:
    """Decode a JSON-RPC message from a string.

    The ``jsonrpc`` member is not enforced so that lenient clients still
    work; ``id``, ``method`` and ``params`` are extracted permissively.

    Args:
        raw: Raw JSON string (one line).

    Returns:
        Decoded message.

    Raises:
        ProtocolError: If the text is not JSON, not an object, or has an
            unusable ``method``/``id`` member.
    """
    # Check message size before parsing
    size = len(raw.encode("utf-8", errors="surrogatepass"))
    if size > MAX_MESSAGE_SIZE:
        raise ProtocolError(
            PARSE_ERROR, f"Message too large: {size} bytes exceeds {MAX_MESSAGE_SIZE} limit"
        )

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ProtocolError(PARSE_ERROR, "malformed JSON", data={"detail": str(e)}) from e

    if not isinstance(data, dict):
        raise ProtocolError(INVALID_REQUEST, "not a JSON object")

    msg_id = _recover_id(data)
    if "id" in data and data["id"] is not None and msg_id is None:
        raise ProtocolError(INVALID_REQUEST, "Invalid Request: id must be integer or string")

    method = data.get("method")
    if method is not None and not isinstance(method, str):
        raise ProtocolError(INVALID_REQUEST, "Invalid Request: method must be a string", msg_id)

    params = data.get("params")
    if params is None:
        params = {}
    elif not isinstance(params, dict | list):
        raise ProtocolError(
            INVALID_REQUEST, "Invalid Request: params must be an object or array", msg_id
        )

    error = data.get("error")
    if error is not None and not isinstance(error, dict):
        error = {"code": INTERNAL_ERROR, "message": str(error)}

    return Message(
        id=msg_id,
        method=method,
        params=params,
        result=data.get("result"),
        error=error,
        jsonrpc=data.get("jsonrpc"),
    )


def encode(response: Response) -> str:
    """Encode a response as a single line of JSON.

    Args:
        response: Response to encode.

    Returns:
        JSON string without embedded newlines.
    """
    return json.dumps(response.to_dict(), ensure_ascii=False, separators=(",", ":"))
