"""MCP tools/list and tools/call handlers.

Handles tool-related MCP requests, looking tools up in the registry and
turning their results (or faults) into protocol payloads.
"""

from __future__ import annotations

import json
import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from php_boost.protocol.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    JsonRpcError,
)
from php_boost.tools.base import Tool, ToolArgumentError, ToolExecutionError
from php_boost.tools.registry import ToolNotFoundError, ToolRegistry
from php_boost.tools.result import ToolResult

if TYPE_CHECKING:
    from php_boost.audit import AuditLogger


class ToolTimeoutError(Exception):
    """Raised when a tool call exceeds its deadline."""

    pass


@dataclass
class ToolsListResult:
    """Result of tools/list request."""

    tools: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP result format.

        Returns:
            Dictionary in MCP tools/list result format.
        """
        return {"tools": self.tools}


@dataclass
class ToolsCallResult:
    """Result of tools/call request."""

    content: list[dict[str, Any]]
    structured: dict[str, Any]
    is_error: bool = False

    @classmethod
    def from_tool_result(cls, result: ToolResult) -> ToolsCallResult:
        """Render a ToolResult as a text block plus its structured form."""
        text = result.to_json()
        return cls(
            content=[{"type": "text", "text": text}],
            structured=json.loads(text),
            is_error=result.is_error,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP result format.

        Returns:
            Dictionary in MCP tools/call result format.
        """
        return {
            "content": self.content,
            "structuredContent": self.structured,
            "isError": self.is_error,
        }


def _classify(exc: BaseException) -> str:
    if isinstance(exc, ToolTimeoutError):
        return "timeout"
    if isinstance(exc, ToolArgumentError):
        return "validation"
    return "execution"


class ToolsHandler:
    """Handles tools/list and tools/call MCP requests.

    This is the one place where exceptions raised by tools are caught.
    Faults are re-raised as JsonRpcError so the server answers with an
    error response and keeps running.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        timeout: float = 0,
        audit: AuditLogger | None = None,
    ) -> None:
        """Initialize the handler.

        Args:
            registry: Registry to look tools up in.
            timeout: Per-call deadline in seconds, 0 to run tools inline.
            audit: Optional audit logger for tool calls.
        """
        self._registry = registry
        self._timeout = timeout
        self._audit = audit

    def handle_list(self) -> ToolsListResult:
        """Handle tools/list request.

        Returns:
            ToolsListResult with all available tools.
        """
        return ToolsListResult(tools=self._registry.list_tools())

    def handle_call(self, params: dict[str, Any], request_id: Any = None) -> ToolsCallResult:
        """Handle tools/call request.

        Args:
            params: Request params holding ``name`` and ``arguments``.
            request_id: JSON-RPC id, used to correlate audit records.

        Returns:
            ToolsCallResult with execution result.

        Raises:
            JsonRpcError: INVALID_PARAMS for a missing name, METHOD_NOT_FOUND
                for an unknown tool, INTERNAL_ERROR when the tool raises.
        """
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise JsonRpcError(INVALID_PARAMS, "Tool name is required")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}

        audit_id = str(request_id)
        if self._audit is not None:
            self._audit.log_request(
                audit_id, name, arguments if isinstance(arguments, dict) else {}
            )

        # An unknown name wins over every other problem with the call
        try:
            tool = self._registry.require(name)
        except ToolNotFoundError as e:
            self._log_response(audit_id, "not_found", 0.0)
            raise JsonRpcError(METHOD_NOT_FOUND, str(e)) from e

        if not isinstance(arguments, dict):
            self._log_response(audit_id, "invalid_params", 0.0)
            raise JsonRpcError(INVALID_PARAMS, "Tool arguments must be an object")

        start = time.perf_counter()
        try:
            result = self._execute(tool, arguments)
            if not isinstance(result, ToolResult):
                raise ToolExecutionError(
                    f"Tool '{name}' returned {type(result).__name__} instead of ToolResult"
                )
            call_result = ToolsCallResult.from_tool_result(result)
        except Exception as e:
            kind = _classify(e)
            self._log_response(audit_id, "timeout" if kind == "timeout" else "fault", start)
            envelope = ToolResult.from_exception(name, e, kind)
            raise JsonRpcError(
                INTERNAL_ERROR,
                envelope.summary,
                data={
                    "kind": kind,
                    "exception": type(e).__name__,
                    "result": json.loads(envelope.to_json()),
                },
            ) from e

        self._log_response(audit_id, result.status.value, start)
        return call_result

    def _execute(self, tool: Tool, arguments: dict[str, Any]) -> ToolResult:
        if not self._timeout or self._timeout <= 0:
            return tool.execute(arguments)

        # A daemon thread lets the loop move on even if the tool never returns
        future: Future[ToolResult] = Future()

        def run() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(tool.execute(arguments))
            except BaseException as e:  # noqa: BLE001
                future.set_exception(e)

        worker = threading.Thread(target=run, name=f"tool-{tool.name}", daemon=True)
        worker.start()
        try:
            return future.result(timeout=self._timeout)
        except FutureTimeoutError as e:
            raise ToolTimeoutError(
                f"Tool '{tool.name}' timed out after {self._timeout:g} seconds"
            ) from e

    def _log_response(self, request_id: str, status: str, start: float) -> None:
        if self._audit is None:
            return
        duration_ms = round((time.perf_counter() - start) * 1000, 2) if start else 0.0
        self._audit.log_response(request_id, status, duration_ms)
