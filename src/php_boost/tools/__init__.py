"""Tool contract, result envelope, registry and built-in tools."""

from php_boost.tools.base import Tool, ToolArgumentError, ToolDefinition, ToolExecutionError
from php_boost.tools.registrar import CORE_TOOLS, ToolRegistrar
from php_boost.tools.registry import ToolNotFoundError, ToolRegistry
from php_boost.tools.result import ResultStatus, ToolResult

__all__ = [
    "CORE_TOOLS",
    "ResultStatus",
    "Tool",
    "ToolArgumentError",
    "ToolDefinition",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ToolRegistrar",
    "ToolRegistry",
    "ToolResult",
]
