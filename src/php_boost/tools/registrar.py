"""Wiring of the built-in tools into a registry."""

from __future__ import annotations

from typing import Any

from php_boost.tools.base import Tool
from php_boost.tools.database import DatabaseQuery, DatabaseSchema, TableDDL
from php_boost.tools.get_config import GetConfig
from php_boost.tools.read_log_entries import ReadLogEntries
from php_boost.tools.registry import ToolRegistry

CORE_TOOLS: tuple[type[Tool], ...] = (
    GetConfig,
    DatabaseSchema,
    DatabaseQuery,
    ReadLogEntries,
    TableDDL,
)


class ToolRegistrar:
    """Registers the built-in tools."""

    @staticmethod
    def register_core_tools(
        registry: ToolRegistry,
        config: dict[str, Any],
        enabled: list[str] | None = None,
    ) -> list[str]:
        """Instantiate and register every core tool.

        Args:
            registry: Registry to fill.
            config: Configuration map handed to each tool.
            enabled: Tool names to keep; all core tools when empty.

        Returns:
            Names of the tools that were registered.
        """
        registered = []
        for tool_class in CORE_TOOLS:
            if enabled and tool_class.name not in enabled:
                continue
            registry.register(tool_class(config))
            registered.append(tool_class.name)
        return registered
