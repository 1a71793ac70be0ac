"""GetConfig tool - reads configuration values by dotted key."""

from __future__ import annotations

from typing import Any

from php_boost.tools.base import Tool, ToolArgumentError
from php_boost.tools.result import ToolResult


class GetConfig(Tool):
    """Read configuration values using dot notation."""

    name = "GetConfig"
    description = 'Read configuration values using dot notation (e.g., "database.default")'
    input_schema = {
        "type": "object",
        "properties": {
            "key": {
                "type": "string",
                "description": "Configuration key using dot notation",
            },
            "default": {
                "type": "string",
                "description": "Default value if key not found",
            },
        },
        "required": ["key"],
    }

    def execute(self, arguments: dict[str, Any]) -> ToolResult:
        self.validate_arguments(arguments)

        key = arguments["key"]
        if not isinstance(key, str) or not key.strip():
            raise ToolArgumentError("Argument 'key' must be a non-empty string")

        default = arguments.get("default")
        value = self.get_config(key)
        source = "config"
        if value is None:
            value = default
            source = "default"

        if value is None:
            return ToolResult.warning(
                self.name,
                f"Configuration key '{key}' not found",
                data={"key": key, "value": None},
                meta={"source": "missing"},
            )

        return ToolResult.success(
            self.name,
            f"Configuration key '{key}' resolved",
            data={"key": key, "value": value},
            meta={"source": source},
        )
