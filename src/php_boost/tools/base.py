"""Tool base class and descriptor.

Defines the interface that all tools must implement.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from php_boost.tools.result import ToolResult


class ToolArgumentError(ValueError):
    """Raised by a tool when its arguments are missing or invalid."""

    pass


class ToolExecutionError(Exception):
    """Raised by a tool when it cannot produce a result."""

    pass


@dataclass(frozen=True)
class ToolDefinition:
    """Static metadata describing a registered tool."""

    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=lambda: {"type": "object"})
    read_only: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP tool format.

        Returns:
            Dictionary in MCP tools/list format.
        """
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class Tool(ABC):
    """Abstract base class for all tools.

    Tools receive the server configuration map at construction time and
    are otherwise free to do any I/O inside ``execute``.

    Example:
        class Echo(Tool):
            name = "Echo"
            description = "Echoes the message argument"
            input_schema = {
                "type": "object",
                "properties": {"message": {"type": "string"}},
                "required": ["message"],
            }

            def execute(self, arguments):
                self.require_arguments(arguments, "message")
                return ToolResult.success(self.name, arguments["message"])
    """

    name: str = ""
    description: str = ""
    input_schema: dict[str, Any] = {"type": "object"}
    read_only: bool = True

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        """Initialize the tool.

        Args:
            config: Server configuration map, passed through unmodified.
        """
        self.config: dict[str, Any] = config if config is not None else {}

    @abstractmethod
    def execute(self, arguments: dict[str, Any]) -> ToolResult:
        """Execute the tool.

        Args:
            arguments: Tool arguments from the tools/call request.

        Returns:
            ToolResult describing the outcome.

        Raises:
            ToolArgumentError: If the arguments are invalid.
            ToolExecutionError: If the tool cannot run.
        """

    @property
    def definition(self) -> ToolDefinition:
        """Return the descriptor of this tool."""
        return ToolDefinition(
            name=self.name,
            description=self.description,
            input_schema=self.input_schema,
            read_only=self.read_only,
        )

    def cleanup(self) -> None:
        """Release resources held by the tool."""

    def require_arguments(self, arguments: dict[str, Any], *required: str) -> None:
        """Check that every required argument is present.

        Raises:
            ToolArgumentError: Naming the first missing argument.
        """
        for key in required:
            if arguments.get(key) is None:
                raise ToolArgumentError(f"Missing required argument: {key}")

    def validate_arguments(self, arguments: dict[str, Any]) -> None:
        """Validate arguments against this tool's input schema.

        The server never calls this; tools that want their schema enforced
        call it at the top of ``execute``.

        Raises:
            ToolArgumentError: Describing the first schema violation.
            ToolExecutionError: If the schema itself is invalid.
        """
        try:
            Draft202012Validator.check_schema(self.input_schema)
            validator = Draft202012Validator(self.input_schema)
            errors = list(validator.iter_errors(arguments))
        except SchemaError as e:
            raise ToolExecutionError(f"Invalid schema for tool {self.name}: {e.message}") from e
        if errors:
            error = errors[0]
            path = ".".join(str(p) for p in error.path) if error.path else "root"
            raise ToolArgumentError(f"Schema validation failed at '{path}': {error.message}")

    def int_argument(self, arguments: dict[str, Any], key: str, default: int) -> int:
        """Read an integer argument, accepting numeric strings."""
        value = arguments.get(key, default)
        if value is None:
            return default
        if isinstance(value, bool):
            raise ToolArgumentError(f"Argument '{key}' must be an integer")
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ToolArgumentError(f"Argument '{key}' must be an integer") from e

    def get_config(self, key: str, default: Any = None) -> Any:
        """Look up a configuration value using dot notation.

        Args:
            key: Dotted path such as ``database.driver``.
            default: Value returned when any segment is missing.
        """
        value: Any = self.config
        for part in key.split("."):
            if not isinstance(value, dict) or value.get(part) is None:
                return default
            value = value[part]
        return value

    def resolve_base_path(
        self,
        arguments: dict[str, Any],
        argument_keys: tuple[str, ...] = ("base_path", "path"),
    ) -> str:
        """Resolve the project root from arguments, config, or the cwd."""
        for key in argument_keys:
            value = arguments.get(key)
            if isinstance(value, str) and value.strip():
                return value.rstrip("/") or "/"

        configured = self.config.get("base_path")
        if isinstance(configured, str) and configured.strip():
            return configured.rstrip("/") or "/"

        return os.getcwd()
