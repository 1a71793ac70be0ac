"""Tool registry - maps tool names to tool instances."""

from __future__ import annotations

from typing import Any

from php_boost.tools.base import Tool, ToolDefinition


class ToolNotFoundError(KeyError):
    """Raised when a tool is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Tool not found: {self.name}"


class ToolRegistry:
    """Registry of tools keyed by name.

    Registering a second tool under an existing name replaces the first
    one. Enumeration follows registration order. The registry is filled
    during startup and only read once the server loop runs.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """Register a tool, replacing any tool with the same name.

        Args:
            tool: Tool instance to register.

        Raises:
            ValueError: If the tool has no name.
        """
        if not tool.name:
            raise ValueError(f"{type(tool).__name__} has no name")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool | None:
        """Look up a tool by name.

        Returns:
            The tool, or None if no tool is registered under that name.
        """
        return self._tools.get(name)

    def require(self, name: str) -> Tool:
        """Look up a tool by name.

        Raises:
            ToolNotFoundError: If the tool is not registered.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return tool

    def has(self, name: str) -> bool:
        return name in self._tools

    def all(self) -> list[Tool]:
        """Return all registered tools in registration order."""
        return list(self._tools.values())

    def names(self) -> list[str]:
        return list(self._tools)

    def definitions(self) -> list[ToolDefinition]:
        return [tool.definition for tool in self._tools.values()]

    def list_tools(self) -> list[dict[str, Any]]:
        """List all available tools in MCP format.

        Returns:
            List of tool definitions in MCP format.
        """
        return [definition.to_dict() for definition in self.definitions()]

    def cleanup(self) -> None:
        """Call cleanup() on every registered tool."""
        for tool in self._tools.values():
            tool.cleanup()

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools
