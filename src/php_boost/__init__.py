"""php-boost: MCP server exposing project tooling over stdio."""

__version__ = "1.0.0"
