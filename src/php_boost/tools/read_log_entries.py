"""ReadLogEntries tool - tails the application log."""

from __future__ import annotations

import os
from collections import deque
from pathlib import Path
from typing import Any

from php_boost.tools.base import Tool, ToolArgumentError, ToolExecutionError
from php_boost.tools.result import ToolResult

DEFAULT_LINES = 50
MAX_LINES = 5000


class ReadLogEntries(Tool):
    """Read the last N non-empty lines of a log file."""

    name = "ReadLogEntries"
    description = "Read the last N entries from application logs"
    input_schema = {
        "type": "object",
        "properties": {
            "lines": {
                "type": "integer",
                "description": "Number of lines to read from the end of the log",
                "default": DEFAULT_LINES,
            },
            "file": {
                "type": "string",
                "description": "Log file path (optional, uses default if not provided)",
            },
        },
    }

    def execute(self, arguments: dict[str, Any]) -> ToolResult:
        self.validate_arguments(arguments)
        lines = self.int_argument(arguments, "lines", DEFAULT_LINES)
        if lines < 1 or lines > MAX_LINES:
            raise ToolArgumentError(f"Argument 'lines' must be between 1 and {MAX_LINES}")

        file = arguments.get("file") or self.get_config("log_path")
        if not file:
            raise ToolExecutionError("Log file path not configured")

        path = Path(str(file))
        if not path.is_absolute():
            path = Path(self.resolve_base_path({})) / path

        if not path.exists():
            return ToolResult.warning(
                self.name,
                "Log file does not exist",
                data={"file": str(path), "entries": [], "count": 0},
            )

        if not path.is_file() or not os.access(path, os.R_OK):
            raise ToolExecutionError(f"Log file is not readable: {path}")

        entries = self._tail(path, lines)
        return ToolResult.success(
            self.name,
            f"Read {len(entries)} log entries",
            data={"file": str(path), "entries": entries, "count": len(entries)},
            meta={"requested_lines": lines},
        )

    @staticmethod
    def _tail(path: Path, lines: int) -> list[str]:
        buffer: deque[str] = deque(maxlen=lines)
        with open(path, encoding="utf-8", errors="replace") as f:
            for line in f:
                line = line.rstrip()
                if line.strip():
                    buffer.append(line)
        return list(buffer)
