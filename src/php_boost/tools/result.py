"""Uniform result envelope returned by every tool execution."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from php_boost import __version__


class ResultStatus(str, Enum):
    """Outcome of one tool invocation."""

    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


def _get_timestamp() -> str:
    """Get current UTC timestamp in ISO 8601 format."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass
class ToolResult:
    """Outcome of a tool invocation, independent of JSON-RPC framing.

    Invariants:
        - status is ERROR exactly when ``errors`` is non-empty
        - status WARNING requires ``warnings`` and no ``errors``

    Use the ``success``/``warning``/``error`` factories rather than the
    constructor; they fill the base ``meta`` and default the
    warning/error lists from the summary.
    """

    tool: str
    status: ResultStatus
    summary: str
    data: Any = field(default_factory=dict)
    meta: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)
    findings: list[dict[str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.status = ResultStatus(self.status)
        if self.status is ResultStatus.ERROR and not self.errors:
            raise ValueError("error status requires at least one error entry")
        if self.status is not ResultStatus.ERROR and self.errors:
            raise ValueError(f"{self.status.value} status cannot carry errors")
        if self.status is ResultStatus.WARNING and not self.warnings:
            raise ValueError("warning status requires at least one warning")

    @staticmethod
    def _base_meta(meta: dict[str, Any] | None) -> dict[str, Any]:
        return {"version": __version__, "generated_at": _get_timestamp(), **(meta or {})}

    @classmethod
    def success(
        cls,
        tool: str,
        summary: str,
        data: Any = None,
        meta: dict[str, Any] | None = None,
        findings: list[dict[str, Any]] | None = None,
    ) -> ToolResult:
        return cls(
            tool=tool,
            status=ResultStatus.OK,
            summary=summary,
            data={} if data is None else data,
            meta=cls._base_meta(meta),
            findings=list(findings or []),
        )

    @classmethod
    def warning(
        cls,
        tool: str,
        summary: str,
        data: Any = None,
        meta: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
        findings: list[dict[str, Any]] | None = None,
    ) -> ToolResult:
        return cls(
            tool=tool,
            status=ResultStatus.WARNING,
            summary=summary,
            data={} if data is None else data,
            meta=cls._base_meta(meta),
            warnings=list(warnings or [summary]),
            findings=list(findings or []),
        )

    @classmethod
    def error(
        cls,
        tool: str,
        summary: str,
        data: Any = None,
        meta: dict[str, Any] | None = None,
        errors: list[dict[str, Any]] | None = None,
        warnings: list[str] | None = None,
        findings: list[dict[str, Any]] | None = None,
    ) -> ToolResult:
        return cls(
            tool=tool,
            status=ResultStatus.ERROR,
            summary=summary,
            data={} if data is None else data,
            meta=cls._base_meta(meta),
            warnings=list(warnings or []),
            errors=list(errors or [{"code": "error", "message": summary}]),
            findings=list(findings or []),
        )

    @classmethod
    def from_exception(cls, tool: str, exc: BaseException, kind: str = "execution") -> ToolResult:
        """Wrap an uncaught fault into a minimal error envelope.

        Args:
            tool: Name of the tool that raised.
            exc: The exception.
            kind: Error class (validation, execution, timeout).

        Returns:
            ToolResult with status ERROR.
        """
        message = str(exc) or type(exc).__name__
        return cls.error(
            tool,
            message,
            errors=[{"code": kind, "message": message, "exception": type(exc).__name__}],
        )

    @staticmethod
    def finding(
        severity: str,
        code: str,
        message: str,
        evidence: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Build one finding entry."""
        return {
            "severity": severity,
            "code": code,
            "message": message,
            "evidence": evidence or {},
        }

    @property
    def is_error(self) -> bool:
        return self.status is ResultStatus.ERROR

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        result: dict[str, Any] = {
            "tool": self.tool,
            "status": self.status.value,
            "summary": self.summary,
            "data": self.data,
            "meta": self.meta,
            "warnings": self.warnings,
            "errors": self.errors,
        }
        if self.findings:
            result["findings"] = self.findings
        return result

    def to_json(self, indent: int | None = 2) -> str:
        """Render as JSON text."""
        return json.dumps(
            self.to_dict(), indent=indent, ensure_ascii=False, allow_nan=False, default=str
        )
