"""Tests for audit logging."""

import json
from pathlib import Path
from unittest.mock import MagicMock

from php_boost.audit import AuditLogger, sanitize_arguments


class TestSanitizeArguments:
    def test_redacts_sensitive_keys(self):
        sanitized = sanitize_arguments(
            {"query": "SELECT 1", "password": "p", "API_KEY": "k", "auth_token": "t"}
        )

        assert sanitized == {
            "query": "SELECT 1",
            "password": "[REDACTED]",
            "API_KEY": "[REDACTED]",
            "auth_token": "[REDACTED]",
        }

    def test_redacts_nested_values(self):
        sanitized = sanitize_arguments(
            {"connection": {"host": "db", "secret": "s"}, "items": [{"token": "t"}, "plain"]}
        )

        assert sanitized["connection"] == {"host": "db", "secret": "[REDACTED]"}
        assert sanitized["items"] == [{"token": "[REDACTED]"}, "plain"]

    def test_does_not_modify_input(self):
        arguments = {"password": "p"}

        sanitize_arguments(arguments)

        assert arguments == {"password": "p"}


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_creates_parent_directory(self, tmp_path: Path):
        log_path = tmp_path / "nested" / "dir" / "audit.log"

        with AuditLogger(log_path):
            pass

        assert log_path.exists()

    def test_writes_json_lines(self, tmp_path: Path):
        log_path = tmp_path / "audit.log"

        with AuditLogger(log_path) as logger:
            logger.log_request("1", "GetConfig", {"key": "app.name"})
            logger.log_response("1", "ok", 1.5)

        lines = log_path.read_text().splitlines()
        request = json.loads(lines[0])
        response = json.loads(lines[1])

        assert request["type"] == "request"
        assert request["tool_name"] == "GetConfig"
        assert request["arguments"] == {"key": "app.name"}
        assert request["timestamp"].endswith("Z")
        assert response == {
            "type": "response",
            "timestamp": response["timestamp"],
            "request_id": "1",
            "result_status": "ok",
            "execution_time_ms": 1.5,
        }

    def test_appends_to_existing_log(self, tmp_path: Path):
        log_path = tmp_path / "audit.log"
        log_path.write_text('{"type": "old"}\n')

        with AuditLogger(log_path) as logger:
            logger.log_response("2", "warning", 0.0)

        assert len(log_path.read_text().splitlines()) == 2

    def test_close_is_idempotent(self, tmp_path: Path):
        logger = AuditLogger(tmp_path / "audit.log")

        logger.close()
        logger.close()

    def test_write_failure_is_reported_not_raised(self, tmp_path: Path):
        """Should hand write errors to on_error and keep going."""
        messages: list[str] = []
        logger = AuditLogger(tmp_path / "audit.log", on_error=messages.append)
        logger._file.close()
        logger._file = MagicMock()
        logger._file.write.side_effect = OSError(28, "No space left on device")

        logger.log_request("1", "GetConfig", {})
        logger.log_response("1", "ok", 0.0)

        assert len(messages) == 2
        assert messages[0].startswith("Audit log write failed:")

    def test_write_failure_without_handler_is_silent(self, tmp_path: Path):
        logger = AuditLogger(tmp_path / "audit.log")
        logger._file.close()
        logger._file = MagicMock()
        logger._file.flush.side_effect = OSError("disk removed")

        logger.log_response("1", "ok", 0.0)
