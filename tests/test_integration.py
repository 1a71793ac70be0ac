"""End-to-end tests driving the server loop over stdio streams."""

import io
import json
from pathlib import Path

import pytest

from php_boost.config import BoostConfig
from php_boost.protocol.transport import StdioTransport, TransportError
from php_boost.server import MCPServer
from php_boost.tools.registrar import ToolRegistrar


def request(msg_id, method, params=None) -> str:
    return json.dumps({"jsonrpc": "2.0", "id": msg_id, "method": method, "params": params or {}})


def run_session(lines: list[str], config: BoostConfig | None = None) -> list[dict]:
    """Feed lines to a server with the core tools and return decoded output."""
    config = config or BoostConfig()
    stdout = io.StringIO()
    transport = StdioTransport(
        stdin=io.StringIO("".join(line + "\n" for line in lines)),
        stdout=stdout,
        stderr=io.StringIO(),
    )
    server = MCPServer(config=config)
    ToolRegistrar.register_core_tools(server.registry, config.values, config.enabled_tools)

    server.serve(transport)

    return [json.loads(line) for line in stdout.getvalue().splitlines()]


class TestScenarios:
    """Initialize, discovery and call flows."""

    def test_initialize_list_and_call(self):
        messages = run_session(
            [
                request(1, "initialize"),
                request(2, "tools/list"),
                request(
                    3,
                    "tools/call",
                    {
                        "name": "GetConfig",
                        "arguments": {"key": "database.driver", "default": "sqlite"},
                    },
                ),
            ]
        )

        assert len(messages) == 3

        assert messages[0]["id"] == 1
        assert messages[0]["result"]["protocolVersion"] == "2024-11-05"

        assert messages[1]["id"] == 2
        names = [tool["name"] for tool in messages[1]["result"]["tools"]]
        assert {"GetConfig", "DatabaseQuery", "DatabaseSchema", "ReadLogEntries", "TableDDL"} <= set(
            names
        )

        assert messages[2]["id"] == 3
        content = messages[2]["result"]["content"]
        assert content[0]["type"] == "text"
        assert "database.driver" in content[0]["text"]
        assert messages[2]["result"]["structuredContent"]["data"]["value"] == "sqlite"

    def test_tools_list_before_initialize(self):
        messages = run_session([request(10, "tools/list")])

        assert len(messages) == 1
        assert messages[0]["id"] == 10
        assert messages[0]["error"]["code"] == -32603

    def test_unknown_tool_after_initialize(self):
        messages = run_session(
            [
                request(20, "initialize"),
                request(21, "tools/call", {"name": "DoesNotExist", "arguments": {}}),
            ]
        )

        assert len(messages) == 2
        assert messages[0]["id"] == 20
        assert "result" in messages[0]
        assert messages[1]["id"] == 21
        assert messages[1]["error"]["code"] == -32601


class TestLoopProperties:
    """Ordering and output rules of the read loop."""

    def test_responses_follow_request_order(self):
        ids = list(range(100, 120))
        lines = [request(1, "initialize")] + [
            request(i, "tools/call", {"name": "GetConfig", "arguments": {"key": f"k{i}"}})
            for i in ids
        ]

        messages = run_session(lines)

        assert [m["id"] for m in messages] == [1, *ids]

    def test_notifications_produce_no_output(self):
        messages = run_session(
            [
                json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"}),
                request(1, "initialize"),
                json.dumps({"jsonrpc": "2.0", "method": "notifications/cancelled"}),
                request(2, "ping"),
            ]
        )

        assert [m["id"] for m in messages] == [1, 2]

    def test_malformed_line_does_not_stop_loop(self):
        messages = run_session(["{broken", request(1, "initialize")])

        assert messages[0]["id"] is None
        assert messages[0]["error"]["code"] == -32700
        assert messages[1]["id"] == 1

    def test_tool_fault_does_not_stop_loop(self):
        config = BoostConfig.from_dict({"database": {"driver": "mysql"}})

        messages = run_session(
            [
                request(1, "initialize"),
                request(2, "tools/call", {"name": "DatabaseQuery", "arguments": {"query": "SELECT 1"}}),
                request(3, "tools/call", {"name": "GetConfig", "arguments": {"key": "database.driver"}}),
            ],
            config,
        )

        assert messages[1]["error"]["code"] == -32603
        assert "not supported" in messages[1]["error"]["message"]
        assert messages[2]["result"]["structuredContent"]["data"]["value"] == "mysql"

    def test_empty_input_exits_cleanly(self):
        assert run_session([]) == []

    def test_write_failure_is_fatal(self):
        stdout = io.StringIO()
        stdout.close()
        transport = StdioTransport(
            stdin=io.StringIO(request(1, "ping") + "\n"),
            stdout=stdout,
            stderr=io.StringIO(),
        )

        with pytest.raises(TransportError):
            MCPServer().serve(transport)


@pytest.mark.skipif(not Path("/dev/full").exists(), reason="needs /dev/full")
class TestAuditFailure:
    """A broken audit log is reported on stderr and the loop carries on."""

    def test_loop_survives_audit_write_errors(self):
        stdout = io.StringIO()
        stderr = io.StringIO()
        transport = StdioTransport(
            stdin=io.StringIO(
                request(1, "initialize")
                + "\n"
                + request(2, "tools/call", {"name": "GetConfig", "arguments": {"key": "a"}})
                + "\n"
                + request(3, "ping")
                + "\n"
            ),
            stdout=stdout,
            stderr=stderr,
        )
        config = BoostConfig(audit_log_file="/dev/full")

        with MCPServer(config=config) as server:
            ToolRegistrar.register_core_tools(server.registry, config.values)
            server.serve(transport)

        messages = [json.loads(line) for line in stdout.getvalue().splitlines()]
        assert [m["id"] for m in messages] == [1, 2, 3]
        assert messages[1]["result"]["structuredContent"]["tool"] == "GetConfig"
        assert "Audit log write failed" in stderr.getvalue()
