"""Tests for the tool contract and ToolRegistry."""

import pytest

from php_boost.tools.base import Tool, ToolArgumentError, ToolDefinition, ToolExecutionError
from php_boost.tools.registrar import CORE_TOOLS, ToolRegistrar
from php_boost.tools.registry import ToolNotFoundError, ToolRegistry
from php_boost.tools.result import ToolResult


class EchoTool(Tool):
    """Echoes its message argument."""

    name = "echo"
    description = "Echoes input"
    input_schema = {
        "type": "object",
        "properties": {"message": {"type": "string"}},
        "required": ["message"],
    }

    def execute(self, arguments):
        self.require_arguments(arguments, "message")
        return ToolResult.success(self.name, arguments["message"])


class OtherEchoTool(EchoTool):
    """Second tool registered under the same name."""

    description = "Echoes input, loudly"

    def execute(self, arguments):
        return ToolResult.success(self.name, arguments["message"].upper())


class WritingTool(Tool):
    name = "writer"
    description = "Writes files"
    read_only = False

    def __init__(self, config=None):
        super().__init__(config)
        self.cleaned_up = False

    def execute(self, arguments):
        return ToolResult.success(self.name, "written", meta={"writes_performed": True})

    def cleanup(self):
        self.cleaned_up = True


class TestTool:
    """Tests for the Tool base class."""

    def test_definition(self):
        """Should expose a descriptor in MCP format."""
        definition = EchoTool().definition

        assert isinstance(definition, ToolDefinition)
        assert definition.read_only is True
        assert definition.to_dict() == {
            "name": "echo",
            "description": "Echoes input",
            "inputSchema": EchoTool.input_schema,
        }

    def test_read_only_can_be_overridden(self):
        assert WritingTool().definition.read_only is False

    def test_config_is_passed_through(self):
        config = {"database": {"driver": "sqlite"}, "anything": [1, 2]}

        assert EchoTool(config).config is config

    def test_get_config_dot_notation(self):
        tool = EchoTool({"database": {"connections": {"main": {"host": "db"}}}})

        assert tool.get_config("database.connections.main.host") == "db"
        assert tool.get_config("database.connections.other.host", "x") == "x"
        assert tool.get_config("database.connections.main.host.deeper") is None

    def test_require_arguments(self):
        with pytest.raises(ToolArgumentError, match="Missing required argument: message"):
            EchoTool().execute({})

    def test_int_argument(self):
        tool = EchoTool()

        assert tool.int_argument({"n": "12"}, "n", 5) == 12
        assert tool.int_argument({}, "n", 5) == 5
        with pytest.raises(ToolArgumentError):
            tool.int_argument({"n": "many"}, "n", 5)
        with pytest.raises(ToolArgumentError):
            tool.int_argument({"n": True}, "n", 5)

    def test_resolve_base_path(self, tmp_path):
        tool = EchoTool({"base_path": "/srv/app/"})

        assert tool.resolve_base_path({"base_path": str(tmp_path) + "/"}) == str(tmp_path)
        assert tool.resolve_base_path({}) == "/srv/app"


class TestToolRegistry:
    """Tests for ToolRegistry."""

    def test_register_and_get(self):
        registry = ToolRegistry()
        tool = EchoTool()

        registry.register(tool)

        assert registry.get("echo") is tool
        assert registry.has("echo")
        assert "echo" in registry

    def test_get_missing_returns_none(self):
        assert ToolRegistry().get("missing") is None

    def test_require_missing_raises(self):
        with pytest.raises(ToolNotFoundError) as exc_info:
            ToolRegistry().require("missing")

        assert str(exc_info.value) == "Tool not found: missing"

    def test_same_name_last_registration_wins(self):
        """Should keep exactly one entry, the later one."""
        registry = ToolRegistry()
        second = OtherEchoTool()

        registry.register(EchoTool())
        registry.register(second)

        assert len(registry) == 1
        assert registry.all() == [second]
        assert registry.list_tools()[0]["description"] == "Echoes input, loudly"

    def test_enumerates_in_registration_order(self):
        registry = ToolRegistry()
        registry.register(WritingTool())
        registry.register(EchoTool())

        assert registry.names() == ["writer", "echo"]
        assert [t["name"] for t in registry.list_tools()] == ["writer", "echo"]

    def test_rejects_nameless_tool(self):
        class Nameless(Tool):
            def execute(self, arguments):
                return ToolResult.success("", "")

        with pytest.raises(ValueError):
            ToolRegistry().register(Nameless())

    def test_cleanup_reaches_every_tool(self):
        registry = ToolRegistry()
        tool = WritingTool()
        registry.register(tool)

        registry.cleanup()

        assert tool.cleaned_up


class TestToolRegistrar:
    """Tests for built-in tool wiring."""

    def test_registers_core_tools(self):
        registry = ToolRegistry()

        names = ToolRegistrar.register_core_tools(registry, {})

        assert names == [tool.name for tool in CORE_TOOLS]
        assert {"GetConfig", "DatabaseSchema", "DatabaseQuery", "ReadLogEntries", "TableDDL"} <= set(
            registry.names()
        )

    def test_enabled_filter(self):
        registry = ToolRegistry()

        names = ToolRegistrar.register_core_tools(registry, {}, enabled=["GetConfig"])

        assert names == ["GetConfig"]
        assert registry.names() == ["GetConfig"]

    def test_tools_receive_config(self):
        registry = ToolRegistry()
        config = {"log_path": "/tmp/app.log"}

        ToolRegistrar.register_core_tools(registry, config)

        assert all(tool.config is config for tool in registry.all())
        assert all(tool.read_only for tool in registry.all())


class TestValidateArguments:
    """Tests for opt-in schema validation."""

    def test_accepts_valid_arguments(self):
        EchoTool().validate_arguments({"message": "hi"})

    def test_reports_missing_property(self):
        with pytest.raises(ToolArgumentError, match="'message' is a required property"):
            EchoTool().validate_arguments({})

    def test_reports_path_of_wrong_type(self):
        with pytest.raises(ToolArgumentError, match="at 'message'"):
            EchoTool().validate_arguments({"message": 42})

    def test_invalid_schema(self):
        class BrokenSchemaTool(EchoTool):
            input_schema = {"type": "no-such-type"}

        with pytest.raises(ToolExecutionError, match="Invalid schema"):
            BrokenSchemaTool().validate_arguments({})
