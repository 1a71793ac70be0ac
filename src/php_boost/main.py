"""php-boost command line entry point.

Runs the MCP server over stdio, or invokes a single tool directly.

================================================================================
DEVELOPER GUIDE: Adding a Tool
================================================================================

1. CREATE YOUR TOOL
   Subclass php_boost.tools.base.Tool, set ``name``, ``description`` and
   ``input_schema``, and return a ToolResult from ``execute``. Raise
   ToolArgumentError for bad arguments and ToolExecutionError when the
   tool cannot run; the server turns both into JSON-RPC errors.

2. REGISTER IT
   Add the class to CORE_TOOLS in php_boost/tools/registrar.py, or
   register an instance on the server yourself:

       server = build_server(config)
       server.register_tool(MyTool(config.values))

3. ENABLE IT
   When the config file lists ``tools.enabled``, add the tool name there.

Report business failures inside the ToolResult (warning/error status),
not by raising: a raised exception means the call itself failed.
================================================================================
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from php_boost import __version__
from php_boost.config import BoostConfig, ConfigLoadError, load_config
from php_boost.protocol.jsonrpc import METHOD_NOT_FOUND, JsonRpcError
from php_boost.protocol.tools import ToolsHandler
from php_boost.protocol.transport import StdioTransport, TransportError
from php_boost.server import MCPServer
from php_boost.tools.registrar import ToolRegistrar

FAIL_ON_STATUSES = {
    "error": {"error"},
    "warning": {"warning", "error"},
}
COMMANDS_AND_GLOBAL_FLAGS = {"serve", "tools", "call", "-h", "--help", "-v", "--version"}


def build_server(config: BoostConfig) -> MCPServer:
    """Create a server with the built-in tools registered.

    Args:
        config: Server configuration.

    Returns:
        Server ready to serve.
    """
    server = MCPServer(config=config)
    ToolRegistrar.register_core_tools(server.registry, config.values, config.enabled_tools)
    return server


def _load(args: argparse.Namespace) -> BoostConfig:
    if args.config is not None:
        return load_config(args.config)
    return BoostConfig.from_env(args.base_path)


def _cmd_serve(args: argparse.Namespace, config: BoostConfig) -> int:
    transport = StdioTransport()
    transport.log(f"php-boost {__version__} started")
    transport.log(f"Config loaded from: {args.config or 'environment'}")

    with build_server(config) as server:
        try:
            server.serve(transport)
        except KeyboardInterrupt:
            transport.log("Interrupted, shutting down")
            return 130  # Standard exit code for SIGINT
        except TransportError as e:
            transport.log(f"Error: {e}")
            return 1
    return 0


def _cmd_tools(args: argparse.Namespace, config: BoostConfig) -> int:
    with build_server(config) as server:
        for definition in server.registry.definitions():
            flag = "" if definition.read_only else " [writes]"
            print(f"{definition.name}{flag}: {definition.description}")
    return 0


def _cmd_call(args: argparse.Namespace, config: BoostConfig) -> int:
    try:
        arguments = json.loads(args.args)
    except json.JSONDecodeError as e:
        print(f"Error: --args is not valid JSON: {e}", file=sys.stderr)
        return 2
    if not isinstance(arguments, dict):
        print("Error: --args must be a JSON object", file=sys.stderr)
        return 2

    with build_server(config) as server:
        handler = ToolsHandler(server.registry, timeout=config.tool_timeout)
        try:
            call_result = handler.handle_call({"name": args.name, "arguments": arguments})
        except JsonRpcError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 2 if e.code == METHOD_NOT_FOUND else 1

    print(call_result.content[0]["text"])

    status = call_result.structured.get("status", "ok")
    if args.fail_on and status in FAIL_ON_STATUSES[args.fail_on]:
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="php-boost",
        description="MCP server exposing project analysis tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"php-boost {__version__}",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: read from environment)",
    )
    common.add_argument(
        "--base-path",
        default=None,
        help="Project root when reading config from the environment",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("serve", parents=[common], help="Run the MCP server over stdio")
    subparsers.add_parser("tools", parents=[common], help="List available tools")

    call = subparsers.add_parser("call", parents=[common], help="Run one tool and print its result")
    call.add_argument("name", help="Tool name")
    call.add_argument("--args", "-a", default="{}", help="Tool arguments as a JSON object")
    call.add_argument(
        "--fail-on",
        choices=sorted(FAIL_ON_STATUSES),
        default=None,
        help="Exit non-zero when the result status reaches this level",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] not in COMMANDS_AND_GLOBAL_FLAGS:
        argv = ["serve", *argv]

    args = build_parser().parse_args(argv)

    try:
        config = _load(args)
    except ConfigLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    commands = {"serve": _cmd_serve, "tools": _cmd_tools, "call": _cmd_call}
    return commands[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
