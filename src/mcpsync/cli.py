# CLI interface for mcpsync
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from mcpsync import __version__
from mcpsync.config import Settings, load_settings
from mcpsync.errors import (
    ConfigIOError,
    ExecutionError,
    McpSyncError,
    NotFoundError,
    ParseError,
    ValidationError,
)
from mcpsync.invoker import ClaudeInvoker
from mcpsync.locator import ClaudeBinaryLocator
from mcpsync.models import (
    SCOPES,
    TRANSPORTS,
    AddRequest,
    AddResult,
    ServerDefinition,
    ServerRecord,
)
from mcpsync.orchestrator import McpOrchestrator
from mcpsync.project_config import definition_to_dict
from mcpsync.utils.log import configure_logging
from mcpsync.utils.validation import validate_add_request

logger = logging.getLogger(__name__)

# ABOUTME: Exit codes
# 0 = success, 1 = partial success, 2 = config error, 3 = fatal
EXIT_SUCCESS = 0
EXIT_PARTIAL = 1
EXIT_CONFIG_ERROR = 2
EXIT_FATAL = 3


def build_orchestrator(settings: Settings) -> McpOrchestrator:
    """Wire the real claude CLI invoker for the given settings."""
    locator = ClaudeBinaryLocator(explicit_path=settings.claude_path)
    return McpOrchestrator(ClaudeInvoker(locator))


def parse_env_pairs(pairs: list[str]) -> dict[str, str]:
    """Parse KEY=VALUE strings into a dict, keeping their order.

    Raises:
        ValidationError: If a pair has no '=' or an empty key
    """
    env: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValidationError(f"Invalid environment variable '{pair}'. Use KEY=VALUE.")
        env[key.strip()] = value
    return env


def build_add_request(args: argparse.Namespace, settings: Settings) -> AddRequest:
    """Turn add/update command-line arguments into an AddRequest."""
    command_line = list(args.command_line or [])
    return AddRequest(
        name=args.name,
        transport=args.transport,
        command=command_line[0] if command_line else None,
        args=command_line[1:],
        env=parse_env_pairs(args.env or []),
        url=args.url,
        scope=args.scope or settings.default_scope,
    )


def emit_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def print_record(record: ServerRecord) -> None:
    print(f"  {record.name}")
    print(f"    scope: {record.scope}")
    print(f"    type: {record.transport}")
    if record.command:
        print(f"    command: {record.command}")
    if record.args:
        print(f"    args: {' '.join(record.args)}")
    if record.url:
        print(f"    url: {record.url}")
    if record.status.running:
        print("    status: ✓ connected")
    else:
        print(f"    status: ✗ {record.status.error or 'not connected'}")
    print()


def report_add(result: AddResult, as_json: bool) -> int:
    if as_json:
        emit_json(result.to_dict())
    elif result.success:
        print(f"Server '{result.server_name}' added.")
        if result.message:
            print(f"  {result.message}")
    else:
        print(f"Error: {result.message}")
    return EXIT_SUCCESS if result.success else EXIT_CONFIG_ERROR


def cmd_list(orchestrator: McpOrchestrator, args: argparse.Namespace, settings: Settings) -> int:
    """Execute list command.

    ABOUTME: --quick prints list summaries without per-server detail fetches
    """
    if args.quick:
        entries = orchestrator.list_entries()
        if args.json:
            emit_json([
                {"name": e.name, "summary": e.summary, "connected": e.connected}
                for e in entries
            ])
            return EXIT_SUCCESS
        for entry in entries:
            marker = "✓" if entry.connected else "✗"
            print(f"  {marker} {entry.name}: {entry.summary}")
        print()
        print(f"Total: {len(entries)} server(s)")
        return EXIT_SUCCESS

    records = orchestrator.list_servers()
    if args.json:
        emit_json([record.to_dict() for record in records])
        return EXIT_SUCCESS

    if not records:
        print("No MCP servers configured.")
        return EXIT_SUCCESS

    print("MCP Servers:")
    print()
    for record in records:
        print_record(record)
    print(f"Total: {len(records)} server(s)")
    return EXIT_SUCCESS


def cmd_get(orchestrator: McpOrchestrator, args: argparse.Namespace, settings: Settings) -> int:
    record = orchestrator.get_server(args.name)
    if args.json:
        emit_json(record.to_dict())
    else:
        print_record(record)
    return EXIT_SUCCESS


def cmd_add(orchestrator: McpOrchestrator, args: argparse.Namespace, settings: Settings) -> int:
    """Execute add command.

    ABOUTME: Server command and its arguments follow "--" on the command line
    """
    return report_add(orchestrator.add(build_add_request(args, settings)), args.json)


def cmd_add_json(orchestrator: McpOrchestrator, args: argparse.Namespace, settings: Settings) -> int:
    result = orchestrator.add_json(args.name, args.definition, args.scope or settings.default_scope)
    return report_add(result, args.json)


def cmd_remove(orchestrator: McpOrchestrator, args: argparse.Namespace, settings: Settings) -> int:
    message = orchestrator.remove(args.name)
    if args.json:
        emit_json({"success": True, "message": message})
    else:
        print(message or f"Server '{args.name}' removed.")
    return EXIT_SUCCESS


def cmd_update(orchestrator: McpOrchestrator, args: argparse.Namespace, settings: Settings) -> int:
    result = orchestrator.update(args.old_name, build_add_request(args, settings))
    return report_add(result, args.json)


def cmd_import_desktop(
    orchestrator: McpOrchestrator, args: argparse.Namespace, settings: Settings
) -> int:
    """Execute import-desktop command.

    ABOUTME: Returns EXIT_PARTIAL when some servers failed to import
    """
    result = orchestrator.import_from_claude_desktop(
        scope=args.scope or settings.default_scope,
        config_path=Path(args.path) if args.path else None,
    )
    if args.json:
        emit_json(result.to_dict())
    else:
        for item in result.items:
            if item.success:
                print(f"  ✓ {item.name}")
            else:
                print(f"  ✗ {item.name}: {item.error}")
        print()
        print(f"Import complete: {result.imported_count} imported, {result.failed_count} failed")

    return EXIT_PARTIAL if result.failed_count else EXIT_SUCCESS


def cmd_serve(orchestrator: McpOrchestrator, args: argparse.Namespace, settings: Settings) -> int:
    print(orchestrator.serve())
    return EXIT_SUCCESS


def cmd_reset(orchestrator: McpOrchestrator, args: argparse.Namespace, settings: Settings) -> int:
    print(orchestrator.reset_project_choices())
    return EXIT_SUCCESS


def cmd_test(orchestrator: McpOrchestrator, args: argparse.Namespace, settings: Settings) -> int:
    print(orchestrator.test_connection(args.name))
    return EXIT_SUCCESS


def cmd_status(orchestrator: McpOrchestrator, args: argparse.Namespace, settings: Settings) -> int:
    statuses = orchestrator.server_status()
    if args.json:
        emit_json({name: status.to_dict() for name, status in statuses.items()})
        return EXIT_SUCCESS
    for name, status in statuses.items():
        if status.running:
            print(f"  ✓ {name}")
        else:
            print(f"  ✗ {name}: {status.error or 'not connected'}")
    return EXIT_SUCCESS


def cmd_paths(orchestrator: McpOrchestrator, args: argparse.Namespace, settings: Settings) -> int:
    paths = orchestrator.config_paths(args.project)
    if args.json:
        emit_json(paths.to_dict())
    else:
        for scope, path in paths.to_dict().items():
            print(f"  {scope}: {path}")
    return EXIT_SUCCESS


def cmd_project_show(
    orchestrator: McpOrchestrator, args: argparse.Namespace, settings: Settings
) -> int:
    project = args.project or str(Path.cwd())
    config = orchestrator.read_project_config(project)
    payload = {name: definition_to_dict(d) for name, d in config.servers.items()}
    if args.json:
        emit_json({"mcpServers": payload})
        return EXIT_SUCCESS

    if not payload:
        print(f"No servers in {project}/.mcp.json")
        return EXIT_SUCCESS
    for name, data in payload.items():
        target = data.get("command") or data.get("url") or ""
        print(f"  {name} ({data['type']}): {target} {' '.join(data['args'])}".rstrip())
    return EXIT_SUCCESS


def cmd_project_add(
    orchestrator: McpOrchestrator, args: argparse.Namespace, settings: Settings
) -> int:
    """Execute project add command.

    ABOUTME: Edits .mcp.json directly, the claude CLI is not involved
    ABOUTME: An existing entry with the same name is replaced
    """
    project = args.project or str(Path.cwd())
    request = AddRequest(
        name=args.name,
        transport=args.transport,
        command=args.command_line[0] if args.command_line else None,
        args=list(args.command_line[1:]),
        env=parse_env_pairs(args.env or []),
        url=args.url,
        scope="project",
    )
    validate_add_request(request)

    config = orchestrator.read_project_config(project)
    config.servers[request.name] = ServerDefinition(
        transport_type=request.transport,
        command=request.command if request.transport == "stdio" else None,
        args=list(request.args),
        env=dict(request.env),
        url=request.url if request.transport == "sse" else None,
    )
    message = orchestrator.save_project_config(project, config, backup_dir=settings.backup_dir)

    if args.json:
        emit_json({"success": True, "message": message, "serverName": request.name})
    else:
        print(f"Server '{request.name}' written to {project}/.mcp.json")
    return EXIT_SUCCESS


def cmd_project_remove(
    orchestrator: McpOrchestrator, args: argparse.Namespace, settings: Settings
) -> int:
    project = args.project or str(Path.cwd())
    config = orchestrator.read_project_config(project)
    if args.name not in config.servers:
        raise NotFoundError(f"Server '{args.name}' not found in {project}/.mcp.json")

    del config.servers[args.name]
    message = orchestrator.save_project_config(project, config, backup_dir=settings.backup_dir)

    if args.json:
        emit_json({"success": True, "message": message})
    else:
        print(f"Server '{args.name}' removed from {project}/.mcp.json")
    return EXIT_SUCCESS


PROJECT_COMMANDS = {
    "show": cmd_project_show,
    "add": cmd_project_add,
    "remove": cmd_project_remove,
}


def cmd_project(orchestrator: McpOrchestrator, args: argparse.Namespace, settings: Settings) -> int:
    return PROJECT_COMMANDS[args.project_command](orchestrator, args, settings)


def _add_server_options(parser: argparse.ArgumentParser, with_scope: bool = True) -> None:
    parser.add_argument("name", help="Name of the MCP server")
    parser.add_argument(
        "--transport",
        choices=list(TRANSPORTS),
        default="stdio",
        help="Transport type (default: stdio)"
    )
    parser.add_argument("--url", help="URL endpoint (for sse transport)")
    parser.add_argument(
        "--env", "-e",
        action="append",
        metavar="KEY=VALUE",
        help="Environment variable for the server (repeatable)"
    )
    if with_scope:
        parser.add_argument("--scope", "-s", choices=list(SCOPES), help="Configuration scope")


def _add_json_flag(parser: argparse.ArgumentParser) -> None:
    # SUPPRESS keeps a subcommand from resetting a top-level --json
    parser.add_argument(
        "--json",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Print machine-readable JSON"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcpsync",
        description="Manage Claude Code MCP servers and project .mcp.json files"
    )
    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"mcpsync v{__version__}"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log at INFO level")
    parser.add_argument("--json", action="store_true", help="Print machine-readable JSON")
    parser.add_argument("--config", help="Settings file (default: ~/.mcpsync/config.json)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    list_parser = subparsers.add_parser("list", help="List configured MCP servers")
    list_parser.add_argument(
        "--quick",
        action="store_true",
        help="Only show list summaries, skip per-server details"
    )

    get_parser = subparsers.add_parser("get", help="Show one MCP server")
    get_parser.add_argument("name", help="Name of the MCP server")

    add_parser = subparsers.add_parser(
        "add",
        help="Add an MCP server",
        usage="mcpsync add NAME [options] [-- COMMAND [ARGS ...]]"
    )
    _add_server_options(add_parser)

    add_json_parser = subparsers.add_parser("add-json", help="Add an MCP server from JSON")
    add_json_parser.add_argument("name", help="Name of the MCP server")
    add_json_parser.add_argument("definition", help="Server definition as a JSON string")
    add_json_parser.add_argument("--scope", "-s", choices=list(SCOPES), help="Configuration scope")

    remove_parser = subparsers.add_parser("remove", help="Remove an MCP server")
    remove_parser.add_argument("name", help="Name of the MCP server")

    update_parser = subparsers.add_parser(
        "update",
        help="Replace an MCP server (remove + add)",
        usage="mcpsync update OLD_NAME NAME [options] [-- COMMAND [ARGS ...]]"
    )
    update_parser.add_argument("old_name", help="Current name of the MCP server")
    _add_server_options(update_parser)

    import_parser = subparsers.add_parser(
        "import-desktop",
        help="Import MCP servers from Claude Desktop"
    )
    import_parser.add_argument("--scope", "-s", choices=list(SCOPES), help="Configuration scope")
    import_parser.add_argument("--path", help="Claude Desktop config file to read")

    subparsers.add_parser("serve", help="Start Claude Code as an MCP server")
    subparsers.add_parser(
        "reset-project-choices",
        help="Reset approvals of project-scoped servers"
    )

    test_parser = subparsers.add_parser("test", help="Check that an MCP server can be reached")
    test_parser.add_argument("name", help="Name of the MCP server")

    subparsers.add_parser("status", help="Show connectivity of every MCP server")

    paths_parser = subparsers.add_parser("paths", help="Show config file locations")
    paths_parser.add_argument("--project", help="Project directory (default: cwd)")

    project_parser = subparsers.add_parser("project", help="Project .mcp.json commands")
    project_sub = project_parser.add_subparsers(dest="project_command")
    show_parser = project_sub.add_parser("show", help="Show servers in .mcp.json")
    show_parser.add_argument("--project", help="Project directory (default: cwd)")

    project_add_parser = project_sub.add_parser(
        "add",
        help="Add or replace a server in .mcp.json",
        usage="mcpsync project add NAME [options] [-- COMMAND [ARGS ...]]"
    )
    _add_server_options(project_add_parser, with_scope=False)
    project_add_parser.add_argument("--project", help="Project directory (default: cwd)")

    project_remove_parser = project_sub.add_parser("remove", help="Remove a server from .mcp.json")
    project_remove_parser.add_argument("name", help="Name of the MCP server")
    project_remove_parser.add_argument("--project", help="Project directory (default: cwd)")

    for sub in [*subparsers.choices.values(), *project_sub.choices.values()]:
        _add_json_flag(sub)

    return parser


COMMANDS = {
    "list": cmd_list,
    "get": cmd_get,
    "add": cmd_add,
    "add-json": cmd_add_json,
    "remove": cmd_remove,
    "update": cmd_update,
    "import-desktop": cmd_import_desktop,
    "serve": cmd_serve,
    "reset-project-choices": cmd_reset,
    "test": cmd_test,
    "status": cmd_status,
    "paths": cmd_paths,
    "project": cmd_project,
}


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: Parses args and dispatches to appropriate command
    ABOUTME: Returns exit code for sys.exit()
    """
    parser = build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)

    # Everything after "--" is the server's own command line
    server_command: list[str] = []
    if "--" in argv:
        split_at = argv.index("--")
        argv, server_command = argv[:split_at], argv[split_at + 1:]

    args = parser.parse_args(argv)
    args.command_line = server_command

    if args.command is None or (args.command == "project" and args.project_command is None):
        parser.print_help()
        return EXIT_SUCCESS

    try:
        settings = load_settings(Path(args.config) if args.config else None)
    except McpSyncError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR

    configure_logging("INFO" if args.verbose else settings.log_level, settings.log_dir)
    logger.debug(f"Running command {args.command} with settings {settings}")

    try:
        orchestrator = build_orchestrator(settings)
        return COMMANDS[args.command](orchestrator, args, settings)
    except (ValidationError, ParseError, ConfigIOError, NotFoundError) as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except ExecutionError as e:
        print(f"Error: {e}")
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
