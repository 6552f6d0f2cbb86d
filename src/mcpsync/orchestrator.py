# ABOUTME: Lifecycle operations over the claude CLI and the project config
# ABOUTME: The only component that composes invoker, parsers, paths and stores
import json
import logging
from pathlib import Path
from typing import Any, Mapping

from mcpsync.errors import McpSyncError, ValidationError
from mcpsync.importer import import_servers, load_desktop_servers
from mcpsync.models import (
    AddRequest,
    AddResult,
    CommandInvoker,
    ConfigPaths,
    ConnectivityStatus,
    ImportResult,
    ProjectConfig,
    ServerRecord,
)
from mcpsync.parsing import (
    ListEntry,
    parse_list_entries,
    parse_list_names,
    parse_server_details,
)
from mcpsync.paths import desktop_config_path, resolve_config_paths
from mcpsync.project_config import ProjectConfigStore
from mcpsync.utils.validation import validate_add_request, validate_scope

logger = logging.getLogger(__name__)


def build_add_args(request: AddRequest) -> list[str]:
    """Build the argument list of `claude mcp add`.

    ABOUTME: Order: add, -s scope, [--transport sse], -e K=V..., name, [--] command args | url
    ABOUTME: "--" keeps the CLI from reading the server's own flags as its options

    Examples:
        >>> build_add_args(AddRequest(name="fs", command="npx", args=["-y", "pkg"]))
        ['add', '-s', 'local', 'fs', '--', 'npx', '-y', 'pkg']
    """
    cmd_args = ["add", "-s", request.scope]

    if request.transport == "sse":
        cmd_args.extend(["--transport", "sse"])

    for key, value in request.env.items():
        cmd_args.extend(["-e", f"{key}={value}"])

    cmd_args.append(request.name)

    if request.transport == "stdio":
        command = request.command or ""
        if request.args or "-" in command:
            cmd_args.append("--")
        cmd_args.append(command)
        cmd_args.extend(request.args)
    elif request.url:
        cmd_args.append(request.url)

    return cmd_args


class McpOrchestrator:
    """Add / list / get / remove / update / import over `claude mcp`.

    Every call is independent: records are rebuilt from CLI output each
    time and nothing is cached between calls.

    Two error policies apply, declared in each method docstring:
    soft operations (add, add_json, update, import items) return
    AddResult/ImportResult with success=False; hard operations (list,
    get, remove, serve, reset_project_choices, test_connection, project
    config and desktop file access) raise McpSyncError subclasses.
    """

    def __init__(
        self,
        invoker: CommandInvoker,
        store: ProjectConfigStore | None = None,
    ) -> None:
        self._invoker = invoker
        self._store = store if store is not None else ProjectConfigStore()

    def _run(self, args: list[str]) -> str:
        return self._invoker.run(args).stdout

    # Soft policy: failures become AddResult(success=False)

    def add(self, request: AddRequest) -> AddResult:
        """Register a server with `claude mcp add`. Soft policy.

        A missing command (stdio) or url (sse) is reported without
        spawning a process.
        """
        logger.info(f"Adding MCP server: {request.name} with transport: {request.transport}")

        try:
            validate_add_request(request)
        except ValidationError as e:
            logger.error(f"add {request.name}: {e}")
            return AddResult(success=False, message=str(e))

        try:
            output = self._run(build_add_args(request))
        except McpSyncError as e:
            logger.error(f"add {request.name}: Failed to add MCP server: {e}")
            return AddResult(success=False, message=str(e))

        logger.info(f"Successfully added MCP server: {request.name}")
        return AddResult(success=True, message=output.strip(), server_name=request.name)

    def add_json(
        self,
        name: str,
        definition: Mapping[str, Any] | str,
        scope: str = "local",
    ) -> AddResult:
        """Register a server from a JSON definition with `claude mcp add-json`. Soft policy."""
        logger.info(f"Adding MCP server from JSON: {name} with scope: {scope}")

        try:
            validate_scope(scope)
        except ValidationError as e:
            logger.error(f"add_json {name}: {e}")
            return AddResult(success=False, message=str(e))

        payload = definition if isinstance(definition, str) else json.dumps(dict(definition))

        try:
            output = self._run(["add-json", name, payload, "-s", scope])
        except McpSyncError as e:
            logger.error(f"add_json {name}: Failed to add MCP server from JSON: {e}")
            return AddResult(success=False, message=str(e))

        logger.info(f"Successfully added MCP server from JSON: {name}")
        return AddResult(success=True, message=output.strip(), server_name=name)

    def update(self, old_name: str, request: AddRequest) -> AddResult:
        """Replace a server by removing `old_name` then adding `request`. Soft policy.

        Not atomic: if the remove succeeds and the add fails, the old
        server stays deleted. A failed remove aborts before the add.
        """
        logger.info(f"Updating MCP server: {old_name} -> {request.name}")

        try:
            self._run(["remove", old_name])
        except McpSyncError as e:
            logger.error(f"update {old_name}: Failed to remove old server: {e}")
            return AddResult(success=False, message=f"Failed to remove old server: {e}")

        result = self.add(request)
        if not result.success:
            logger.error(
                f"update {old_name}: old server removed but add of {request.name} failed"
            )
        return result

    def import_servers(self, servers: Mapping[str, Any], scope: str = "local") -> ImportResult:
        """Import desktop-format servers one by one via add-json. Soft per item."""
        return import_servers(
            servers,
            lambda name, definition: self.add_json(name, definition, scope),
        )

    # Hard policy: failures raise

    def list_servers(self) -> list[ServerRecord]:
        """List all servers with their details. Hard policy for the list call.

        A failed detail fetch does not drop the server: a minimal record
        with running=False and the fetch error is returned in its place.
        """
        logger.info("Listing MCP servers")

        try:
            output = self._run(["list"])
        except McpSyncError as e:
            logger.error(f"list: Failed to list MCP servers: {e}")
            raise

        names = parse_list_names(output)
        logger.info(f"Found {len(names)} MCP servers total")

        servers: list[ServerRecord] = []
        for name in names:
            try:
                servers.append(self.get_server(name))
            except McpSyncError as e:
                servers.append(
                    ServerRecord(
                        name=name,
                        status=ConnectivityStatus(
                            running=False,
                            error=f"Failed to get details: {e}",
                        ),
                    )
                )
        return servers

    def list_entries(self) -> list[ListEntry]:
        """One-line summaries from `claude mcp list` without detail fetches. Hard policy."""
        logger.info("Listing MCP server summaries")

        try:
            output = self._run(["list"])
        except McpSyncError as e:
            logger.error(f"list: Failed to list MCP servers: {e}")
            raise

        return parse_list_entries(output)

    def get_server(self, name: str) -> ServerRecord:
        """Fetch one server's details with `claude mcp get`. Hard policy."""
        logger.info(f"Getting MCP server details for: {name}")

        try:
            output = self._run(["get", name])
        except McpSyncError as e:
            logger.error(f"get {name}: Failed to get MCP server: {e}")
            raise

        return parse_server_details(name, output)

    def remove(self, name: str) -> str:
        """Remove a server with `claude mcp remove`. Hard policy.

        Returns:
            Trimmed CLI confirmation text
        """
        logger.info(f"Removing MCP server: {name}")

        try:
            output = self._run(["remove", name])
        except McpSyncError as e:
            logger.error(f"remove {name}: Failed to remove MCP server: {e}")
            raise

        logger.info(f"Successfully removed MCP server: {name}")
        return output.strip()

    def import_from_claude_desktop(
        self,
        scope: str = "local",
        config_path: Path | None = None,
    ) -> ImportResult:
        """Import every server of the Claude Desktop config.

        Locating and parsing the desktop file is hard policy; the
        per-server registrations are soft and land in the ledger.
        """
        path = config_path if config_path is not None else desktop_config_path()
        logger.info(f"Importing MCP servers from Claude Desktop ({path}) with scope: {scope}")

        try:
            servers = load_desktop_servers(path)
        except McpSyncError as e:
            logger.error(f"import_from_claude_desktop: {e}")
            raise

        return self.import_servers(servers, scope)

    def serve(self) -> str:
        """Start `claude mcp serve` and leave it running. Hard policy."""
        logger.info("Starting Claude Code as MCP server")

        try:
            self._invoker.spawn(["serve"])
        except McpSyncError as e:
            logger.error(f"serve: Failed to start MCP server: {e}")
            raise

        return "Claude Code MCP server started"

    def test_connection(self, name: str) -> str:
        """Check that `claude mcp get <name>` succeeds. Hard policy."""
        logger.info(f"Testing connection to MCP server: {name}")

        try:
            self._run(["get", name])
        except McpSyncError as e:
            logger.error(f"test_connection {name}: {e}")
            raise

        return f"Connection to {name} successful"

    def reset_project_choices(self) -> str:
        """Reset project-scoped server approvals. Hard policy."""
        logger.info("Resetting MCP project choices")

        try:
            output = self._run(["reset-project-choices"])
        except McpSyncError as e:
            logger.error(f"reset_project_choices: Failed to reset project choices: {e}")
            raise

        return output.strip()

    def server_status(self) -> dict[str, ConnectivityStatus]:
        """Connectivity of every listed server keyed by name. Hard policy."""
        return {record.name: record.status for record in self.list_servers()}

    def config_paths(self, project_root: Path | str | None = None) -> ConfigPaths:
        return resolve_config_paths(project_root)

    def read_project_config(self, project_root: Path | str) -> ProjectConfig:
        """Load <project_root>/.mcp.json. Hard policy."""
        logger.info(f"Reading .mcp.json from project: {project_root}")

        try:
            return self._store.read(project_root)
        except McpSyncError as e:
            logger.error(f"read_project_config {project_root}: {e}")
            raise

    def save_project_config(
        self,
        project_root: Path | str,
        config: ProjectConfig,
        backup_dir: Path | None = None,
    ) -> str:
        """Overwrite <project_root>/.mcp.json. Hard policy."""
        logger.info(f"Saving .mcp.json to project: {project_root}")

        try:
            self._store.write(project_root, config, backup_dir=backup_dir)
        except McpSyncError as e:
            logger.error(f"save_project_config {project_root}: {e}")
            raise

        return "Project MCP configuration saved"
