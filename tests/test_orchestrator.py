# ABOUTME: Tests for McpOrchestrator against a scripted claude CLI
# ABOUTME: Verifies argument building, soft/hard error policies and list fallback
import json
import logging

import pytest

from mcpsync.errors import (
    ConfigParseError,
    ConfigWriteError,
    ExecutionError,
    NotFoundError,
)
from mcpsync.models import AddRequest, ProjectConfig, ServerDefinition
from mcpsync.orchestrator import McpOrchestrator, build_add_args


class TestBuildAddArgs:
    """Tests for build_add_args function."""

    def test_stdio_with_args_uses_separator(self):
        request = AddRequest(name="fs", command="npx", args=["-y", "pkg"])
        assert build_add_args(request) == ["add", "-s", "local", "fs", "--", "npx", "-y", "pkg"]

    def test_stdio_without_args(self):
        request = AddRequest(name="tool", command="mcp-tool")
        assert build_add_args(request) == ["add", "-s", "local", "tool", "--", "mcp-tool"]

    def test_plain_command_without_args_has_no_separator(self):
        request = AddRequest(name="tool", command="node")
        assert build_add_args(request) == ["add", "-s", "local", "tool", "node"]

    def test_env_pairs_precede_name(self):
        request = AddRequest(
            name="gh",
            command="npx",
            args=["server-github"],
            env={"TOKEN": "abc", "LEVEL": "debug"},
            scope="user",
        )
        assert build_add_args(request) == [
            "add", "-s", "user",
            "-e", "TOKEN=abc",
            "-e", "LEVEL=debug",
            "gh", "--", "npx", "server-github",
        ]

    def test_sse_transport(self):
        request = AddRequest(name="remote", transport="sse", url="https://example.com/sse", scope="project")
        assert build_add_args(request) == [
            "add", "-s", "project", "--transport", "sse", "remote", "https://example.com/sse",
        ]


class TestAdd:
    """Tests for McpOrchestrator.add (soft policy)."""

    def test_success(self, invoker):
        request = AddRequest(name="fs", command="npx", args=["pkg"])
        invoker.respond(build_add_args(request), "Added stdio MCP server fs to local config\n")

        result = McpOrchestrator(invoker).add(request)

        assert result.success is True
        assert result.server_name == "fs"
        assert result.message == "Added stdio MCP server fs to local config"

    def test_missing_command_spawns_nothing(self, invoker):
        result = McpOrchestrator(invoker).add(AddRequest(name="x", transport="stdio"))

        assert result.success is False
        assert "Command is required" in result.message
        assert invoker.calls == []

    def test_missing_url_spawns_nothing(self, invoker):
        result = McpOrchestrator(invoker).add(AddRequest(name="x", transport="sse"))

        assert result.success is False
        assert "URL is required" in result.message
        assert invoker.calls == []

    def test_unknown_transport_is_rejected_locally(self, invoker):
        result = McpOrchestrator(invoker).add(AddRequest(name="x", transport="http", url="u"))

        assert result.success is False
        assert "Unsupported transport" in result.message
        assert invoker.calls == []

    def test_cli_failure_becomes_result(self, invoker):
        request = AddRequest(name="fs", command="node")
        invoker.fail(build_add_args(request), "server fs already exists")

        result = McpOrchestrator(invoker).add(request)

        assert result.success is False
        assert result.message == "Command failed: server fs already exists"
        assert result.server_name is None


class TestAddJson:
    """Tests for McpOrchestrator.add_json."""

    def test_mapping_is_serialized(self, invoker):
        definition = {"type": "stdio", "command": "node", "args": ["a.js"], "env": {}}

        result = McpOrchestrator(invoker).add_json("srv", definition, "user")

        assert result.success is True
        assert invoker.calls == [["add-json", "srv", json.dumps(definition), "-s", "user"]]

    def test_string_is_passed_through(self, invoker):
        McpOrchestrator(invoker).add_json("srv", '{"command": "x"}')
        assert invoker.calls == [["add-json", "srv", '{"command": "x"}', "-s", "local"]]

    def test_invalid_scope(self, invoker):
        result = McpOrchestrator(invoker).add_json("srv", {}, "galaxy")

        assert result.success is False
        assert "Invalid scope" in result.message
        assert invoker.calls == []


class TestUpdate:
    """Tests for McpOrchestrator.update."""

    def test_remove_then_add(self, invoker):
        request = AddRequest(name="new", command="node")

        result = McpOrchestrator(invoker).update("old", request)

        assert result.success is True
        assert invoker.calls == [["remove", "old"], build_add_args(request)]

    def test_failed_remove_aborts(self, invoker):
        invoker.fail(["remove", "old"], "No MCP server found with name: old")

        result = McpOrchestrator(invoker).update("old", AddRequest(name="new", command="node"))

        assert result.success is False
        assert result.message.startswith("Failed to remove old server:")
        assert invoker.calls == [["remove", "old"]]

    def test_failed_add_after_remove(self, invoker):
        request = AddRequest(name="new", command="node")
        invoker.fail(build_add_args(request))

        result = McpOrchestrator(invoker).update("old", request)

        assert result.success is False
        assert invoker.calls[0] == ["remove", "old"]


class TestListServers:
    """Tests for McpOrchestrator.list_servers and list_entries."""

    def test_empty(self, invoker):
        invoker.respond(["list"], "No MCP servers configured. Use `claude mcp add` to add a server.")
        assert McpOrchestrator(invoker).list_servers() == []

    def test_details_for_each_name(self, invoker):
        invoker.respond(["list"], "a: node a.js - ✓ Connected\nb: node b.js - ✗ Failed to connect\n")
        invoker.respond(["get", "a"], "Scope: Project (shared)\nStatus: ✓ Connected\nCommand: node\nArgs: a.js")
        invoker.respond(["get", "b"], "Status: ✗ Failed to connect\nCommand: node")

        records = McpOrchestrator(invoker).list_servers()

        assert [r.name for r in records] == ["a", "b"]
        assert records[0].scope == "project"
        assert records[0].is_active is True
        assert records[1].is_active is False

    def test_failed_detail_fetch_keeps_server(self, invoker):
        invoker.respond(["list"], "a: node a.js\nb: node b.js\n")
        invoker.respond(["get", "a"], "Command: node")
        invoker.fail(["get", "b"], "timeout")

        records = McpOrchestrator(invoker).list_servers()

        assert [r.name for r in records] == ["a", "b"]
        assert records[1].status.running is False
        assert records[1].status.error == "Failed to get details: Command failed: timeout"
        assert records[1].command is None

    def test_list_failure_raises(self, invoker):
        invoker.fail(["list"])

        with pytest.raises(ExecutionError):
            McpOrchestrator(invoker).list_servers()

    def test_list_entries_skips_detail_fetch(self, invoker):
        invoker.respond(["list"], "a: node a.js - ✓ Connected\n")

        entries = McpOrchestrator(invoker).list_entries()

        assert entries[0].summary == "node a.js"
        assert invoker.calls == [["list"]]


class TestHardOperations:
    """Tests for operations that raise on failure."""

    def test_get_server(self, invoker):
        invoker.respond(["get", "a"], "Type: sse\nURL: https://x")
        record = McpOrchestrator(invoker).get_server("a")
        assert record.url == "https://x"

    def test_get_server_raises(self, invoker):
        invoker.fail(["get", "a"])
        with pytest.raises(ExecutionError):
            McpOrchestrator(invoker).get_server("a")

    def test_remove_returns_trimmed_output(self, invoker):
        invoker.respond(["remove", "a"], "Removed MCP server a\n")
        assert McpOrchestrator(invoker).remove("a") == "Removed MCP server a"

    def test_remove_raises(self, invoker):
        invoker.fail(["remove", "a"], "No MCP server found")
        with pytest.raises(ExecutionError, match="No MCP server found"):
            McpOrchestrator(invoker).remove("a")

    def test_serve_spawns_without_waiting(self, invoker):
        message = McpOrchestrator(invoker).serve()

        assert message == "Claude Code MCP server started"
        assert invoker.spawned == [["serve"]]
        assert invoker.calls == []

    def test_serve_raises(self, invoker):
        invoker.respond(["serve"], ExecutionError("not executable"))
        with pytest.raises(ExecutionError):
            McpOrchestrator(invoker).serve()

    def test_test_connection(self, invoker):
        assert McpOrchestrator(invoker).test_connection("a") == "Connection to a successful"
        assert invoker.calls == [["get", "a"]]

    def test_reset_project_choices(self, invoker):
        invoker.respond(["reset-project-choices"], "All project-scoped server choices reset\n")
        assert McpOrchestrator(invoker).reset_project_choices() == "All project-scoped server choices reset"

    def test_server_status(self, invoker):
        invoker.respond(["list"], "a: x\nb: y\n")
        invoker.respond(["get", "a"], "Status: ✓ Connected")
        invoker.respond(["get", "b"], "Status: ✗ failed")

        statuses = McpOrchestrator(invoker).server_status()

        assert list(statuses) == ["a", "b"]
        assert statuses["a"].running is True
        assert statuses["b"].error == "✗ failed"


class TestDesktopImport:
    """Tests for McpOrchestrator.import_from_claude_desktop."""

    def test_missing_file_raises(self, invoker, tmp_path):
        with pytest.raises(NotFoundError):
            McpOrchestrator(invoker).import_from_claude_desktop(config_path=tmp_path / "nope.json")
        assert invoker.calls == []

    def test_imports_each_server(self, invoker, tmp_path):
        path = tmp_path / "claude_desktop_config.json"
        path.write_text(json.dumps({
            "mcpServers": {
                "serverA": {"command": "node", "args": ["a.js"]},
                "serverB": {"args": ["b.js"]},
            }
        }))

        result = McpOrchestrator(invoker).import_from_claude_desktop(scope="user", config_path=path)

        assert result.imported_count == 1
        assert result.failed_count == 1
        assert [call[:2] for call in invoker.calls] == [["add-json", "serverA"]]
        assert invoker.calls[0][-2:] == ["-s", "user"]

    def test_default_path_is_platform_location(self, invoker, tmp_path, monkeypatch):
        monkeypatch.setattr("mcpsync.orchestrator.desktop_config_path", lambda: tmp_path / "missing.json")

        with pytest.raises(NotFoundError, match="missing.json"):
            McpOrchestrator(invoker).import_from_claude_desktop()


class TestProjectConfig:
    """Tests for project .mcp.json access through the orchestrator."""

    def test_save_then_read(self, invoker, tmp_path):
        orchestrator = McpOrchestrator(invoker)
        config = ProjectConfig(servers={"fs": ServerDefinition(command="npx", args=["pkg"])})

        assert orchestrator.save_project_config(tmp_path, config) == "Project MCP configuration saved"
        assert orchestrator.read_project_config(tmp_path) == config
        assert invoker.calls == []

    def test_read_malformed_raises(self, invoker, tmp_path):
        (tmp_path / ".mcp.json").write_text("{not json")
        with pytest.raises(ConfigParseError):
            McpOrchestrator(invoker).read_project_config(tmp_path)

    def test_config_paths(self, invoker, tmp_path):
        paths = McpOrchestrator(invoker).config_paths(tmp_path)
        assert paths.project == tmp_path / ".mcp.json"


class TestFailureLogging:
    """Failures are logged with the operation name and target."""

    def test_soft_add_failure(self, invoker, caplog):
        request = AddRequest(name="fs", command="npx")
        invoker.fail(build_add_args(request), "already exists")

        with caplog.at_level(logging.ERROR, logger="mcpsync"):
            result = McpOrchestrator(invoker).add(request)

        assert result.success is False
        assert "add fs: Failed to add MCP server: Command failed: already exists" in caplog.messages

    def test_hard_remove_failure(self, invoker, caplog):
        invoker.fail(["remove", "fs"], "No MCP server found")

        with caplog.at_level(logging.ERROR, logger="mcpsync"):
            with pytest.raises(ExecutionError):
                McpOrchestrator(invoker).remove("fs")

        assert any(m.startswith("remove fs: ") for m in caplog.messages)

    def test_project_config_shape_error(self, invoker, tmp_path, caplog):
        (tmp_path / ".mcp.json").write_text(json.dumps({"mcpServers": {"fs": "npx"}}))

        with caplog.at_level(logging.ERROR, logger="mcpsync"):
            with pytest.raises(ConfigParseError):
                McpOrchestrator(invoker).read_project_config(tmp_path)

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert errors
        assert errors[-1].getMessage().startswith(f"read_project_config {tmp_path}: ")
        assert "server 'fs' must be an object" in errors[-1].getMessage()

    def test_project_config_write_error(self, invoker, tmp_path, caplog):
        blocker = tmp_path / "file"
        blocker.write_text("")

        with caplog.at_level(logging.ERROR, logger="mcpsync"):
            with pytest.raises(ConfigWriteError):
                McpOrchestrator(invoker).save_project_config(blocker / "project", ProjectConfig())

        assert any(m.startswith("save_project_config ") for m in caplog.messages)
