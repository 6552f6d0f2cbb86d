# Core data models for mcpsync
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Protocol, Sequence, runtime_checkable

# ABOUTME: Transport and scope vocabularies shared by parser, orchestrator and CLI
Transport = Literal["stdio", "sse"]
Scope = Literal["local", "project", "user"]

TRANSPORTS: tuple[str, ...] = ("stdio", "sse")
SCOPES: tuple[str, ...] = ("local", "project", "user")


@dataclass
class ConnectivityStatus:
    """Live connectivity of one server as reported by `claude mcp get`.

    ABOUTME: Only the detail parser sets running/last_checked
    ABOUTME: last_checked is epoch seconds
    """
    running: bool = False
    error: str | None = None
    last_checked: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "running": self.running,
            "error": self.error,
            "lastChecked": self.last_checked,
        }


@dataclass
class ServerRecord:
    """One MCP server registration owned by the claude CLI.

    ABOUTME: Rebuilt from CLI text on every list/get call, never cached
    ABOUTME: command is meaningful for stdio, url for sse
    """
    name: str
    transport: str = "stdio"
    command: str | None = None
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    url: str | None = None
    scope: str = "local"
    status: ConnectivityStatus = field(default_factory=ConnectivityStatus)

    @property
    def is_active(self) -> bool:
        """Whether the server answered its last connectivity check."""
        return self.status.running

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "transport": self.transport,
            "command": self.command,
            "args": list(self.args),
            "env": dict(self.env),
            "url": self.url,
            "scope": self.scope,
            "isActive": self.is_active,
            "status": self.status.to_dict(),
        }


@dataclass(frozen=True)
class ServerDefinition:
    """Server entry of a project-scoped .mcp.json file.

    ABOUTME: Mirrors the on-disk shape {type, command, args, env, url, headers}
    ABOUTME: Optional fields stay None so absent keys are not invented on write
    """
    transport_type: str = "stdio"
    command: str | None = None
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    url: str | None = None
    headers: dict[str, str] | None = None


@dataclass
class ProjectConfig:
    """Contents of <project>/.mcp.json keyed by server name."""
    servers: dict[str, ServerDefinition] = field(default_factory=dict)


@dataclass(frozen=True)
class ConfigPaths:
    """Locations of the three configuration scopes."""
    local: Path
    project: Path
    user: Path

    def to_dict(self) -> dict[str, str]:
        return {
            "local": str(self.local),
            "project": str(self.project),
            "user": str(self.user),
        }


@dataclass(frozen=True)
class AddRequest:
    """Everything needed to register a server through `claude mcp add`."""
    name: str
    transport: str = "stdio"
    command: str | None = None
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    url: str | None = None
    scope: str = "local"


@dataclass(frozen=True)
class AddResult:
    """Outcome of add / add-json / update.

    ABOUTME: Failures arrive here as success=False instead of exceptions
    """
    success: bool
    message: str
    server_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "serverName": self.server_name,
        }


@dataclass(frozen=True)
class ImportItemResult:
    name: str
    success: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "success": self.success, "error": self.error}


@dataclass
class ImportResult:
    """Per-item ledger of a desktop config import.

    ABOUTME: Items keep the iteration order of the source mapping
    """
    items: list[ImportItemResult] = field(default_factory=list)

    @property
    def imported_count(self) -> int:
        return sum(1 for item in self.items if item.success)

    @property
    def failed_count(self) -> int:
        return sum(1 for item in self.items if not item.success)

    def record(self, name: str, success: bool, error: str | None = None) -> None:
        self.items.append(ImportItemResult(name=name, success=success, error=error))

    def to_dict(self) -> dict[str, Any]:
        return {
            "importedCount": self.imported_count,
            "failedCount": self.failed_count,
            "servers": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True)
class CommandOutput:
    """Captured result of one external process run."""
    stdout: str
    returncode: int = 0


@runtime_checkable
class BinaryLocator(Protocol):
    """Finds the claude executable.

    ABOUTME: Kept separate so discovery rules can be swapped or faked in tests
    """

    def locate(self) -> Path:
        """Return the path of the executable or raise NotFoundError."""
        ...


@runtime_checkable
class CommandInvoker(Protocol):
    """Runs `claude mcp <args>` one process per call."""

    def run(self, args: Sequence[str]) -> CommandOutput:
        """Run to completion, raising ExecutionError on non-zero exit."""
        ...

    def spawn(self, args: Sequence[str]) -> None:
        """Start the process and return without waiting for it."""
        ...
