# ABOUTME: Exception taxonomy for mcpsync
# ABOUTME: Every failure raised by the package derives from McpSyncError
from pathlib import Path
from typing import Sequence


class McpSyncError(Exception):
    """Base class for all mcpsync failures."""


class ExecutionError(McpSyncError):
    """The claude CLI could not be spawned or exited non-zero.

    ABOUTME: returncode is None when the process never started
    """

    def __init__(
        self,
        stderr: str,
        returncode: int | None = None,
        args: Sequence[str] = (),
    ) -> None:
        self.stderr = stderr
        self.returncode = returncode
        self.command_args = list(args)
        super().__init__(f"Command failed: {stderr}")


class ParseError(McpSyncError):
    """Structured input (JSON) could not be parsed."""


class ConfigParseError(ParseError):
    """A configuration file holds malformed JSON or an unexpected shape."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        super().__init__(f"Failed to parse {path}: {detail}")


class ValidationError(McpSyncError):
    """A required field is missing or holds an unsupported value."""


class ConfigIOError(McpSyncError):
    """A configuration file could not be read."""

    def __init__(self, path: Path, detail: str, action: str = "read") -> None:
        self.path = path
        super().__init__(f"Failed to {action} {path}: {detail}")


class ConfigWriteError(ConfigIOError):
    """A configuration file could not be written."""

    def __init__(self, path: Path, detail: str) -> None:
        super().__init__(path, detail, action="write")


class NotFoundError(McpSyncError):
    """A referenced record, executable or file does not exist."""
