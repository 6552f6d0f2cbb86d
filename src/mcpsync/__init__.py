# mcpsync - Claude Code MCP registration and project config sync
# ABOUTME: Version information
__version__ = "0.1.0"

# ABOUTME: Export core data models and error taxonomy
from mcpsync.errors import (
    ConfigIOError,
    ConfigParseError,
    ConfigWriteError,
    ExecutionError,
    McpSyncError,
    NotFoundError,
    ParseError,
    ValidationError,
)
from mcpsync.models import (
    AddRequest,
    AddResult,
    ConfigPaths,
    ConnectivityStatus,
    ImportItemResult,
    ImportResult,
    ProjectConfig,
    ServerDefinition,
    ServerRecord,
)

# ABOUTME: Export components
from mcpsync.invoker import ClaudeInvoker
from mcpsync.locator import ClaudeBinaryLocator
from mcpsync.orchestrator import McpOrchestrator
from mcpsync.parsing import parse_list_names, parse_server_details
from mcpsync.paths import resolve_config_paths
from mcpsync.project_config import ProjectConfigStore

__all__ = [
    "__version__",
    "AddRequest",
    "AddResult",
    "ClaudeBinaryLocator",
    "ClaudeInvoker",
    "ConfigIOError",
    "ConfigParseError",
    "ConfigPaths",
    "ConfigWriteError",
    "ConnectivityStatus",
    "ExecutionError",
    "ImportItemResult",
    "ImportResult",
    "McpOrchestrator",
    "McpSyncError",
    "NotFoundError",
    "ParseError",
    "ProjectConfig",
    "ProjectConfigStore",
    "ServerDefinition",
    "ServerRecord",
    "ValidationError",
    "parse_list_names",
    "parse_server_details",
    "resolve_config_paths",
]
