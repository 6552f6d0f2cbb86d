# Import of Claude Desktop servers into Claude Code
import json
import logging
from pathlib import Path
from typing import Any, Callable, Mapping

from mcpsync.errors import ConfigIOError, ConfigParseError, NotFoundError
from mcpsync.models import AddResult, ImportResult

logger = logging.getLogger(__name__)

MISSING_COMMAND = "missing command field"

# ABOUTME: Callback registering one server from its add-json definition
AddJson = Callable[[str, dict[str, Any]], AddResult]


def load_desktop_servers(path: Path) -> dict[str, Any]:
    """Read the `mcpServers` mapping of a Claude Desktop config.

    ABOUTME: Unlike .mcp.json, a missing file here is an error
    ABOUTME: Key order of the file is preserved

    Raises:
        NotFoundError: If the file or its mcpServers object is missing
        ConfigParseError: If the file is not valid JSON
        ConfigIOError: If the file cannot be read
    """
    if not path.exists():
        raise NotFoundError(
            f"Claude Desktop configuration not found at {path}. "
            "Make sure Claude Desktop is installed."
        )

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigParseError(path, str(e)) from e
    except OSError as e:
        raise ConfigIOError(path, str(e)) from e

    servers = data.get("mcpServers") if isinstance(data, dict) else None
    if not isinstance(servers, dict):
        raise NotFoundError("No MCP servers found in Claude Desktop config")
    return servers


def translate_desktop_entry(entry: Any) -> dict[str, Any] | None:
    """Convert a Claude Desktop server entry to the add-json shape.

    ABOUTME: Desktop entries are always stdio
    ABOUTME: Returns None when there is no usable command

    Examples:
        >>> translate_desktop_entry({"command": "node", "args": ["x.js"]})
        {'type': 'stdio', 'command': 'node', 'args': ['x.js'], 'env': {}}
    """
    if not isinstance(entry, dict):
        return None
    command = entry.get("command")
    if not isinstance(command, str):
        return None

    args = entry.get("args")
    env = entry.get("env")
    return {
        "type": "stdio",
        "command": command,
        "args": list(args) if isinstance(args, list) else [],
        "env": dict(env) if isinstance(env, dict) else {},
    }


def import_servers(servers: Mapping[str, Any], add_json: AddJson) -> ImportResult:
    """Register every desktop server through `add_json`, recording each outcome.

    Entries without a command fail immediately and never reach `add_json`.

    Args:
        servers: Desktop `mcpServers` mapping, name -> entry
        add_json: Registers one translated definition, returning AddResult

    Returns:
        ImportResult whose items follow the iteration order of `servers`
    """
    result = ImportResult()

    for name, entry in servers.items():
        logger.info(f"Importing server: {name}")
        definition = translate_desktop_entry(entry)
        if definition is None:
            logger.error(f"Failed to import server {name}: {MISSING_COMMAND}")
            result.record(name, False, MISSING_COMMAND)
            continue

        outcome = add_json(name, definition)
        if outcome.success:
            result.record(name, True)
        else:
            logger.error(f"Failed to import server {name}: {outcome.message}")
            result.record(name, False, outcome.message)

    logger.info(
        f"Import complete: {result.imported_count} imported, {result.failed_count} failed"
    )
    return result
