# Project-scoped .mcp.json persistence
import json
import logging
from pathlib import Path
from typing import Any

from mcpsync.errors import ConfigIOError, ConfigParseError, ConfigWriteError
from mcpsync.models import ProjectConfig, ServerDefinition
from mcpsync.paths import project_config_path
from mcpsync.utils.backup import create_backup

logger = logging.getLogger(__name__)

SERVERS_KEY = "mcpServers"


def definition_to_dict(definition: ServerDefinition) -> dict[str, Any]:
    """Convert a ServerDefinition to its .mcp.json shape.

    ABOUTME: args and env are always written, optional fields only when set
    """
    result: dict[str, Any] = {"type": definition.transport_type}
    if definition.command is not None:
        result["command"] = definition.command
    result["args"] = list(definition.args)
    result["env"] = dict(definition.env)
    if definition.url is not None:
        result["url"] = definition.url
    if definition.headers is not None:
        result["headers"] = dict(definition.headers)
    return result


def dict_to_definition(path: Path, name: str, data: Any) -> ServerDefinition:
    """Convert one .mcp.json server entry to a ServerDefinition.

    ABOUTME: type defaults to stdio, args/env default to empty

    Raises:
        ConfigParseError: If the entry or one of its fields has the wrong shape
    """
    if not isinstance(data, dict):
        raise ConfigParseError(path, f"server '{name}' must be an object")

    args = data.get("args", [])
    env = data.get("env", {})
    headers = data.get("headers")

    if not isinstance(args, list) or not all(isinstance(a, str) for a in args):
        raise ConfigParseError(path, f"server '{name}' field 'args' must be a list of strings")
    if not isinstance(env, dict):
        raise ConfigParseError(path, f"server '{name}' field 'env' must be an object")
    if headers is not None and not isinstance(headers, dict):
        raise ConfigParseError(path, f"server '{name}' field 'headers' must be an object")

    return ServerDefinition(
        transport_type=data.get("type", "stdio"),
        command=data.get("command"),
        args=args,
        env=env,
        url=data.get("url"),
        headers=headers,
    )


class ProjectConfigStore:
    """Reads and writes <project>/.mcp.json.

    ABOUTME: A missing file is an empty config, not an error
    ABOUTME: Writes overwrite in place; there is no locking or atomic rename,
    ABOUTME: so concurrent writers can clobber each other
    """

    def read(self, project_root: Path | str) -> ProjectConfig:
        """Load the project config.

        Raises:
            ConfigParseError: If the file is not valid JSON or has the wrong shape
            ConfigIOError: If the file exists but cannot be read
        """
        path = project_config_path(project_root)
        if not path.exists():
            logger.debug(f"No project config at {path}")
            return ProjectConfig()

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse {path}: {e}")
            raise ConfigParseError(path, str(e)) from e
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise ConfigIOError(path, str(e)) from e

        if not isinstance(data, dict):
            raise ConfigParseError(path, "top level must be an object")

        servers_data = data.get(SERVERS_KEY, {})
        if not isinstance(servers_data, dict):
            raise ConfigParseError(path, f"'{SERVERS_KEY}' must be an object")

        return ProjectConfig(
            servers={
                name: dict_to_definition(path, name, entry)
                for name, entry in servers_data.items()
            }
        )

    def write(
        self,
        project_root: Path | str,
        config: ProjectConfig,
        backup_dir: Path | None = None,
    ) -> Path:
        """Overwrite the project config with `config`.

        Args:
            project_root: Project directory holding .mcp.json
            config: Servers to persist
            backup_dir: When given, copy the existing file there first

        Returns:
            Path of the written file

        Raises:
            ConfigWriteError: On any filesystem failure
        """
        path = project_config_path(project_root)
        payload = {
            SERVERS_KEY: {
                name: definition_to_dict(definition)
                for name, definition in config.servers.items()
            }
        }

        # Serialize before opening so a bad value leaves the file untouched
        try:
            text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize {path}: {e}")
            raise ConfigWriteError(path, str(e)) from e

        try:
            if backup_dir is not None and path.exists():
                create_backup(path, backup_dir)
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise ConfigWriteError(path, str(e)) from e

        return path
