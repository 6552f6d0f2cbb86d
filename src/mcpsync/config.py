# Settings loading for mcpsync
import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

from mcpsync.errors import ConfigIOError, ConfigParseError, ValidationError
from mcpsync.utils.env import expand_env_vars
from mcpsync.utils.validation import validate_log_level, validate_scope

logger = logging.getLogger(__name__)

# ABOUTME: Default settings directory in user's home
CONFIG_DIR = Path.home() / ".mcpsync"

# ABOUTME: Settings file location (JSON format)
CONFIG_FILE = CONFIG_DIR / "config.json"

# ABOUTME: Environment variables that override the settings file
ENV_CLAUDE_PATH = "MCPSYNC_CLAUDE_PATH"
ENV_LOG_LEVEL = "MCPSYNC_LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    """User settings for mcpsync.

    ABOUTME: Every field is optional in the file and has a default here
    """
    claude_path: str | None = None
    log_level: str = "WARNING"
    log_dir: Path | None = None
    default_scope: str = "local"
    backup_dir: Path | None = None


def get_config_path() -> Path:
    """Return ~/.mcpsync/config.json (the file may not exist yet)."""
    return CONFIG_FILE


def _optional_str(
    path: Path, data: dict[str, Any], key: str, env: Mapping[str, str]
) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigParseError(path, f"'{key}' must be a string")
    return expand_env_vars(value, env)


def load_settings(path: Path | None = None, environ: Mapping[str, str] | None = None) -> Settings:
    """Load settings from JSON, then apply environment overrides.

    ABOUTME: A missing file yields defaults
    ABOUTME: ${VAR} references in string values are expanded

    Args:
        path: Settings file, defaults to ~/.mcpsync/config.json
        environ: Source of overrides, defaults to os.environ

    Returns:
        Parsed Settings

    Raises:
        ConfigParseError: If the JSON is invalid or a value has the wrong type
        ConfigIOError: If the file exists but cannot be read
        ValidationError: If logLevel or defaultScope is not recognized
    """
    path = path if path is not None else get_config_path()
    env = os.environ if environ is None else environ
    settings = Settings()

    if path.exists():
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigParseError(path, str(e)) from e
        except OSError as e:
            raise ConfigIOError(path, str(e)) from e

        if not isinstance(data, dict):
            raise ConfigParseError(path, "top level must be an object")

        log_dir = _optional_str(path, data, "logDir", env)
        backup_dir = _optional_str(path, data, "backupDir", env)
        settings = Settings(
            claude_path=_optional_str(path, data, "claudePath", env),
            log_level=validate_log_level(_optional_str(path, data, "logLevel", env) or settings.log_level),
            log_dir=Path(log_dir).expanduser() if log_dir else None,
            default_scope=validate_scope(
                _optional_str(path, data, "defaultScope", env) or settings.default_scope
            ),
            backup_dir=Path(backup_dir).expanduser() if backup_dir else None,
        )
    else:
        logger.debug(f"No settings file at {path}, using defaults")

    if env.get(ENV_CLAUDE_PATH):
        settings = replace(settings, claude_path=env[ENV_CLAUDE_PATH])
    if env.get(ENV_LOG_LEVEL):
        try:
            settings = replace(settings, log_level=validate_log_level(env[ENV_LOG_LEVEL]))
        except ValidationError as e:
            raise ValidationError(f"{ENV_LOG_LEVEL}: {e}") from e

    return settings
