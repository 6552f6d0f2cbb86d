# Configuration file locations for each scope
import os
import sys
from pathlib import Path

from mcpsync.errors import NotFoundError
from mcpsync.models import ConfigPaths

USER_CONFIG_NAME = ".claude.json"
PROJECT_CONFIG_NAME = ".mcp.json"
LOCAL_CONFIG_PARTS = (".claude", "settings.local.json")
DESKTOP_CONFIG_NAME = "claude_desktop_config.json"


def home_dir() -> Path:
    """Return the user's home directory.

    Raises:
        NotFoundError: If it cannot be determined
    """
    try:
        return Path.home()
    except RuntimeError as e:
        raise NotFoundError("Could not find home directory") from e


def project_config_path(project_root: Path | str | None = None) -> Path:
    """Return <project_root or cwd>/.mcp.json."""
    root = Path(project_root) if project_root is not None else Path.cwd()
    return root / PROJECT_CONFIG_NAME


def resolve_config_paths(project_root: Path | str | None = None) -> ConfigPaths:
    """Compute the local, project and user config locations.

    ABOUTME: Pure path arithmetic, no file is touched
    ABOUTME: project_root defaults to the current working directory

    Args:
        project_root: Project directory, or None for cwd

    Returns:
        ConfigPaths for the three scopes

    Raises:
        NotFoundError: If the home directory cannot be determined
    """
    root = Path(project_root) if project_root is not None else Path.cwd()
    return ConfigPaths(
        local=root.joinpath(*LOCAL_CONFIG_PARTS),
        project=project_config_path(root),
        user=home_dir() / USER_CONFIG_NAME,
    )


def desktop_config_path(platform: str | None = None) -> Path:
    """Return where Claude Desktop keeps its config on this platform.

    ABOUTME: macOS: ~/Library/Application Support/Claude
    ABOUTME: Linux/WSL: $XDG_CONFIG_HOME or ~/.config, then Claude
    ABOUTME: Windows: %APPDATA%/Claude

    Args:
        platform: sys.platform style identifier, defaults to the running one

    Raises:
        NotFoundError: If the base directory cannot be determined
    """
    platform = platform or sys.platform

    if platform == "darwin":
        base = home_dir() / "Library" / "Application Support"
    elif platform.startswith("win"):
        appdata = os.environ.get("APPDATA")
        if not appdata:
            raise NotFoundError("Could not find APPDATA directory")
        base = Path(appdata)
    else:
        xdg = os.environ.get("XDG_CONFIG_HOME")
        base = Path(xdg) if xdg else home_dir() / ".config"

    return base / "Claude" / DESKTOP_CONFIG_NAME
