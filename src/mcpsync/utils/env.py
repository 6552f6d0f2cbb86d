# Environment helpers: ${VAR} expansion and child-process PATH setup
import logging
import os
import re
from pathlib import Path
from typing import Mapping

logger = logging.getLogger(__name__)

# ABOUTME: Pattern matches ${VAR_NAME} where VAR_NAME is uppercase with underscores
ENV_VAR_PATTERN = re.compile(r'\$\{([A-Z_][A-Z0-9_]*)\}')

# ABOUTME: Directories where node/npm-installed CLIs usually live
# GUI launches on macOS get a minimal PATH that misses all of these
NODE_BIN_DIRS: tuple[str, ...] = (
    "~/.npm-global/bin",
    "~/.local/bin",
    "~/.volta/bin",
    "/usr/local/bin",
    "/opt/homebrew/bin",
)


def expand_env_vars(value: str, environ: Mapping[str, str] | None = None) -> str:
    """Expand ${VAR} references in a settings value.

    ABOUTME: Unknown variables are kept verbatim and logged as a warning

    Args:
        value: String potentially containing ${VAR} references
        environ: Variable source, defaults to os.environ

    Returns:
        String with known variables substituted

    Examples:
        >>> expand_env_vars("${HOME}/bin/claude", {"HOME": "/home/ada"})
        '/home/ada/bin/claude'
    """
    source = os.environ if environ is None else environ

    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        if var_name in source:
            return source[var_name]
        logger.warning(f"Environment variable '{var_name}' not found, keeping original")
        return match.group(0)

    return ENV_VAR_PATTERN.sub(replace_var, value)


def build_command_env(
    binary: Path,
    environ: Mapping[str, str] | None = None,
    extra_dirs: tuple[str, ...] = NODE_BIN_DIRS,
) -> dict[str, str]:
    """Build the environment for a claude child process.

    ABOUTME: Inherits the caller's environment unchanged except for PATH
    ABOUTME: Prepends the binary's directory and existing node bin dirs, deduplicated

    Args:
        binary: Resolved path of the claude executable
        environ: Base environment, defaults to os.environ
        extra_dirs: Candidate directories, "~" is expanded

    Returns:
        New environment mapping suitable for subprocess
    """
    env = dict(os.environ if environ is None else environ)

    prepend = [str(binary.parent)]
    for candidate in extra_dirs:
        directory = Path(candidate).expanduser()
        if directory.is_dir():
            prepend.append(str(directory))

    existing = [p for p in env.get("PATH", "").split(os.pathsep) if p]

    ordered: list[str] = []
    for entry in prepend + existing:
        if entry not in ordered:
            ordered.append(entry)

    env["PATH"] = os.pathsep.join(ordered)
    return env
