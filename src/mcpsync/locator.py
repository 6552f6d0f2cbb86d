# Discovery of the claude executable
import logging
import shutil
from pathlib import Path

from mcpsync.errors import NotFoundError

logger = logging.getLogger(__name__)

BINARY_NAME = "claude"

# ABOUTME: Install locations checked after PATH, in order
WELL_KNOWN_LOCATIONS: tuple[str, ...] = (
    "~/.claude/local/claude",
    "~/.npm-global/bin/claude",
    "~/.local/bin/claude",
    "/usr/local/bin/claude",
    "/opt/homebrew/bin/claude",
)


class ClaudeBinaryLocator:
    """Finds the claude CLI on this machine.

    ABOUTME: Implements the BinaryLocator protocol
    ABOUTME: Order: explicit path, PATH lookup, well-known install locations
    """

    def __init__(
        self,
        explicit_path: str | None = None,
        candidates: tuple[str, ...] = WELL_KNOWN_LOCATIONS,
    ) -> None:
        self._explicit_path = explicit_path
        self._candidates = candidates

    def locate(self) -> Path:
        """Return the claude executable path.

        Raises:
            NotFoundError: If an explicit path is configured but missing,
                or no candidate exists
        """
        if self._explicit_path:
            path = Path(self._explicit_path).expanduser()
            if path.is_file():
                return path
            raise NotFoundError(f"Configured claude binary not found: {path}")

        found = shutil.which(BINARY_NAME)
        if found:
            return Path(found)

        for candidate in self._candidates:
            path = Path(candidate).expanduser()
            if path.is_file():
                logger.debug(f"Using claude binary from well-known location {path}")
                return path

        raise NotFoundError(
            "Could not find the claude CLI. Install Claude Code or set MCPSYNC_CLAUDE_PATH."
        )
