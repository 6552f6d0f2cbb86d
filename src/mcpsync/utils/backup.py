# ABOUTME: Timestamped copies of project .mcp.json files before they are overwritten
# ABOUTME: Retention keeps the newest MAX_BACKUPS_PER_PREFIX copies of each project
import logging
import re
import shutil
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

MAX_BACKUPS_PER_PREFIX = 5

# {prefix}_{YYYYMMDD}_{HHMMSS}.{ext}
BACKUP_NAME = re.compile(r"^(?P<prefix>.+?)_(?P<stamp>\d{8}_\d{6})\.(?P<ext>.+)$")


def backup_prefix(source_path: Path) -> str:
    """Derive the backup prefix for a config file.

    ABOUTME: <project-dir>/.mcp.json -> <project-dir>-mcp
    ABOUTME: Keeps backups of different projects apart in one directory

    Examples:
        >>> backup_prefix(Path("/work/webapp/.mcp.json"))
        'webapp-mcp'
    """
    stem = source_path.name.lstrip(".").split(".")[0] or "config"
    parent = source_path.parent.name
    return f"{parent}-{stem}" if parent else stem


def create_backup(source_path: Path, backup_dir: Path) -> Path:
    """Copy `source_path` into `backup_dir` under a timestamped name.

    ABOUTME: copy2 keeps the file metadata
    ABOUTME: Old copies of the same prefix are pruned afterwards

    Raises:
        FileNotFoundError: If source_path doesn't exist
        OSError: If the directory or the copy cannot be created
    """
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {source_path}")

    backup_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    target = backup_dir / f"{backup_prefix(source_path)}_{stamp}{source_path.suffix}"

    shutil.copy2(source_path, target)
    logger.info(f"Backed up {source_path} to {target}")

    cleanup_old_backups(backup_dir)
    return target


def _backups_by_prefix(backup_dir: Path) -> dict[str, list[Path]]:
    """Group backup files by prefix, newest first within each group."""
    grouped: dict[str, list[tuple[str, Path]]] = {}
    for entry in backup_dir.iterdir():
        match = BACKUP_NAME.match(entry.name)
        if match is None or not entry.is_file():
            continue
        grouped.setdefault(match["prefix"], []).append((match["stamp"], entry))

    return {
        prefix: [path for _stamp, path in sorted(items, reverse=True)]
        for prefix, items in grouped.items()
    }


def cleanup_old_backups(backup_dir: Path, max_backups: int = MAX_BACKUPS_PER_PREFIX) -> list[Path]:
    """Delete all but the newest `max_backups` files of each prefix.

    Files that do not look like backups are left alone. A file that cannot
    be deleted is logged as a warning and skipped.

    Returns:
        Paths that were deleted
    """
    if not backup_dir.exists():
        return []

    removed: list[Path] = []
    for paths in _backups_by_prefix(backup_dir).values():
        for stale in paths[max_backups:]:
            try:
                stale.unlink()
            except OSError as e:
                logger.warning(f"Failed to delete old backup {stale}: {e}")
                continue
            removed.append(stale)
            logger.debug(f"Deleted old backup: {stale}")

    return removed
