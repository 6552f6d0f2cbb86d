# ABOUTME: Logging setup for the mcpsync CLI
# ABOUTME: stderr always, plus a dated log file when a directory is configured
import logging
import sys
from datetime import datetime
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Handlers installed by configure_logging, replaced on the next call
_installed: list[logging.Handler] = []


def log_file_path(log_dir: Path, when: datetime | None = None) -> Path:
    """Return <log_dir>/mcpsync-YYYYMMDD.log."""
    stamp = (when or datetime.now()).strftime("%Y%m%d")
    return log_dir / f"mcpsync-{stamp}.log"


def configure_logging(level: str = "WARNING", log_dir: Path | None = None) -> Path | None:
    """Configure the `mcpsync` logger.

    ABOUTME: Falls back to stderr only if the log file cannot be opened

    Args:
        level: Level name such as "INFO"
        log_dir: Directory for the dated log file, or None

    Returns:
        Path of the log file in use, or None
    """
    root = logging.getLogger("mcpsync")
    for handler in _installed:
        root.removeHandler(handler)
        handler.close()
    _installed.clear()

    root.setLevel(level.upper())
    formatter = logging.Formatter(LOG_FORMAT)

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(formatter)
    root.addHandler(stream)
    _installed.append(stream)

    if log_dir is None:
        return None

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        root.warning(f"Failed to create log directory {log_dir}: {e}")
        return None

    path = log_file_path(log_dir)
    try:
        file_handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as e:
        root.warning(f"Failed to open log file {path}: {e}")
        return None

    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)
    _installed.append(file_handler)
    return path
