# ABOUTME: Utility modules for mcpsync
# ABOUTME: Exports env handling, validation, backup and logging helpers

from mcpsync.utils.backup import cleanup_old_backups, create_backup
from mcpsync.utils.env import build_command_env, expand_env_vars
from mcpsync.utils.log import configure_logging
from mcpsync.utils.validation import (
    validate_add_request,
    validate_log_level,
    validate_scope,
)

__all__ = [
    "build_command_env",
    "cleanup_old_backups",
    "configure_logging",
    "create_backup",
    "expand_env_vars",
    "validate_add_request",
    "validate_log_level",
    "validate_scope",
]
