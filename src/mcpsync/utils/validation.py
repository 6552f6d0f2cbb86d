# ABOUTME: Local validation of add requests and settings values
# ABOUTME: Runs before any claude process is spawned
from mcpsync.errors import ValidationError
from mcpsync.models import SCOPES, TRANSPORTS, AddRequest

LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def validate_scope(scope: str) -> str:
    """Return scope unchanged or raise ValidationError.

    Examples:
        >>> validate_scope("project")
        'project'
    """
    if scope not in SCOPES:
        raise ValidationError(
            f"Invalid scope '{scope}'. Must be one of: {', '.join(SCOPES)}."
        )
    return scope


def validate_log_level(level: str) -> str:
    """Normalize a log level name to upper case or raise ValidationError."""
    normalized = level.upper()
    if normalized not in LOG_LEVELS:
        raise ValidationError(
            f"Invalid log level '{level}'. Must be one of: {', '.join(LOG_LEVELS)}."
        )
    return normalized


def validate_add_request(request: AddRequest) -> None:
    """Check the transport-specific required field of an add request.

    ABOUTME: stdio needs a command, sse needs a url
    ABOUTME: Messages are shown to the user verbatim

    Args:
        request: Request about to be turned into `claude mcp add` arguments

    Raises:
        ValidationError: If the name is empty, the transport unknown,
            or the transport's required field is missing
    """
    if not request.name.strip():
        raise ValidationError("Server name is required")

    if request.transport not in TRANSPORTS:
        raise ValidationError(
            f"Unsupported transport '{request.transport}'. Must be 'stdio' or 'sse'."
        )

    if request.transport == "stdio" and not request.command:
        raise ValidationError("Command is required for stdio transport")

    if request.transport == "sse" and not request.url:
        raise ValidationError("URL is required for SSE transport")

    validate_scope(request.scope)
