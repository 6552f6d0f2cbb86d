# ABOUTME: Parsers for the human-oriented text of `claude mcp list` and `claude mcp get`
# ABOUTME: All output heuristics live here so a structured mode can replace them in one place
import logging
import time
from dataclasses import dataclass
from typing import Callable

from mcpsync.models import ServerRecord

logger = logging.getLogger(__name__)

# ABOUTME: Sentinel printed by `claude mcp list` when nothing is registered
NO_SERVERS_SENTINEL = "No MCP servers configured"

CONNECTED_GLYPH = "✓"
FAILED_GLYPH = "✗"

# ABOUTME: Decorations the CLI appends after a command, longest first
STATUS_SUFFIXES: tuple[str, ...] = (
    " - ✓ Connected",
    " - ✗ Failed to connect",
    " - ✓ connected",
    " - ✗ failed",
    " - ✓",
    " - ✗",
)

PATH_SEPARATORS = ("/", "\\")


@dataclass(frozen=True)
class ListEntry:
    """One record line of `claude mcp list`.

    ABOUTME: summary is the text after the colon with status decoration removed
    """
    name: str
    summary: str
    connected: bool


def clean_command_string(value: str) -> str:
    """Strip a trailing connectivity decoration from a command string.

    ABOUTME: Truncates at the first known suffix pattern found

    Examples:
        >>> clean_command_string("npx -y @mcp/server-github - ✓ Connected")
        'npx -y @mcp/server-github'
        >>> clean_command_string("node server.js")
        'node server.js'
    """
    for pattern in STATUS_SUFFIXES:
        pos = value.find(pattern)
        if pos != -1:
            return value[:pos].strip()
    return value.strip()


def record_name(line: str) -> str | None:
    """Return the record name a line opens, or None for other lines.

    ABOUTME: A line opens a record iff it has a colon and the text before the
    ABOUTME: first colon is non-empty and free of path separators
    """
    head, sep, _rest = line.partition(":")
    if not sep:
        return None
    name = head.strip()
    if not name or any(s in name for s in PATH_SEPARATORS):
        return None
    return name


def parse_list_entries(output: str) -> list[ListEntry]:
    """Split `claude mcp list` output into record entries.

    Lines that do not open a record are continuation lines of the record
    above them (or preamble before the first one) and are dropped.
    Names containing a literal colon are mis-segmented; that is a known
    limitation of the text format.

    Args:
        output: Raw stdout of `claude mcp list`

    Returns:
        Entries in first-seen order, one per distinct name
    """
    trimmed = output.strip()
    if not trimmed or NO_SERVERS_SENTINEL in trimmed:
        logger.debug("No servers found in list output")
        return []

    entries: list[ListEntry] = []
    seen: set[str] = set()

    for idx, line in enumerate(trimmed.splitlines()):
        name = record_name(line)
        if name is None:
            logger.debug(f"Line {idx} is a continuation line: {line!r}")
            continue
        if name in seen:
            logger.debug(f"Line {idx} repeats record {name!r}, skipping")
            continue

        seen.add(name)
        rest = line.partition(":")[2]
        entries.append(
            ListEntry(
                name=name,
                summary=clean_command_string(rest),
                connected=CONNECTED_GLYPH in rest,
            )
        )
        logger.debug(f"Line {idx} opens record {name!r}")

    return entries


def parse_list_names(output: str) -> list[str]:
    """Return the record names of `claude mcp list` output in first-seen order."""
    return [entry.name for entry in parse_list_entries(output)]


def _set_scope(record: ServerRecord, value: str) -> None:
    lowered = value.lower()
    if "local" in lowered:
        record.scope = "local"
    elif "project" in lowered:
        record.scope = "project"
    elif "user" in lowered or "global" in lowered:
        record.scope = "user"


def _set_status(record: ServerRecord, value: str) -> None:
    lowered = value.lower()
    if CONNECTED_GLYPH in value or "connected" in lowered:
        record.status.running = True
    elif FAILED_GLYPH in value or "failed" in lowered:
        record.status.running = False
        record.status.error = value


def _set_transport(record: ServerRecord, value: str) -> None:
    record.transport = value


def _set_command(record: ServerRecord, value: str) -> None:
    record.command = value


def _set_args(record: ServerRecord, value: str) -> None:
    if value:
        record.args = value.split()


def _set_url(record: ServerRecord, value: str) -> None:
    record.url = value


def _ignore(record: ServerRecord, value: str) -> None:
    # The CLI does not list env values reliably in this view
    pass


# ABOUTME: Line prefix -> setter, matched case-sensitively at line start
DETAIL_FIELDS: dict[str, Callable[[ServerRecord, str], None]] = {
    "Scope:": _set_scope,
    "Status:": _set_status,
    "Type:": _set_transport,
    "Command:": _set_command,
    "Args:": _set_args,
    "URL:": _set_url,
    "Environment:": _ignore,
}

# ABOUTME: Fields that keep their first occurrence
FIRST_MATCH_ONLY = frozenset({"Scope:"})


def parse_server_details(name: str, output: str, now: float | None = None) -> ServerRecord:
    """Build a ServerRecord from `claude mcp get <name>` output.

    ABOUTME: Unrecognized lines are ignored so new CLI fields do not break parsing
    ABOUTME: env is always empty from this path

    Args:
        name: Record name the output belongs to
        output: Raw stdout of `claude mcp get <name>`
        now: Epoch seconds for last_checked, defaults to the current time

    Returns:
        Fully populated record; scope defaults to "local", transport to "stdio"
    """
    record = ServerRecord(name=name)
    applied: set[str] = set()

    for raw_line in output.splitlines():
        line = raw_line.strip()
        for prefix, setter in DETAIL_FIELDS.items():
            if not line.startswith(prefix):
                continue
            if prefix in FIRST_MATCH_ONLY and prefix in applied:
                break
            setter(record, line[len(prefix):].strip())
            applied.add(prefix)
            break

    record.status.last_checked = int(time.time() if now is None else now)
    return record
