# ABOUTME: Runs `claude mcp <subcommand>` as a child process
# ABOUTME: One process per call, no retries and no timeout
import logging
import subprocess
from typing import Sequence

from mcpsync.errors import ExecutionError
from mcpsync.locator import ClaudeBinaryLocator
from mcpsync.models import BinaryLocator, CommandOutput
from mcpsync.utils.env import build_command_env

logger = logging.getLogger(__name__)


def decode_output(data: bytes | None) -> str:
    """Decode captured process output as UTF-8, replacing bad bytes."""
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


class ClaudeInvoker:
    """CommandInvoker backed by the real claude CLI.

    ABOUTME: Locates the binary on every call so a fresh install is picked up
    ABOUTME: Spawned `serve` processes are kept referenced, never waited on
    """

    def __init__(self, locator: BinaryLocator | None = None) -> None:
        self._locator = locator if locator is not None else ClaudeBinaryLocator()
        self._spawned: list[subprocess.Popen[bytes]] = []

    def _command_line(self, args: Sequence[str]) -> tuple[list[str], dict[str, str]]:
        binary = self._locator.locate()
        return [str(binary), "mcp", *args], build_command_env(binary)

    def run(self, args: Sequence[str]) -> CommandOutput:
        """Run `claude mcp <args>` to completion.

        Args:
            args: Subcommand followed by its arguments

        Returns:
            Decoded stdout and exit status

        Raises:
            NotFoundError: If the binary cannot be located
            ExecutionError: If the process cannot start or exits non-zero
        """
        cmd, env = self._command_line(args)
        logger.info(f"Executing claude mcp command with args: {list(args)}")

        try:
            completed = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                env=env,
            )
        except OSError as e:
            raise ExecutionError(str(e), args=args) from e

        if completed.returncode != 0:
            stderr = decode_output(completed.stderr).strip()
            raise ExecutionError(
                stderr or f"exit code {completed.returncode}",
                returncode=completed.returncode,
                args=args,
            )

        return CommandOutput(stdout=decode_output(completed.stdout), returncode=0)

    def spawn(self, args: Sequence[str]) -> None:
        """Start `claude mcp <args>` in the background and return immediately.

        Raises:
            NotFoundError: If the binary cannot be located
            ExecutionError: If the process cannot start
        """
        cmd, env = self._command_line(args)
        logger.info(f"Spawning claude mcp command with args: {list(args)}")

        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                env=env,
            )
        except OSError as e:
            raise ExecutionError(str(e), args=args) from e

        # Reap children that already exited
        self._spawned = [p for p in self._spawned if p.poll() is None]
        self._spawned.append(process)
