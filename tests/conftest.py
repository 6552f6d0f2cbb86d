# ABOUTME: Shared fixtures for mcpsync tests
# ABOUTME: FakeInvoker stands in for the claude CLI and records every call
import logging
from typing import Sequence

import pytest

from mcpsync.errors import ExecutionError
from mcpsync.models import CommandOutput


class FakeInvoker:
    """CommandInvoker that answers from a script instead of spawning processes.

    Responses are keyed by the full argument tuple. A str value is returned
    as stdout, an Exception value is raised. Unscripted calls succeed with
    empty output.
    """

    def __init__(self, responses: dict[tuple[str, ...], str | Exception] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[list[str]] = []
        self.spawned: list[list[str]] = []

    def respond(self, args: Sequence[str], result: str | Exception) -> None:
        self.responses[tuple(args)] = result

    def fail(self, args: Sequence[str], stderr: str = "boom") -> None:
        self.respond(args, ExecutionError(stderr, returncode=1, args=args))

    def run(self, args: Sequence[str]) -> CommandOutput:
        self.calls.append(list(args))
        result = self.responses.get(tuple(args), "")
        if isinstance(result, Exception):
            raise result
        return CommandOutput(stdout=result)

    def spawn(self, args: Sequence[str]) -> None:
        self.spawned.append(list(args))
        result = self.responses.get(tuple(args))
        if isinstance(result, Exception):
            raise result


@pytest.fixture
def invoker() -> FakeInvoker:
    return FakeInvoker()


@pytest.fixture
def isolated_logging():
    """Drop handlers installed by configure_logging during a test."""
    logger = logging.getLogger("mcpsync")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    for handler in logger.handlers[:]:
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
