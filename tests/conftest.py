"""Shared pytest configuration and fixtures."""

import asyncio
import time

import pytest

from locdog.services.executor import CommandExecutor
from locdog.utils.logger import setup_logger


class FakeExecutor(CommandExecutor):
    """
    Executor returning scripted outcomes instead of spawning processes.

    Outcomes are keyed by the command's executable (``cmd[0]``). A value may
    be a bool, an exception instance to raise, or a callable returning either.
    """

    def __init__(self, outcomes=None, default=True, delay=0.0):
        self.outcomes = dict(outcomes or {})
        self.default = default
        self.delay = delay
        self.calls = []  # (argv, timeout, monotonic time)

    async def run(self, cmd, timeout=None):
        self.calls.append((list(cmd), timeout, time.monotonic()))
        if self.delay:
            await asyncio.sleep(self.delay)

        outcome = self.outcomes.get(cmd[0], self.default)
        if callable(outcome) and not isinstance(outcome, BaseException):
            outcome = outcome()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def calls_for(self, executable):
        """Return the call times of every invocation of *executable*."""
        return [at for argv, _, at in self.calls if argv[0] == executable]


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds
        return self.now


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test", "DEBUG")


@pytest.fixture
def make_executor():
    """Factory for scripted fake executors."""
    return FakeExecutor


@pytest.fixture
def clock():
    """Fake wall clock starting at t=1000."""
    return FakeClock()


@pytest.fixture
def write_config(tmp_path):
    """Write a config document to a temp file and return its path."""
    def _write(content, filename="config.yaml"):
        path = tmp_path / filename
        path.write_text(content)
        return str(path)
    return _write
