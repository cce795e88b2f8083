"""Command execution for watch, alert and no-data commands."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence


class CommandExecutor(ABC):
    """Runs an external command and reports only whether it succeeded."""

    @abstractmethod
    async def run(self, cmd: Sequence[str], timeout: Optional[float] = None) -> bool:
        """
        Run a command to completion.

        Args:
            cmd: Executable followed by its arguments
            timeout: Seconds to wait before giving up, None for no limit

        Returns:
            bool: True iff the command exited 0 within the timeout

        Note:
            Implementations must not raise for ordinary command failures;
            a failed, timed-out or unlaunchable command is just False.
        """
        pass


class SubprocessExecutor(CommandExecutor):
    """Executor backed by asyncio subprocesses."""

    def __init__(self, logger: logging.Logger = None):
        """
        Initialize subprocess executor.

        Args:
            logger: Optional logger instance
        """
        logger = logger or logging.getLogger(__name__)
        self.logger = logger.getChild(self.__class__.__name__)

    async def run(self, cmd: Sequence[str], timeout: Optional[float] = None) -> bool:
        if not cmd:
            raise ValueError("Cannot run an empty command")

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            self.logger.warning(
                f"Failed to launch {cmd[0]}: {e}",
                extra={"command": list(cmd)}
            )
            return False

        try:
            exit_code = await asyncio.wait_for(proc.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            self.logger.debug(
                f"Command timed out after {timeout}s: {cmd[0]}",
                extra={"command": list(cmd), "pid": proc.pid}
            )
            await self._kill(proc)
            return False
        except asyncio.CancelledError:
            await self._kill(proc)
            raise

        self.logger.debug(
            f"Command exited with code {exit_code}: {cmd[0]}",
            extra={"command": list(cmd), "exit_code": exit_code}
        )
        return exit_code == 0

    async def _kill(self, proc: asyncio.subprocess.Process) -> None:
        """Kill a child process and reap it."""
        if proc.returncode is not None:
            return
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()
