"""Periodic probing of a single target."""

import asyncio
import logging
import time
from typing import Callable, List, Optional, Set

from ..config.models import TargetConfig
from ..services.executor import CommandExecutor
from .models import Result


class Watcher:
    """
    Drives the watch command of one target on a fixed period.

    Each tick launches the probe as its own task, so a slow probe never
    delays the schedule and several probes of the same target may be in
    flight at once. Completed probes are put on the shared result queue.
    """

    def __init__(
        self,
        config: TargetConfig,
        executor: CommandExecutor,
        results: asyncio.Queue,
        stop_event: asyncio.Event,
        logger: logging.Logger,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize watcher.

        Args:
            config: Target configuration with defaults applied
            executor: Runs the watch command
            results: Shared queue consumed by the server
            stop_event: Shared cancellation signal
            logger: Logger instance
            clock: Wall-clock source for probe start times
        """
        if config.interval is None:
            raise ValueError(f"Target {config.name} has no interval")

        self.name = config.name
        self.interval = config.interval
        self.timeout = config.timeout
        self.watch_cmd: List[str] = list(config.watch_cmd)
        self.executor = executor
        self.results = results
        self.stop_event = stop_event
        self.clock = clock
        self.logger = logger.getChild(self.__class__.__name__).getChild(self.name)
        self._inflight: Set[asyncio.Task] = set()
        self._error: Optional[BaseException] = None
        self._crashed = asyncio.Event()

    @property
    def inflight(self) -> int:
        """Number of probes currently running."""
        return len(self._inflight)

    async def run(self) -> None:
        """Schedule probes until the stop event is set."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time()

        self.logger.info(
            f"Watching {self.name} every {self.interval}s",
            extra={"target": self.name, "interval": self.interval, "timeout": self.timeout}
        )

        while not self.stop_event.is_set():
            if self._error is not None:
                raise self._error
            self._launch_probe()

            # Fixed period: the next tick does not shift with probe latency
            next_tick += self.interval
            await self._sleep_until(max(0.0, next_tick - loop.time()))

        if self._error is not None:
            raise self._error
        self.logger.info(f"Watcher for {self.name} stopped", extra={"target": self.name})

    async def _sleep_until(self, delay: float) -> None:
        """Sleep for *delay* seconds, waking early on stop or a crashed probe."""
        waiters = {
            asyncio.ensure_future(self.stop_event.wait()),
            asyncio.ensure_future(self._crashed.wait()),
        }
        try:
            await asyncio.wait(waiters, timeout=delay, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()

    def _launch_probe(self) -> None:
        task = asyncio.ensure_future(self.probe())
        self._inflight.add(task)
        task.add_done_callback(self._on_probe_done)

    def _on_probe_done(self, task: asyncio.Task) -> None:
        self._inflight.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None and self._error is None:
            self.logger.error(
                f"Probe for {self.name} crashed: {error}",
                extra={"target": self.name, "error_type": type(error).__name__}
            )
            self._error = error
            # Wakes run() so it raises without waiting for the next tick
            self._crashed.set()

    async def probe(self) -> Optional[Result]:
        """
        Run the watch command once and report the outcome.

        Returns:
            Result: The emitted result, or None if shutdown began meanwhile
        """
        started = self.clock()
        succeeded = await self.executor.run(self.watch_cmd, timeout=self.timeout)
        result = Result(name=self.name, succeeded=succeeded, timestamp=started)

        self.logger.debug(
            f"Probe {'succeeded' if succeeded else 'failed'} for {self.name}",
            extra={"target": self.name, "succeeded": succeeded, "started": started}
        )

        # Nobody consumes results after shutdown
        if self.stop_event.is_set():
            return None

        await self.results.put(result)
        return result

    async def drain(self, grace: Optional[float] = None) -> None:
        """
        Wait for in-flight probes, cancelling any still running after *grace*.

        Args:
            grace: Seconds to wait, None to wait indefinitely
        """
        if not self._inflight:
            return

        pending = set(self._inflight)
        _, still_running = await asyncio.wait(pending, timeout=grace)
        for task in still_running:
            task.cancel()
        if still_running:
            self.logger.warning(
                f"Cancelled {len(still_running)} probe(s) for {self.name} at shutdown",
                extra={"target": self.name}
            )
            await asyncio.gather(*still_running, return_exceptions=True)
