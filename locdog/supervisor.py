"""Wiring and supervision of watchers, ticker and server."""

import asyncio
import logging
import time
from typing import Callable, Dict, List, Optional

from .config.models import WatchdogConfig
from .monitor.models import Target
from .monitor.server import Server
from .monitor.ticker import NoDataTicker, NODATA_TICK_SECONDS
from .monitor.watcher import Watcher
from .services.executor import CommandExecutor, SubprocessExecutor
from .utils.logger import setup_logger


RESULT_QUEUE_SIZE = 100
SHUTDOWN_GRACE_SECONDS = 10.0


class Supervisor:
    """
    Builds every component from a configuration snapshot and runs them as one group.

    All components share one stop event. When any of them finishes, for
    whatever reason, the stop event is set and the rest of the group is
    wound down; the first exception raised by a component is re-raised
    from ``run()``.
    """

    def __init__(
        self,
        config: WatchdogConfig,
        logger: logging.Logger = None,
        executor: Optional[CommandExecutor] = None,
        clock: Callable[[], float] = time.time,
        tick_period: float = NODATA_TICK_SECONDS,
        queue_size: int = RESULT_QUEUE_SIZE,
        shutdown_grace: float = SHUTDOWN_GRACE_SECONDS
    ):
        """
        Initialize supervisor.

        Args:
            config: Validated configuration
            logger: Optional logger instance
            executor: Command executor, defaults to real subprocesses
            clock: Wall-clock source shared by watchers and server
            tick_period: No-data ticker period in seconds
            queue_size: Capacity of the shared result queue
            shutdown_grace: Seconds to wait for in-flight work when stopping
        """
        self.config = config
        self.logger = logger or setup_logger("supervisor")
        self.executor = executor or SubprocessExecutor(self.logger)
        self.clock = clock
        self.tick_period = tick_period
        self.queue_size = queue_size
        self.shutdown_grace = shutdown_grace

        self.stop_event: Optional[asyncio.Event] = None
        self.results: Optional[asyncio.Queue] = None
        self.server: Optional[Server] = None
        self.ticker: Optional[NoDataTicker] = None
        self.watchers: Dict[str, Watcher] = {}

    def _build(self) -> None:
        """Create queue, stop event and components inside the running loop."""
        self.stop_event = asyncio.Event()
        self.results = asyncio.Queue(maxsize=self.queue_size)

        target_configs = self.config.effective_targets()
        now = self.clock()
        targets: List[Target] = [Target.from_config(tc, now) for tc in target_configs]

        self.server = Server(
            targets, self.executor, self.results, self.stop_event, self.logger, clock=self.clock
        )
        self.ticker = NoDataTicker(
            [t.name for t in targets], self.results, self.stop_event, self.logger,
            period=self.tick_period
        )
        self.watchers = {
            tc.name: Watcher(
                tc, self.executor, self.results, self.stop_event, self.logger, clock=self.clock
            )
            for tc in target_configs
        }

        self.logger.info(f"Initialized {len(self.watchers)} watcher(s)")

    def stop(self) -> None:
        """Signal every component to stop scheduling new work."""
        if self.stop_event is not None and not self.stop_event.is_set():
            self.logger.info("Stop requested")
            self.stop_event.set()

    async def run(self) -> None:
        """
        Run all components until one of them finishes.

        Raises:
            Exception: The first exception raised by any component
        """
        self._build()

        tasks: Dict[asyncio.Task, str] = {
            asyncio.ensure_future(self.server.run()): "server",
            asyncio.ensure_future(self.ticker.run()): "ticker",
        }
        for name, watcher in self.watchers.items():
            tasks[asyncio.ensure_future(watcher.run())] = f"watcher:{name}"

        error: Optional[BaseException] = None
        try:
            done, _ = await asyncio.wait(set(tasks), return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                if not task.cancelled() and task.exception() is not None:
                    error = task.exception()
                    self.logger.error(
                        f"{tasks[task]} failed: {error}",
                        exc_info=error,
                        extra={"component": tasks[task], "error_type": type(error).__name__}
                    )
                    break
            else:
                first = next(iter(done))
                self.logger.info(f"{tasks[first]} finished, shutting down")
        finally:
            self.stop()
            await self._shutdown(tasks)

        if error is not None:
            raise error

    async def _shutdown(self, tasks: Dict[asyncio.Task, str]) -> None:
        """Wind down components, then drain probes and dispatched commands."""
        pending = [t for t in tasks if not t.done()]
        if pending:
            _, stragglers = await asyncio.wait(pending, timeout=self.shutdown_grace)
            for task in stragglers:
                self.logger.warning(f"Cancelling {tasks[task]}")
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        await asyncio.gather(
            *(w.drain(self.shutdown_grace) for w in self.watchers.values()),
            self.server.drain(self.shutdown_grace)
        )
        self.logger.info("All components stopped")
