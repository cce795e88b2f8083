"""Central result consumer and alert router."""

import asyncio
import logging
import time
from typing import Callable, Dict, Iterable, List, Optional, Set

from ..services.executor import CommandExecutor
from ..utils.status import TargetStatus
from .models import Result, Target


class Server:
    """
    Single consumer of the result queue.

    The server is the only owner of target state and the only issuer of
    alert and no-data commands. Results are handled strictly one at a time
    in receive order, which is what keeps target mutation lock-free.

    Commands are dispatched without waiting for them, and every qualifying
    result fires again: there is no de-duplication or cool-down.
    """

    def __init__(
        self,
        targets: Iterable[Target],
        executor: CommandExecutor,
        results: asyncio.Queue,
        stop_event: asyncio.Event,
        logger: logging.Logger,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize server.

        Args:
            targets: Targets to own, keyed by their unique name
            executor: Runs alert and no-data commands
            results: Shared result queue; ``None`` on it closes the server
            stop_event: Shared cancellation signal
            logger: Logger instance
            clock: Wall-clock source used for threshold evaluation
        """
        self.targets: Dict[str, Target] = {t.name: t for t in targets}
        self.executor = executor
        self.results = results
        self.stop_event = stop_event
        self.clock = clock
        self.logger = logger.getChild(self.__class__.__name__)
        self._dispatched: Set[asyncio.Task] = set()

    @property
    def pending_commands(self) -> int:
        """Number of dispatched commands still running."""
        return len(self._dispatched)

    async def run(self) -> None:
        """Consume results until the stop event is set or the queue is closed."""
        self.logger.info(
            f"Server started with {len(self.targets)} target(s)",
            extra={"targets": sorted(self.targets)}
        )

        stop_waiter = asyncio.ensure_future(self.stop_event.wait())
        try:
            while True:
                getter = asyncio.ensure_future(self.results.get())
                await asyncio.wait({getter, stop_waiter}, return_when=asyncio.FIRST_COMPLETED)

                if not getter.done():
                    getter.cancel()
                    break

                result = getter.result()
                if result is None:
                    self.logger.info("Result queue closed")
                    break
                self.handle(result)
        finally:
            stop_waiter.cancel()

        self.logger.info("Server stopped")

    def handle(self, result: Result) -> TargetStatus:
        """
        Apply one result to its target and fire whatever is due.

        No-data takes precedence: when it fires, alert evaluation is skipped
        for this result.

        Args:
            result: Result to process

        Returns:
            TargetStatus: What this evaluation fired, UNKNOWN for unknown targets
        """
        target = self.targets.get(result.name)
        if target is None:
            self.logger.warning(
                f"Result for unknown target {result.name}",
                extra={"target": result.name}
            )
            return TargetStatus.UNKNOWN

        target.observe(result)
        now = self.clock()

        if target.nodata_cmd and target.is_silent(now):
            self.logger.warning(
                f"No data from {target.name} for {target.silent_for(now):.1f}s",
                extra={"target": target.name, "threshold": target.threshold}
            )
            self._dispatch(target, target.nodata_cmd, TargetStatus.NO_DATA)
            return TargetStatus.NO_DATA

        if target.alert_cmd and target.is_failing(now):
            self.logger.warning(
                f"No success from {target.name} for {target.failing_for(now):.1f}s",
                extra={"target": target.name, "threshold": target.threshold}
            )
            self._dispatch(target, target.alert_cmd, TargetStatus.ALERT)
            return TargetStatus.ALERT

        return TargetStatus.OK

    def _dispatch(self, target: Target, cmd: List[str], kind: TargetStatus) -> None:
        """Fire a command without waiting for it."""
        task = asyncio.ensure_future(self.executor.run(cmd, timeout=target.timeout))
        self._dispatched.add(task)

        def _done(t: asyncio.Task) -> None:
            self._dispatched.discard(t)
            if t.cancelled():
                return
            error = t.exception()
            if error is not None:
                self.logger.debug(
                    f"{kind.value} command for {target.name} raised: {error}",
                    extra={"target": target.name, "error_type": type(error).__name__}
                )
            else:
                self.logger.debug(
                    f"{kind.value} command for {target.name} finished",
                    extra={"target": target.name, "succeeded": t.result()}
                )

        task.add_done_callback(_done)

    async def drain(self, grace: Optional[float] = None) -> None:
        """
        Wait for dispatched commands, cancelling any still running after *grace*.

        Args:
            grace: Seconds to wait, None to wait indefinitely
        """
        if not self._dispatched:
            return

        _, still_running = await asyncio.wait(set(self._dispatched), timeout=grace)
        for task in still_running:
            task.cancel()
        if still_running:
            self.logger.warning(f"Cancelled {len(still_running)} command(s) at shutdown")
            await asyncio.gather(*still_running, return_exceptions=True)
