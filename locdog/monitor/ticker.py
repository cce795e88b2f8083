"""Periodic synthetic results that keep no-data evaluation alive."""

import asyncio
import logging
from typing import Iterable, List

from .models import Result


NODATA_TICK_SECONDS = 1.0


class NoDataTicker:
    """
    Emits one synthetic result per target on every tick.

    A stalled or dead watcher produces no results, so without these ticks
    the server would never re-evaluate that target's no-data threshold.
    """

    def __init__(
        self,
        names: Iterable[str],
        results: asyncio.Queue,
        stop_event: asyncio.Event,
        logger: logging.Logger,
        period: float = NODATA_TICK_SECONDS
    ):
        if period <= 0:
            raise ValueError("Ticker period must be positive")
        self.names: List[str] = list(names)
        self.results = results
        self.stop_event = stop_event
        self.period = period
        self.logger = logger.getChild(self.__class__.__name__)

    async def run(self) -> None:
        """Tick until the stop event is set."""
        self.logger.info(
            f"No-data ticker started for {len(self.names)} target(s)",
            extra={"period": self.period}
        )

        while True:
            try:
                await asyncio.wait_for(self.stop_event.wait(), timeout=self.period)
                break
            except asyncio.TimeoutError:
                pass

            await self.tick()

        self.logger.info("No-data ticker stopped")

    async def tick(self) -> None:
        """Send one synthetic result per target."""
        for name in self.names:
            if self.stop_event.is_set():
                return
            await self.results.put(Result.synthetic(name))
