"""Liveness data structures shared by watchers and the server."""

from dataclasses import dataclass
from typing import List, Optional

from ..config.models import TargetConfig


# Timestamp carried by results that do not come from a real probe.
SYNTHETIC_TIMESTAMP = 0.0


@dataclass(frozen=True)
class Result:
    """Outcome of one probe attempt, real or synthetic."""

    name: str
    succeeded: bool
    timestamp: float  # Wall-clock time the probe started

    @classmethod
    def synthetic(cls, name: str) -> "Result":
        """Placeholder result that only forces re-evaluation of *name*."""
        return cls(name=name, succeeded=False, timestamp=SYNTHETIC_TIMESTAMP)

    @property
    def is_synthetic(self) -> bool:
        return self.timestamp == SYNTHETIC_TIMESTAMP


@dataclass
class Target:
    """
    Mutable liveness record for one monitored entity.

    Only the server mutates targets, so no locking is needed.
    """

    name: str
    threshold: float
    last_success: float
    last_data: float
    alert_cmd: Optional[List[str]] = None
    nodata_cmd: Optional[List[str]] = None
    timeout: Optional[float] = None

    @classmethod
    def from_config(cls, config: TargetConfig, now: float) -> "Target":
        """
        Build a target from a defaults-filled config.

        Both timestamps start at *now*, giving a new target one full
        threshold before it can alert.

        Args:
            config: Target configuration with defaults applied
            now: Registration time

        Returns:
            Target: Fresh liveness record
        """
        if config.threshold is None:
            raise ValueError(f"Target {config.name} has no threshold")
        return cls(
            name=config.name,
            threshold=config.threshold,
            last_success=now,
            last_data=now,
            alert_cmd=config.alert_cmd,
            nodata_cmd=config.nodata_cmd,
            timeout=config.timeout,
        )

    def observe(self, result: Result) -> bool:
        """
        Apply a result, ignoring anything older than what is recorded.

        Each timestamp only moves forward: ``last_data`` advances for any
        newer result, ``last_success`` only for a newer successful one.
        Synthetic results therefore never change state.

        Args:
            result: Result addressed to this target

        Returns:
            bool: True if either timestamp advanced
        """
        changed = False
        if result.timestamp > self.last_data:
            self.last_data = result.timestamp
            changed = True
        if result.succeeded and result.timestamp > self.last_success:
            self.last_success = result.timestamp
            changed = True
        return changed

    def silent_for(self, now: float) -> float:
        """Seconds since the newest result of any outcome."""
        return now - self.last_data

    def failing_for(self, now: float) -> float:
        """Seconds since the newest successful probe."""
        return now - self.last_success

    def is_silent(self, now: float) -> bool:
        return self.silent_for(now) > self.threshold

    def is_failing(self, now: float) -> bool:
        return self.failing_for(now) > self.threshold
