"""Pydantic configuration models for locdog."""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional


# Fields a target may leave unset; each falls back to ``default_<field>``.
DEFAULTED_FIELDS = ("interval", "threshold", "timeout", "alert_cmd", "nodata_cmd")


def _empty_command_to_none(v: Optional[List[str]]) -> Optional[List[str]]:
    """An empty command list means "not configured"."""
    if v is not None and len(v) == 0:
        return None
    return v


class TargetConfig(BaseModel):
    """Configuration for a single watched target."""
    name: str = Field(min_length=1)
    watch_cmd: List[str] = Field(min_length=1)
    interval: Optional[float] = Field(default=None, gt=0)  # seconds between probes
    threshold: Optional[float] = Field(default=None, gt=0)  # seconds of failure/silence tolerated
    timeout: Optional[float] = Field(default=None, gt=0)  # per-command timeout, None = unbounded
    alert_cmd: Optional[List[str]] = None
    nodata_cmd: Optional[List[str]] = None

    @field_validator('alert_cmd', 'nodata_cmd')
    @classmethod
    def normalize_command(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _empty_command_to_none(v)

    @field_validator('interval', 'threshold', 'timeout', mode='before')
    @classmethod
    def zero_duration_to_none(cls, v):
        """A zero duration means "use the default"; negatives still fail gt=0."""
        if v == 0 and not isinstance(v, bool):
            return None
        return v

    @field_validator('watch_cmd')
    @classmethod
    def validate_watch_cmd(cls, v: List[str]) -> List[str]:
        """The executable itself must be named."""
        if not v[0].strip():
            raise ValueError('watch_cmd must start with an executable')
        return v

    def with_defaults(self, config: "WatchdogConfig") -> "TargetConfig":
        """
        Fill every unset field from the matching process-wide default.

        Fields already set are left untouched, so applying this twice gives
        the same result as applying it once.

        Args:
            config: Root configuration holding the ``default_*`` values

        Returns:
            TargetConfig: A new, filled copy of this target
        """
        updates = {
            field: getattr(config, f"default_{field}")
            for field in DEFAULTED_FIELDS
            if getattr(self, field) is None
        }
        return self.model_copy(update=updates)


class WatchdogConfig(BaseModel):
    """Root configuration model for the watchdog."""
    default_interval: float = Field(default=60.0, gt=0)
    default_threshold: float = Field(default=300.0, gt=0)
    default_timeout: Optional[float] = Field(default=None, gt=0)
    default_alert_cmd: Optional[List[str]] = None
    default_nodata_cmd: Optional[List[str]] = None
    targets: List[TargetConfig] = Field(default_factory=list)

    @field_validator('default_alert_cmd', 'default_nodata_cmd')
    @classmethod
    def normalize_default_command(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _empty_command_to_none(v)

    @model_validator(mode='after')
    def unique_target_names(self) -> "WatchdogConfig":
        """Target names identify results, so they must not repeat."""
        seen = set()
        for target in self.targets:
            if target.name in seen:
                raise ValueError(f'Duplicate target name: {target.name}')
            seen.add(target.name)
        return self

    def effective_targets(self) -> List[TargetConfig]:
        """Return every target with process-wide defaults applied."""
        return [target.with_defaults(self) for target in self.targets]
