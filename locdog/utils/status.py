"""Target evaluation outcome enumeration."""

from enum import Enum


class TargetStatus(Enum):
    """Outcome of evaluating one target against its threshold."""

    OK = "ok"
    ALERT = "alert"
    NO_DATA = "no_data"
    UNKNOWN = "unknown"
