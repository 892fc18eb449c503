"""VSWR / FPWR status buckets."""

from __future__ import annotations

from enum import Enum

VSWR_WARNING_MAX = 2.0

FPWR_GOOD_MAX = 100.0
FPWR_WARNING_MAX = 150.0

DEFAULT_EXPECTED_SWR_MAX = 1.5


class Status(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"
    NO_DATA = "no_data"


def vswr_status(value: float | None, expected_max: float = DEFAULT_EXPECTED_SWR_MAX) -> Status:
    """Bucket a VSWR reading against the channel's expected maximum.

    Below ``expected_max`` is good, below 2.0 is a warning, anything else
    is critical.
    """
    if value is None:
        return Status.NO_DATA
    if value < expected_max:
        return Status.GOOD
    if value < VSWR_WARNING_MAX:
        return Status.WARNING
    return Status.CRITICAL


def fpwr_status(value: float | None) -> Status:
    if value is None:
        return Status.NO_DATA
    if value <= FPWR_GOOD_MAX:
        return Status.GOOD
    if value <= FPWR_WARNING_MAX:
        return Status.WARNING
    return Status.CRITICAL
