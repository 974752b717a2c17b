"""
Time range validation and auto-adjustment.

A range is valid when it ends after it starts and lasts at least the
minimum duration. adjust() repairs short or inverted ranges by pushing the
end forward; the start never moves, so a task is never shifted earlier
than where the user put it.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from .interval import Interval
from .timezone_utils import to_local_datetime


class TimeRangeError(ValueError):
    """Raised when no positive-duration range can be produced."""


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class Adjustment:
    interval: Interval
    was_adjusted: bool


def _check_minimum(minimum_duration: timedelta):
    if minimum_duration < timedelta(0):
        raise ValueError(f"minimum_duration must not be negative, got {minimum_duration}")


def validate(interval: Interval, minimum_duration: timedelta) -> ValidationResult:
    _check_minimum(minimum_duration)
    if interval.end <= interval.start:
        return ValidationResult(False, "end must be after start")
    if interval.end - interval.start < minimum_duration:
        minutes = int(minimum_duration.total_seconds() // 60)
        return ValidationResult(False, f"duration is shorter than the {minutes} minute minimum")
    return ValidationResult(True)


def adjust(interval: Interval, minimum_duration: timedelta) -> Adjustment:
    """
    Return a valid version of ``interval``.

    Raises TimeRangeError only when the result would still not have a
    positive duration (a zero minimum applied to an inverted range).
    """
    if validate(interval, minimum_duration).valid:
        return Adjustment(interval, False)

    adjusted = Interval(interval.start, to_local_datetime(interval.start + minimum_duration))
    if not adjusted.is_positive():
        raise TimeRangeError(
            f"cannot produce a positive range from {interval.start} - {interval.end}"
        )
    return Adjustment(adjusted, True)
