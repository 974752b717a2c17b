"""
Reschedule and resize engines.

Both turn the outcome of a pointer gesture into a new interval for a task.
Neither touches storage: the caller decides whether and how to persist the
result. Every result goes through the validator so the two engines report
adjustments the same way.
"""

from dataclasses import dataclass
from datetime import datetime, date, time as dt_time, timedelta
from enum import Enum
from typing import Optional, Union

from .geometry import slot_minutes
from .interval import Interval, duration
from .layout import LayoutSettings
from .task import Task, effective_interval
from .timezone_utils import combine_like, to_local_datetime
from .validation import Adjustment, adjust


class ResizeEdge(Enum):
    START = "start"
    END = "end"


@dataclass(frozen=True)
class DropTarget:
    """A grid slot a task was dropped on."""
    day: date
    hour: int
    quarter_index: int

    @classmethod
    def from_key(cls, day_key: str, hour: int, quarter_index: int) -> 'DropTarget':
        """Build from a ``YYYY-MM-DD`` day key."""
        return cls(date.fromisoformat(day_key), hour, quarter_index)

    @property
    def day_key(self) -> str:
        return self.day.isoformat()


@dataclass(frozen=True)
class RescheduleResult:
    task_id: int
    original: Interval
    interval: Interval
    was_adjusted: bool


@dataclass(frozen=True)
class ResizeResult:
    task_id: int
    original: Interval
    interval: Interval
    edge: ResizeEdge
    was_adjusted: bool


GestureResult = Union[RescheduleResult, ResizeResult]


def _shift(moment: datetime, delta: timedelta) -> datetime:
    return to_local_datetime(moment + delta)


def drop_start(reference: datetime, drop: DropTarget, quarter_count: int = 4) -> datetime:
    """Start time designated by a drop slot, with the awareness of ``reference``."""
    if not 0 <= drop.hour <= 23:
        raise ValueError(f"drop hour out of range: {drop.hour}")
    if not 0 <= drop.quarter_index < quarter_count:
        raise ValueError(f"drop slot out of range: {drop.quarter_index}")
    minute = slot_minutes(drop.quarter_index, quarter_count)
    # Wall-clock times skipped by a DST change resolve to the real instant
    return to_local_datetime(combine_like(reference, drop.day, dt_time(drop.hour, minute)))


def _reschedule(original: Interval, drop: DropTarget, minimum_duration: timedelta,
                quarter_count: int) -> Adjustment:
    new_start = drop_start(original.start, drop, quarter_count)
    candidate = Interval(new_start, _shift(new_start, duration(original)))
    return adjust(candidate, minimum_duration)


def reschedule(original: Interval, drop: DropTarget,
               minimum_duration: timedelta = timedelta(0), quarter_count: int = 4) -> Interval:
    """
    Move ``original`` so it starts at the drop slot, keeping its duration.

    With the default zero minimum the duration is always preserved; a
    positive minimum lengthens originals shorter than it.
    """
    return _reschedule(original, drop, minimum_duration, quarter_count).interval


def pixels_to_delta(delta_px: float, hour_height: float) -> timedelta:
    """Convert a vertical pointer delta to a time delta, rounded to whole minutes."""
    if hour_height <= 0:
        raise ValueError(f"hour_height must be positive, got {hour_height}")
    return timedelta(minutes=round(delta_px / hour_height * 60))


def _resize(original: Interval, edge: ResizeEdge, delta: timedelta,
            minimum_duration: timedelta) -> Adjustment:
    if minimum_duration <= timedelta(0):
        raise ValueError(f"minimum_duration must be positive, got {minimum_duration}")

    if edge == ResizeEdge.START:
        candidate_start = _shift(original.start, delta)
        if original.end - candidate_start < minimum_duration:
            # Snap to the minimum instead of collapsing or inverting
            candidate_start = _shift(original.end, -minimum_duration)
        candidate = Interval(candidate_start, original.end)
    else:
        candidate_end = _shift(original.end, delta)
        if candidate_end - original.start < minimum_duration:
            candidate_end = _shift(original.start, minimum_duration)
        candidate = Interval(original.start, candidate_end)

    return adjust(candidate, minimum_duration)


def resize(original: Interval, edge: ResizeEdge, delta: timedelta,
           minimum_duration: timedelta) -> Interval:
    """
    Move one edge of ``original`` by ``delta``; the other edge stays put.

    The result always lasts at least ``minimum_duration``.
    """
    return _resize(original, edge, delta, minimum_duration).interval


def reschedule_task(task: Task, drop: DropTarget,
                    settings: LayoutSettings = LayoutSettings()) -> Optional[RescheduleResult]:
    """Reschedule a task by its effective interval; None if it has none."""
    original = effective_interval(task, settings.default_duration)
    if original is None:
        return None
    result = _reschedule(original, drop, timedelta(0), settings.quarter_count)
    return RescheduleResult(task.id, original, result.interval, result.was_adjusted)


def resize_task(task: Task, edge: ResizeEdge, delta_px: float,
                settings: LayoutSettings = LayoutSettings()) -> Optional[ResizeResult]:
    """Resize a task by a pixel delta on the grid; None if it has no interval."""
    original = effective_interval(task, settings.default_duration)
    if original is None:
        return None
    delta = pixels_to_delta(delta_px, settings.hour_height)
    result = _resize(original, edge, delta, settings.minimum_duration)
    return ResizeResult(task.id, original, result.interval, edge, result.was_adjusted)
