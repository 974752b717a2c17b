"""
Projection of column-assigned tasks onto the pixel grid.
"""

from dataclasses import dataclass
from datetime import datetime, date, timedelta
from typing import Iterable, Optional

from .bucketing import BucketEntry, WeekStart, bucketize, week_window
from .columns import assign_columns, cluster_column_counts
from .geometry import time_to_offset
from .interval import Interval
from .task import Task
from .timezone_utils import to_local_datetime


@dataclass(frozen=True)
class LayoutSettings:
    """Grid and gesture parameters shared by layout and the gesture engines."""
    hour_height: float = 40
    min_block_height: float = 10
    quarter_count: int = 4
    minimum_duration: timedelta = timedelta(minutes=15)
    default_duration: timedelta = timedelta(minutes=30)
    week_start: WeekStart = WeekStart.SUNDAY


@dataclass
class PositionedTask:
    task: Task
    interval: Interval
    day: date
    column: int
    column_count: int
    top: float
    height: float


def _offset(moment: datetime, hour_height: float) -> float:
    local = to_local_datetime(moment)
    return time_to_offset(local.hour, local.minute, hour_height)


def project(bucket: Iterable[BucketEntry], hour_height: float, min_block_height: float,
            day: Optional[date] = None) -> list[PositionedTask]:
    """
    Position every entry of one day bucket.

    top comes from the start time, height from the end time minus top,
    never less than min_block_height. Tasks that began on an earlier day
    are drawn from 00:00.
    """
    placed = assign_columns(list(bucket))
    counts = cluster_column_counts(placed)

    positioned = []
    for entry, count in zip(placed, counts):
        end = to_local_datetime(entry.interval.end)
        bucket_day = day or end.date()
        start = to_local_datetime(entry.interval.start)
        if start.date() < bucket_day:
            top = 0.0
        else:
            top = _offset(start, hour_height)
        raw_height = _offset(end, hour_height) - top
        positioned.append(PositionedTask(
            task=entry.task,
            interval=entry.interval,
            day=bucket_day,
            column=entry.column,
            column_count=count,
            top=top,
            height=max(raw_height, min_block_height),
        ))
    return positioned


def layout_week(tasks: Iterable[Task], reference: date,
                settings: LayoutSettings = LayoutSettings()) -> dict[date, list[PositionedTask]]:
    """Bucket, assign columns and project a whole week around ``reference``."""
    start, end = week_window(reference, settings.week_start)
    buckets = bucketize(tasks, start, end, settings.default_duration)
    return {
        day: project(entries, settings.hour_height, settings.min_block_height, day)
        for day, entries in buckets.items()
    }
