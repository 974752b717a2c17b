"""
Grouping of tasks into per-day buckets for a visible week.
"""

from dataclasses import dataclass
from datetime import datetime, date, time as dt_time, timedelta
from enum import Enum
from typing import Iterable
import sys

from .interval import Interval
from .task import Task, flatten, effective_interval, DEFAULT_DURATION
from .timezone_utils import get_local_timezone, localize


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] LAYOUT: {msg}", file=sys.stderr)


class WeekStart(Enum):
    SUNDAY = "sunday"
    MONDAY = "monday"


@dataclass
class BucketEntry:
    task: Task
    interval: Interval


def first_day_of_week(d: date, week_start: WeekStart = WeekStart.SUNDAY) -> date:
    if week_start == WeekStart.MONDAY:
        return d - timedelta(days=d.weekday())
    # date.weekday(): Monday=0 ... Sunday=6
    return d - timedelta(days=(d.weekday() + 1) % 7)


def week_days(first_day: date) -> list[date]:
    return [first_day + timedelta(days=i) for i in range(7)]


def week_window(reference: date, week_start: WeekStart = WeekStart.SUNDAY,
                aware: bool = True) -> tuple[datetime, datetime]:
    """
    Inclusive bounds of the week containing ``reference``.

    Start is 00:00 of the first day, end is the last microsecond of the
    seventh day. With ``aware`` the bounds are in the local timezone.
    """
    if isinstance(reference, datetime):
        reference = reference.date()
    first = first_day_of_week(reference, week_start)
    start = datetime.combine(first, dt_time.min)
    end = datetime.combine(first + timedelta(days=6), dt_time.max)
    if aware:
        tz = get_local_timezone()
        start = tz.localize(start)
        end = tz.localize(end)
    return start, end


def bucketize(tasks: Iterable[Task], week_start: datetime, week_end: datetime,
              default_duration: timedelta = DEFAULT_DURATION) -> dict[date, list[BucketEntry]]:
    """
    Place each displayable task in the bucket of the day its interval ends.

    Task trees are flattened first. Tasks without an interval, with an
    unparsable end, or ending outside [week_start, week_end] are left out.
    Every day of the window gets a bucket, empty or not. Naive bounds are
    taken as local time.
    """
    week_start = localize(week_start)
    week_end = localize(week_end)
    buckets: dict[date, list[BucketEntry]] = {}
    day = week_start.date()
    while day <= week_end.date():
        buckets[day] = []
        day += timedelta(days=1)

    skipped = 0
    for task in flatten(tasks):
        interval = effective_interval(task, default_duration)
        if interval is None:
            skipped += 1
            continue
        if not week_start <= interval.end <= week_end:
            continue
        buckets.setdefault(interval.end.date(), []).append(BucketEntry(task, interval))

    if skipped:
        _debug_print(f"{skipped} task(s) without a displayable interval")
    return buckets

