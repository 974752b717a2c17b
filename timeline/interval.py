"""
Interval math for timeline layout.

Intervals are half-open: the start instant is inside, the end instant is
not. Back-to-back intervals (09:00-10:00 and 10:00-11:00) therefore do
not overlap.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable


@dataclass(frozen=True)
class Interval:
    """A (start, end) pair of timestamps."""
    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def is_positive(self) -> bool:
        return self.start < self.end


def overlaps(a: Interval, b: Interval) -> bool:
    """True iff the two intervals share at least one instant."""
    return a.start < b.end and b.start < a.end


def duration(interval: Interval) -> timedelta:
    return interval.end - interval.start


def duration_ms(interval: Interval) -> int:
    """Duration in whole milliseconds."""
    return int(duration(interval) / timedelta(milliseconds=1))


def max_overlap_depth(intervals: Iterable[Interval]) -> int:
    """
    Largest number of intervals covering a single instant.

    Sweep line over start/end points; ends sort before starts at the same
    instant so touching intervals are not counted together.
    """
    points = []
    for interval in intervals:
        points.append((interval.start, 1))
        points.append((interval.end, -1))
    points.sort(key=lambda p: (p[0], p[1]))

    depth = 0
    deepest = 0
    for _, step in points:
        depth += step
        deepest = max(deepest, depth)
    return deepest
