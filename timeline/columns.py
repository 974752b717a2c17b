"""
Lane assignment for overlapping tasks within one day.

Entries are processed in start order; each takes the lowest column not used
by an earlier entry it overlaps. Non-overlapping entries can share a column,
overlapping ones never do.
"""

from dataclasses import dataclass

from .bucketing import BucketEntry
from .interval import Interval, overlaps
from .task import Task


@dataclass
class ColumnEntry:
    task: Task
    interval: Interval
    column: int


def _sort_key(indexed: tuple[int, BucketEntry]):
    index, entry = indexed
    return (entry.interval.start, index)


def assign_columns(entries: list[BucketEntry]) -> list[ColumnEntry]:
    """
    Assign a column to each entry, returned in start order.

    Equal start times keep their input order.
    """
    ordered = [entry for _, entry in sorted(enumerate(entries), key=_sort_key)]

    placed: list[ColumnEntry] = []
    for entry in ordered:
        occupied = {
            other.column for other in placed
            if overlaps(entry.interval, other.interval)
        }
        column = 0
        while column in occupied:
            column += 1
        placed.append(ColumnEntry(entry.task, entry.interval, column))
    return placed


def cluster_column_counts(placed: list[ColumnEntry]) -> list[int]:
    """
    For each placed entry, the number of columns used by its overlap cluster.

    A cluster is a run of start-ordered entries linked by overlap; it closes
    when the next entry starts at or after the latest end seen so far.
    """
    counts = [0] * len(placed)
    cluster: list[int] = []
    cluster_end = None

    def _close():
        width = max(placed[i].column for i in cluster) + 1
        for i in cluster:
            counts[i] = width

    for i, entry in enumerate(placed):
        if cluster and entry.interval.start >= cluster_end:
            _close()
            cluster = []
            cluster_end = None
        cluster.append(i)
        if cluster_end is None or entry.interval.end > cluster_end:
            cluster_end = entry.interval.end
    if cluster:
        _close()
    return counts
