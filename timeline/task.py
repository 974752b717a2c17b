"""
Canonical task model.

Tasks arrive from the task source in several shapes (camelCase or
snake_case keys, combined timestamps or split date/time pairs).
normalize_task() folds all of them into one Task shape at the boundary so
the layout code never has to look at field-naming variants.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Iterable, Optional
import sys

from .interval import Interval
from .timezone_utils import parse_timestamp, format_local, to_local_datetime


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] TASKS: {msg}", file=sys.stderr)


class TaskStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


DEFAULT_DURATION = timedelta(minutes=30)


@dataclass
class Task:
    """
    A task as seen by the timeline.

    Timestamps stay as the ISO-8601 strings the source delivered; they are
    parsed when the effective interval is derived so one malformed value
    only removes that task from layout.
    """
    id: int
    title: str = ""
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    start: Optional[str] = None
    end: Optional[str] = None
    completed_at: Optional[str] = None
    children: list['Task'] = field(default_factory=list)


def _first(raw: dict, *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def _combine(date_part: Optional[str], time_part: Optional[str], default_time: str) -> Optional[str]:
    """Join a split date/time pair into one ISO-8601 local timestamp."""
    if not date_part:
        return None
    date_part = str(date_part)
    if "T" in date_part:
        # Already a full timestamp stored under a date key
        return date_part
    if not time_part:
        return f"{date_part}T{default_time}"
    hours, _, minutes = str(time_part).partition(":")
    if not minutes:
        return f"{date_part}T{default_time}"
    return f"{date_part}T{hours.zfill(2)}:{minutes[:2].zfill(2)}"


def _timestamp(raw: dict, prefix: str, default_time: str) -> Optional[str]:
    combined = _first(raw, prefix, f"{prefix}DateTime", f"{prefix}_datetime", f"{prefix}_at", f"{prefix}At")
    if combined is not None:
        return str(combined)
    return _combine(
        _first(raw, f"{prefix}Date", f"{prefix}_date"),
        _first(raw, f"{prefix}Time", f"{prefix}_time"),
        default_time,
    )


def _enum_value(enum_cls, value, default):
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        _debug_print(f"Unknown {enum_cls.__name__} '{value}', using {default.value}")
        return default


def normalize_task(raw: dict) -> Task:
    """
    Build a canonical Task from a raw task dict.

    Date-only starts begin at 00:00, date-only ends close at 23:59.
    """
    children = [normalize_task(child) for child in raw.get("children") or []]
    return Task(
        id=raw["id"],
        title=str(raw.get("title") or ""),
        status=_enum_value(TaskStatus, raw.get("status"), TaskStatus.PENDING),
        priority=_enum_value(TaskPriority, raw.get("priority"), TaskPriority.MEDIUM),
        start=_timestamp(raw, "start", "00:00"),
        end=_timestamp(raw, "end", "23:59"),
        completed_at=_first(raw, "completedAt", "completed_at"),
        children=children,
    )


def normalize_tasks(raws: Iterable[dict]) -> list[Task]:
    tasks = []
    for raw in raws:
        try:
            tasks.append(normalize_task(raw))
        except (KeyError, TypeError, AttributeError) as e:
            _debug_print(f"Skipping malformed task record {raw!r}: {e}")
    return tasks


def flatten(tasks: Iterable[Task]) -> list[Task]:
    """Depth-first flattening of a task tree, parents before children."""
    result: list[Task] = []

    def _add(task: Task):
        result.append(task)
        for child in task.children:
            _add(child)

    for task in tasks:
        _add(task)
    return result


def effective_interval(task: Task, default_duration: timedelta = DEFAULT_DURATION) -> Optional[Interval]:
    """
    Derive the interval used for layout.

    end = end, or completed_at when no end is given. Without an end the
    task is not displayable. start = start, or end - default_duration.
    Returns None (and logs) instead of raising on malformed data.
    """
    if task.end is not None:
        end = parse_timestamp(task.end)
        if end is None:
            _debug_print(f"Task {task.id}: unparsable end '{task.end}', skipping")
            return None
    elif task.completed_at is not None:
        end = parse_timestamp(task.completed_at)
        if end is None:
            _debug_print(f"Task {task.id}: unparsable completion time '{task.completed_at}', skipping")
            return None
    else:
        return None

    start = None
    if task.start is not None:
        start = parse_timestamp(task.start)
        if start is None:
            _debug_print(f"Task {task.id}: unparsable start '{task.start}', using default duration")
        elif start >= end:
            _debug_print(f"Task {task.id}: start {task.start} not before end {task.end}, using default duration")
            start = None
    if start is None:
        start = to_local_datetime(end - default_duration)

    return Interval(start, end)


def with_interval(task: Task, interval: Interval) -> Task:
    """Copy of ``task`` scheduled at ``interval``."""
    return replace(task, start=format_local(interval.start), end=format_local(interval.end))
