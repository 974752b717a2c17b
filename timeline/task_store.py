"""
JSON task snapshot store.

Source of the task list shown in the timeline and the persistence target
for time changes made by drag and resize. The file holds raw task records
either as a bare list or under a "tasks" key; records may nest sub-tasks
under "children".
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional
import sys

from .task import Task, normalize_task, normalize_tasks
from .timezone_utils import to_local_datetime


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] STORE: {msg}", file=sys.stderr)


class TaskNotFoundError(KeyError):
    """No task with the requested id exists in the store."""


# Timing keys replaced when a task's time range is rewritten
_TIMING_KEYS = (
    "start", "end", "startDateTime", "endDateTime", "start_datetime", "end_datetime",
    "startAt", "endAt", "start_at", "end_at",
    "startDate", "startTime", "endDate", "endTime",
    "start_date", "start_time", "end_date", "end_time",
)


def _find_record(records: list[dict], task_id) -> Optional[dict]:
    for record in records:
        if record.get("id") == task_id:
            return record
        found = _find_record(record.get("children") or [], task_id)
        if found is not None:
            return found
    return None


class TaskStore:
    """
    File-backed task source.

    Every operation reads the file afresh so external edits are picked up
    on reload.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> tuple[object, list[dict]]:
        if not self.path.exists():
            _debug_print(f"No task file at {self.path}")
            return [], []
        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if isinstance(data, dict):
            return data, data.setdefault("tasks", [])
        return data, data

    def _write(self, data: object) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        tmp_path.replace(self.path)

    def load(self) -> list[Task]:
        """Load and normalize all tasks (as a tree)."""
        try:
            _, records = self._read()
        except (OSError, json.JSONDecodeError) as e:
            _debug_print(f"Error loading tasks from {self.path}: {e}")
            return []
        tasks = normalize_tasks(records)
        _debug_print(f"Loaded {len(tasks)} top-level tasks from {self.path}")
        return tasks

    def update_task_time(self, task_id: int, new_start: datetime, new_end: datetime) -> Task:
        """
        Persist a new time range for a task and return the updated task.

        Times are stored as split local date/time fields.
        """
        data, records = self._read()
        record = _find_record(records, task_id)
        if record is None:
            raise TaskNotFoundError(task_id)

        for key in _TIMING_KEYS:
            record.pop(key, None)
        start = to_local_datetime(new_start)
        end = to_local_datetime(new_end)
        record["startDate"] = start.strftime("%Y-%m-%d")
        record["startTime"] = start.strftime("%H:%M")
        record["endDate"] = end.strftime("%Y-%m-%d")
        record["endTime"] = end.strftime("%H:%M")

        self._write(data)
        _debug_print(f"Task {task_id} moved to {start:%Y-%m-%d %H:%M} - {end:%Y-%m-%d %H:%M}")
        return normalize_task(record)
