"""
Kubux Tasks Timeline Module

Weekly timeline scheduling and layout:
- Task model and boundary normalization (task.py)
- Interval math (interval.py) and grid geometry (geometry.py)
- Day bucketing, column assignment and pixel projection
  (bucketing.py, columns.py, layout.py)
- Drag/resize engines and time range validation
  (gestures.py, gesture_state.py, validation.py)
- Configuration (config.py) and the JSON task store (task_store.py)
"""

from .task import Task, TaskStatus, TaskPriority, normalize_task, flatten, effective_interval
from .interval import Interval, overlaps, duration, duration_ms
from .geometry import Slot, time_to_offset, offset_to_slot
from .bucketing import BucketEntry, WeekStart, bucketize, week_window
from .columns import ColumnEntry, assign_columns
from .layout import LayoutSettings, PositionedTask, project, layout_week
from .gestures import (
    DropTarget, ResizeEdge, RescheduleResult, ResizeResult, GestureResult,
    reschedule, resize, reschedule_task, resize_task, pixels_to_delta
)
from .validation import TimeRangeError, ValidationResult, validate, adjust
from .config import Config
from .task_store import TaskStore, TaskNotFoundError

__all__ = [
    'Task', 'TaskStatus', 'TaskPriority', 'normalize_task', 'flatten', 'effective_interval',
    'Interval', 'overlaps', 'duration', 'duration_ms',
    'Slot', 'time_to_offset', 'offset_to_slot',
    'BucketEntry', 'WeekStart', 'bucketize', 'week_window',
    'ColumnEntry', 'assign_columns',
    'LayoutSettings', 'PositionedTask', 'project', 'layout_week',
    'DropTarget', 'ResizeEdge', 'RescheduleResult', 'ResizeResult', 'GestureResult',
    'reschedule', 'resize', 'reschedule_task', 'resize_task', 'pixels_to_delta',
    'TimeRangeError', 'ValidationResult', 'validate', 'adjust',
    'Config',
    'TaskStore', 'TaskNotFoundError',
]
