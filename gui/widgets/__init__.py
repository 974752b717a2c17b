"""
Kubux Tasks GUI Widgets

Custom widgets for displaying the week timeline.
"""

from .task_block import TaskBlockWidget
from .timeline_widget import DayColumnWidget, WeekTimelineWidget

__all__ = ['TaskBlockWidget', 'DayColumnWidget', 'WeekTimelineWidget']
