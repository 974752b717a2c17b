"""
Week timeline widget: seven day columns on a 24-hour grid.

All placement math lives in the timeline package; this module only turns
PositionedTask values into widget geometry and pointer gestures into
engine calls.
"""

from dataclasses import replace
from datetime import datetime, timedelta, date
from typing import Optional
import sys

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QScrollArea, QFrame,
    QApplication, QStyle, QToolTip
)
from PySide6.QtCore import Qt, Signal, QTimer, QPoint
from PySide6.QtGui import QFontMetrics, QFont, QCursor

from timeline.bucketing import first_day_of_week, week_days
from timeline.config import LayoutConfig, LocalizationConfig, ColorsConfig
from timeline.geometry import offset_to_slot, slot_height
from timeline.gestures import DropTarget, ResizeEdge, reschedule_task, resize_task
from timeline.interval import Interval
from timeline.layout import LayoutSettings, PositionedTask, layout_week
from timeline.task import Task, flatten, with_interval
from timeline.timezone_utils import to_local_datetime, get_local_timezone

from .task_block import TaskBlockWidget

# Module-level configs (set by MainWindow at startup)
_layout_config: LayoutConfig = LayoutConfig()
_localization_config: LocalizationConfig = LocalizationConfig()
_colors_config: ColorsConfig = ColorsConfig()


def set_layout_config(config: LayoutConfig):
    global _layout_config
    _layout_config = config


def set_localization_config(config: LocalizationConfig):
    global _localization_config
    _localization_config = config


def set_colors_config(config: ColorsConfig):
    global _colors_config
    _colors_config = config


def get_settings() -> LayoutSettings:
    return _layout_config.to_settings()


def _get_time_column_width() -> int:
    font = QFont(_layout_config.interface_font, _layout_config.interface_font_size)
    return QFontMetrics(font).horizontalAdvance("00:00") + 16


def _format_range(start: datetime, end: datetime) -> str:
    start = to_local_datetime(start)
    end = to_local_datetime(end)
    return f"{start.strftime('%H:%M')} - {end.strftime('%H:%M')}"


class DayColumnWidget(QWidget):
    """
    A single day column with absolute positioning for task blocks.

    Overlapping tasks share the width side by side according to the column
    assignment computed by the layout. Blocks can be dragged to any slot of
    any day column of the same week, or resized at either edge.
    """

    task_clicked = Signal(int)
    # task id, new start, new end (object keeps tz-aware datetimes intact)
    task_time_changed = Signal(int, object, object)

    def __init__(self, for_date: date, parent=None):
        super().__init__(parent)
        self._date = for_date
        self._positioned: list[PositionedTask] = []
        self._ghost_ids: set[int] = set()
        self._task_widgets: list[TaskBlockWidget] = []
        self._setup_ui()
        self._setup_time_indicator()

    @property
    def day(self) -> date:
        return self._date

    def _setup_ui(self):
        hour_height = _layout_config.hour_height
        self.setMinimumHeight(24 * hour_height)
        self.setMaximumHeight(24 * hour_height)
        self.setStyleSheet(f"background-color: {_colors_config.day_column_background}; "
                           f"border: 1px solid {_colors_config.cell_border};")

        quarter = slot_height(hour_height, _layout_config.quarter_count)
        for hour in range(24):
            for q in range(_layout_config.quarter_count):
                if hour == 0 and q == 0:
                    continue
                line = QFrame(self)
                line.setFrameStyle(QFrame.HLine | QFrame.Plain)
                color = _colors_config.hour_line if q == 0 else _colors_config.quarter_line
                line.setStyleSheet(f"background-color: {color};")
                line.setGeometry(0, int(hour * hour_height + q * quarter), 2000, 1)

    def _setup_time_indicator(self):
        self._time_indicator = QFrame(self)
        self._time_indicator.setFrameStyle(QFrame.HLine | QFrame.Plain)
        self._time_indicator.setStyleSheet(f"background-color: {_colors_config.current_time_line};")
        self._time_indicator.setFixedHeight(2)

        self._time_timer = QTimer(self)
        self._time_timer.timeout.connect(self._update_time_indicator)
        self._time_timer.start(60000)
        self._update_time_indicator()

    def _update_time_indicator(self):
        now = datetime.now(get_local_timezone())
        if self._date != now.date():
            self._time_indicator.hide()
            return
        self._time_indicator.show()
        y_pos = int((now.hour + now.minute / 60.0) * _layout_config.hour_height)
        self._time_indicator.setGeometry(0, y_pos, self.width(), 2)
        self._time_indicator.raise_()

    def set_date(self, new_date: date):
        self._date = new_date
        self._update_time_indicator()

    def set_positioned(self, positioned: list[PositionedTask], ghost_ids: Optional[set[int]] = None):
        """Replace the blocks shown in this column."""
        self.clear_tasks()
        self._positioned = list(positioned)
        self._ghost_ids = set(ghost_ids or ())
        self._create_task_widgets()

    def task_widgets(self) -> list[TaskBlockWidget]:
        return list(self._task_widgets)

    def _find_task(self, task_id: int) -> Optional[Task]:
        for positioned in self._positioned:
            if positioned.task.id == task_id:
                return positioned.task
        return None

    def _create_task_widgets(self):
        for positioned in self._positioned:
            ghost = positioned.task.id in self._ghost_ids
            widget = TaskBlockWidget(positioned, _colors_config, _layout_config, ghost=ghost, parent=self)
            if not ghost:
                widget.clicked.connect(self.task_clicked.emit)
                widget.drag_moved.connect(self._on_drag_moved)
                widget.drag_finished.connect(self._on_drag_finished)
                widget.resize_moved.connect(self._on_resize_moved)
                widget.resize_finished.connect(self.handle_resize)
            self._task_widgets.append(widget)
            widget.show()

        self._position_task_widgets()
        self._time_indicator.raise_()

    def _position_task_widgets(self):
        available_width = self.width() - 4  # 2px margin on each side

        for widget in self._task_widgets:
            positioned = widget.positioned
            col_width = available_width // max(positioned.column_count, 1)
            x = 2 + positioned.column * col_width
            widget.setGeometry(x, int(positioned.top) + 1, col_width - 1, max(int(positioned.height) - 2, 1))

    def clear_tasks(self):
        for widget in self._task_widgets:
            widget.deleteLater()
        self._task_widgets.clear()
        self._positioned = []

    # --- Gestures ---

    def drop_target_at(self, target_date: date, y: float) -> DropTarget:
        """Grid slot under a y position in the column of ``target_date``."""
        slot = offset_to_slot(y, _layout_config.hour_height, _layout_config.quarter_count)
        return DropTarget(target_date, slot.hour, slot.quarter_index)

    def handle_drop(self, task_id: int, target_date: date, y: float) -> bool:
        """Reschedule a task to the slot at ``y`` on ``target_date``; True if a change was emitted."""
        task = self._find_task(task_id)
        if task is None:
            return False
        result = reschedule_task(task, self.drop_target_at(target_date, y), get_settings())
        if result is None or result.interval == result.original:
            return False
        self.task_time_changed.emit(task_id, result.interval.start, result.interval.end)
        return True

    def handle_resize(self, task_id: int, edge: ResizeEdge, delta_px: float) -> bool:
        """Move one edge of a task by a pixel delta; True if a change was emitted."""
        task = self._find_task(task_id)
        if task is None:
            return False
        result = resize_task(task, edge, delta_px, get_settings())
        if result is None or result.interval == result.original:
            return False
        if result.was_adjusted:
            print(f"DEBUG: Resize of task {task_id} adjusted to the minimum duration", file=sys.stderr)
        self.task_time_changed.emit(task_id, result.interval.start, result.interval.end)
        return True

    def _find_target_day_column(self, global_pos: QPoint) -> Optional[tuple[date, int]]:
        """Day column under a global position as (date, local y), or None outside the grid."""
        current = QApplication.widgetAt(global_pos)
        while current is not None:
            if isinstance(current, DayColumnWidget):
                return current.day, current.mapFromGlobal(global_pos).y()
            current = current.parentWidget()
        return None

    def _on_drag_moved(self, task_id: int, global_pos: QPoint):
        task = self._find_task(task_id)
        target = self._find_target_day_column(global_pos)
        if task is None or target is None:
            QToolTip.hideText()
            return
        target_date, y = target
        grab_offset = self._drag_grab_offset(task_id)
        result = reschedule_task(task, self.drop_target_at(target_date, y - grab_offset), get_settings())
        if result is not None:
            QToolTip.showText(global_pos, _format_range(result.interval.start, result.interval.end), self)

    def _drag_grab_offset(self, task_id: int) -> int:
        for widget in self._task_widgets:
            if widget.task_id == task_id and widget._press_pos is not None:
                return widget._press_pos.y()
        return 0

    def _on_drag_finished(self, task_id: int, global_pos: QPoint, grab_offset_y: int):
        QToolTip.hideText()
        target = self._find_target_day_column(global_pos)
        if target is None:
            # Dropped outside the grid: nothing changes
            return
        target_date, y = target
        self.handle_drop(task_id, target_date, y - grab_offset_y)

    def _on_resize_moved(self, task_id: int, edge: ResizeEdge, delta_px: float):
        task = self._find_task(task_id)
        if task is None:
            return
        result = resize_task(task, edge, delta_px, get_settings())
        if result is not None:
            QToolTip.showText(QCursor.pos(), _format_range(result.interval.start, result.interval.end), self)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._position_task_widgets()
        self._update_time_indicator()


class WeekTimelineWidget(QWidget):
    """Week view showing 7 day columns side by side under a header row."""

    task_clicked = Signal(int)
    task_time_changed = Signal(int, object, object)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._reference = date.today()
        self._tasks: list[Task] = []
        self._pending: dict[int, Interval] = {}
        self._day_columns: list[DayColumnWidget] = []
        self._layout: dict[date, list[PositionedTask]] = {}
        self._setup_ui()

    def _week_start(self) -> date:
        return first_day_of_week(self._reference, get_settings().week_start)

    def _setup_ui(self):
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        time_col_width = _get_time_column_width()
        hour_height = _layout_config.hour_height
        # Keep headers aligned with the columns despite the vertical scrollbar
        scrollbar_width = QApplication.style().pixelMetric(QStyle.PM_ScrollBarExtent)

        header = QWidget()
        header.setStyleSheet(f"background: {_colors_config.header_background};")
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(time_col_width, 0, scrollbar_width, 0)
        header_layout.setSpacing(1)

        self._header_labels: list[QLabel] = []
        for _ in range(7):
            label = QLabel()
            label.setAlignment(Qt.AlignCenter)
            header_layout.addWidget(label, 1)
            self._header_labels.append(label)
        main_layout.addWidget(header)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)

        content = QWidget()
        content_layout = QHBoxLayout(content)
        content_layout.setContentsMargins(0, 0, 0, 0)
        content_layout.setSpacing(0)

        time_widget = QWidget()
        time_widget.setFixedWidth(time_col_width)
        time_widget.setFixedHeight(24 * hour_height)
        time_widget.setStyleSheet(f"background: {_colors_config.header_background};")
        time_layout = QVBoxLayout(time_widget)
        time_layout.setContentsMargins(0, 0, 0, 0)
        time_layout.setSpacing(0)

        top_spacer = QWidget()
        top_spacer.setFixedHeight(hour_height // 2)
        time_layout.addWidget(top_spacer)
        for hour in range(1, 24):
            lbl = QLabel(f"{hour:02d}:00")
            lbl.setFixedHeight(hour_height)
            lbl.setAlignment(Qt.AlignCenter)
            time_layout.addWidget(lbl)
        bot_spacer = QWidget()
        bot_spacer.setFixedHeight(hour_height - hour_height // 2)
        time_layout.addWidget(bot_spacer)
        content_layout.addWidget(time_widget)

        for d in week_days(self._week_start()):
            col = DayColumnWidget(d)
            col.task_clicked.connect(self.task_clicked.emit)
            col.task_time_changed.connect(self.task_time_changed.emit)
            content_layout.addWidget(col, 1)
            self._day_columns.append(col)

        scroll.setWidget(content)
        self._scroll = scroll
        main_layout.addWidget(scroll, 1)
        self._update_headers()

    def _update_headers(self):
        font = f"font-family: '{_layout_config.interface_font}'; font-size: {_layout_config.interface_font_size}pt;"
        today = datetime.now(get_local_timezone()).date()
        for label, d in zip(self._header_labels, week_days(self._week_start())):
            sunday_index = d.isoweekday() % 7
            label.setText(f"{_localization_config.get_day_name(sunday_index)} {d.day}")
            if d == today:
                style = (f"background: {_colors_config.today_highlight_background}; "
                         f"color: {_colors_config.today_highlight_text};")
            elif sunday_index == 0:
                style = f"background: {_colors_config.header_background}; color: {_colors_config.sunday_text};"
            elif sunday_index == 6:
                style = f"background: {_colors_config.header_background}; color: {_colors_config.saturday_text};"
            else:
                style = f"background: {_colors_config.header_background};"
            label.setStyleSheet(f"{font} font-weight: bold; padding: 8px; {style}")

    def scroll_to_hour(self, hour: int):
        self._scroll.verticalScrollBar().setValue(hour * _layout_config.hour_height)

    def day_columns(self) -> list[DayColumnWidget]:
        return list(self._day_columns)

    def get_date(self) -> date:
        return self._reference

    def get_week_range(self) -> tuple[date, date]:
        first = self._week_start()
        return first, first + timedelta(days=6)

    def set_date(self, d: date):
        self._reference = d
        for col, day in zip(self._day_columns, week_days(self._week_start())):
            col.set_date(day)
        self._update_headers()
        self.refresh_tasks()

    def next_week(self):
        self.set_date(self._reference + timedelta(days=7))

    def prev_week(self):
        self.set_date(self._reference - timedelta(days=7))

    def set_tasks(self, tasks: list[Task]):
        self._tasks = list(tasks)
        self.refresh_tasks()

    def set_pending_interval(self, task_id: int, interval: Interval):
        """Show a task at ``interval`` until its save completes."""
        self._pending[task_id] = interval
        self.refresh_tasks()

    def clear_pending_interval(self, task_id: int):
        if self._pending.pop(task_id, None) is not None:
            self.refresh_tasks()

    def _displayed_tasks(self) -> list[Task]:
        # Flat list without children, so sub-tasks are not laid out twice
        tasks = [replace(task, children=[]) for task in flatten(self._tasks)]
        return [
            with_interval(task, self._pending[task.id]) if task.id in self._pending else task
            for task in tasks
        ]

    def refresh_tasks(self):
        self._layout = layout_week(self._displayed_tasks(), self._reference, get_settings())
        ghost_ids = set(self._pending)
        for col in self._day_columns:
            col.set_positioned(self._layout.get(col.day, []), ghost_ids)
