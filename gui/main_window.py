"""
Main Window for Kubux Tasks.

The primary application window: navigation toolbar, the week timeline and
a status bar. Time changes made on the timeline are shown immediately and
persisted to the task file in the background.
"""

import sys
from datetime import datetime, date
from functools import partial

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QToolBar, QPushButton, QLabel,
    QStatusBar, QApplication, QSizePolicy
)
from PySide6.QtCore import QTimer, QFileSystemWatcher
from PySide6.QtGui import QCloseEvent, QFont

from timeline.config import Config
from timeline.geometry import first_visible_hour
from timeline.interval import Interval
from timeline.task import Task, flatten, effective_interval
from timeline.task_dispatch import dispatch_task, is_pending, shutdown_tasks
from timeline.task_store import TaskStore
from timeline.timezone_utils import get_local_timezone, to_local_datetime

from .widgets.timeline_widget import (
    WeekTimelineWidget, set_layout_config, set_localization_config, set_colors_config
)


class MainWindow(QMainWindow):
    """
    Main application window.

    Layout:
    - Toolbar with week navigation and actions
    - Week timeline
    - Status bar for save progress and errors
    """

    def __init__(self, config: Config, store: TaskStore = None, initial_date: date = None, parent=None):
        super().__init__(parent)
        self.config = config
        self.store = store or TaskStore(config.tasks_file)
        self._tasks: list[Task] = []
        self._saving: dict[int, str] = {}  # task id -> dispatch ticket

        # Widget modules read these at construction time
        set_layout_config(config.layout)
        set_localization_config(config.localization)
        set_colors_config(config.colors)

        text_font = QFont(config.layout.text_font, config.layout.text_font_size)
        QApplication.instance().setFont(text_font)
        self._interface_font = QFont(config.layout.interface_font, config.layout.interface_font_size)

        # Reload when the task file is rewritten by another program
        self._tasks_watcher = QFileSystemWatcher(self)
        if self.store.path.exists():
            self._tasks_watcher.addPath(str(self.store.path))
        self._tasks_watcher.fileChanged.connect(self._on_tasks_file_changed)

        self._setup_window()
        self._setup_ui()
        self._setup_toolbar()
        self._setup_statusbar()

        if initial_date is not None:
            self._timeline.set_date(initial_date)
        self.reload_tasks()
        start_hour = first_visible_hour(datetime.now(get_local_timezone()).hour)
        QTimer.singleShot(0, lambda: self._timeline.scroll_to_hour(start_hour))

    def _setup_window(self):
        self.setWindowTitle(self.config.labels.window_title)
        self.setMinimumSize(800, 600)
        self.resize(1200, 800)

    def _setup_ui(self):
        main_widget = QWidget()
        main_layout = QVBoxLayout(main_widget)
        main_layout.setContentsMargins(0, 0, 0, 0)

        self._timeline = WeekTimelineWidget()
        self._timeline.task_clicked.connect(self._on_task_clicked)
        self._timeline.task_time_changed.connect(self._on_task_time_changed)
        main_layout.addWidget(self._timeline)

        self.setCentralWidget(main_widget)

    def _setup_toolbar(self):
        toolbar = QToolBar("Navigation")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)
        labels = self.config.labels

        self._date_label = QLabel()
        date_font = QFont(self._interface_font)
        date_font.setBold(True)
        self._date_label.setFont(date_font)
        self._date_label.setMinimumWidth(200)
        toolbar.addWidget(self._date_label)

        toolbar.addSeparator()

        self._prev_btn = QPushButton(labels.button_prev)
        self._prev_btn.setFont(self._interface_font)
        self._prev_btn.setToolTip("Previous week")
        self._prev_btn.clicked.connect(self._on_prev_week)
        toolbar.addWidget(self._prev_btn)

        self._today_btn = QPushButton(labels.button_today)
        self._today_btn.setFont(self._interface_font)
        self._today_btn.clicked.connect(self._on_today)
        toolbar.addWidget(self._today_btn)

        self._next_btn = QPushButton(labels.button_next)
        self._next_btn.setFont(self._interface_font)
        self._next_btn.setToolTip("Next week")
        self._next_btn.clicked.connect(self._on_next_week)
        toolbar.addWidget(self._next_btn)

        spacer = QWidget()
        spacer.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)
        toolbar.addWidget(spacer)

        self._reload_btn = QPushButton(labels.button_reload)
        self._reload_btn.setFont(self._interface_font)
        self._reload_btn.setToolTip("Reload tasks from file")
        self._reload_btn.clicked.connect(self.reload_tasks)
        toolbar.addWidget(self._reload_btn)

        self._quit_btn = QPushButton(labels.button_quit)
        self._quit_btn.setFont(self._interface_font)
        self._quit_btn.setToolTip("Exit application")
        self._quit_btn.clicked.connect(self.close)
        toolbar.addWidget(self._quit_btn)

        self._update_date_label()

    def _setup_statusbar(self):
        self._statusbar = QStatusBar()
        self._statusbar.setFont(self._interface_font)
        self.setStatusBar(self._statusbar)
        self._statusbar.showMessage("Ready")

    def _update_date_label(self):
        """Week range in yyyy/mm/dd form."""
        week_start, week_end = self._timeline.get_week_range()
        if week_start.year == week_end.year and week_start.month == week_end.month:
            text = f"{week_start.strftime('%Y/%m/%d')}-{week_end.day:02d}"
        else:
            text = f"{week_start.strftime('%Y/%m/%d')} - {week_end.strftime('%Y/%m/%d')}"
        self._date_label.setText(text)

    @property
    def timeline(self) -> WeekTimelineWidget:
        return self._timeline

    # --- Navigation ---

    def _on_prev_week(self):
        self._timeline.prev_week()
        self._update_date_label()

    def _on_next_week(self):
        self._timeline.next_week()
        self._update_date_label()

    def _on_today(self):
        self._timeline.set_date(date.today())
        self._update_date_label()

    # --- Data ---

    def reload_tasks(self):
        """Re-read the task file and redraw."""
        self._tasks = self.store.load()
        self._timeline.set_tasks(self._tasks)
        count = len(flatten(self._tasks))
        self._statusbar.showMessage(f"Loaded {count} tasks", 3000)

    def _on_tasks_file_changed(self, path: str):
        print(f"DEBUG: Task file changed: {path}", file=sys.stderr)
        # Editors that replace the file drop it from the watcher
        if self.store.path.exists() and str(self.store.path) not in self._tasks_watcher.files():
            self._tasks_watcher.addPath(str(self.store.path))
        # Our own saves rewrite the file too; those reload when they finish
        if not any(is_pending(ticket) for ticket in self._saving.values()):
            QTimer.singleShot(500, self.reload_tasks)

    def _find_task(self, task_id: int):
        for task in flatten(self._tasks):
            if task.id == task_id:
                return task
        return None

    def _on_task_clicked(self, task_id: int):
        task = self._find_task(task_id)
        if task is None:
            return
        interval = effective_interval(task, self.config.layout.to_settings().default_duration)
        if interval is None:
            self._statusbar.showMessage(task.title)
            return
        start = to_local_datetime(interval.start)
        end = to_local_datetime(interval.end)
        self._statusbar.showMessage(
            f"{task.title}  {start.strftime('%Y/%m/%d %H:%M')} - {end.strftime('%H:%M')}  [{task.status.value}]"
        )

    def _on_task_time_changed(self, task_id: int, new_start: datetime, new_end: datetime):
        """Show the new time range at once and persist it in the background."""
        print(f"DEBUG: Task {task_id} time changed: {new_start} - {new_end}", file=sys.stderr)
        self._timeline.set_pending_interval(task_id, Interval(new_start, new_end))
        self._statusbar.showMessage(self.config.labels.saving)
        self._saving[task_id] = dispatch_task(
            partial(self._on_task_saved, task_id),
            self.store.update_task_time, task_id, new_start, new_end,
            on_error=partial(self._on_task_save_failed, task_id),
        )

    def _on_task_saved(self, task_id: int, task: Task):
        self._saving.pop(task_id, None)
        self._tasks = self.store.load()
        self._timeline.set_tasks(self._tasks)
        self._timeline.clear_pending_interval(task_id)
        self._statusbar.showMessage(f"Saved '{task.title}'", 3000)

    def _on_task_save_failed(self, task_id: int, error: Exception):
        self._saving.pop(task_id, None)
        # Dropping the override puts the block back where it was
        self._timeline.clear_pending_interval(task_id)
        self._statusbar.showMessage(self.config.labels.save_failed.format(task_id, error))

    def closeEvent(self, event: QCloseEvent):
        shutdown_tasks(wait=True)
        super().closeEvent(event)
