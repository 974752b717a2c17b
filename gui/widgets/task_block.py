"""
Task block widget for the week timeline.

Shows one positioned task with its status color. Supports dragging to
move the task and dragging the top/bottom edge to change its duration.
"""

from PySide6.QtWidgets import QWidget, QLabel, QVBoxLayout, QFrame, QGraphicsOpacityEffect
from PySide6.QtCore import Qt, Signal, QPoint, QTimer
from PySide6.QtGui import QFont, QMouseEvent

from timeline.config import ColorsConfig, LayoutConfig
from timeline.gestures import ResizeEdge
from timeline.layout import PositionedTask
from timeline.timezone_utils import to_local_datetime
from timeline import gesture_state
from timeline.gesture_state import GestureState


def get_contrasting_text_color(bg_color: str) -> str:
    """Calculate whether black or white text contrasts better with the background."""
    color = bg_color.lstrip('#')
    if len(color) == 3:
        color = ''.join([c*2 for c in color])

    try:
        r = int(color[0:2], 16)
        g = int(color[2:4], 16)
        b = int(color[4:6], 16)
    except (ValueError, IndexError):
        return "#000000"

    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return "#000000" if luminance > 0.5 else "#ffffff"


def lighten_color(hex_color: str, factor: float = 0.3) -> str:
    """Lighten a hex color by the given factor."""
    color = hex_color.lstrip('#')
    if len(color) == 3:
        color = ''.join([c*2 for c in color])

    try:
        r = int(color[0:2], 16)
        g = int(color[2:4], 16)
        b = int(color[4:6], 16)
    except (ValueError, IndexError):
        return hex_color

    r = int(min(255, r + (255 - r) * factor))
    g = int(min(255, g + (255 - g) * factor))
    b = int(min(255, b + (255 - b) * factor))

    return f"#{r:02x}{g:02x}{b:02x}"


class TaskBlockWidget(QFrame):
    """
    One task on the day grid.

    Pointer handling is driven by a GestureState value owned by this block;
    a single-shot timer returns it to idle after a resize so the release
    is not also taken as a click.
    """

    clicked = Signal(int)
    drag_moved = Signal(int, QPoint)
    drag_finished = Signal(int, QPoint, int)  # task id, global pos, grab offset y
    resize_moved = Signal(int, object, float)  # task id, ResizeEdge, pixel delta
    resize_finished = Signal(int, object, float)

    # Resize zone height in pixels
    RESIZE_ZONE_HEIGHT = 6

    # Drag threshold in pixels (to distinguish from click)
    DRAG_THRESHOLD = 5

    def __init__(
        self,
        positioned: PositionedTask,
        colors: ColorsConfig = None,
        layout_config: LayoutConfig = None,
        ghost: bool = False,
        parent: QWidget = None
    ):
        super().__init__(parent)
        self.positioned = positioned
        self.colors = colors or ColorsConfig()
        self.layout_config = layout_config or LayoutConfig()
        self.ghost = ghost

        self.state: GestureState = gesture_state.IDLE
        self._press_pos: QPoint = None
        self._press_global_y: int = 0

        self._settle_timer = QTimer(self)
        self._settle_timer.setSingleShot(True)
        self._settle_timer.timeout.connect(self._settle)

        self._setup_ui()
        self._apply_style()
        self.setMouseTracking(True)

    @property
    def task_id(self) -> int:
        return self.positioned.task.id

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 1, 4, 1)
        layout.setSpacing(0)
        layout.setAlignment(Qt.AlignTop)

        font = QFont(self.layout_config.text_font, self.layout_config.text_font_size)
        start = to_local_datetime(self.positioned.interval.start)
        end = to_local_datetime(self.positioned.interval.end)

        self._time_label = QLabel(f"{start.strftime('%H:%M')} - {end.strftime('%H:%M')}")
        self._time_label.setFont(font)
        layout.addWidget(self._time_label)

        title_font = QFont(font)
        title_font.setBold(True)
        self._title_label = QLabel(' '.join(self.positioned.task.title.split()))
        self._title_label.setTextFormat(Qt.PlainText)
        self._title_label.setFont(title_font)
        layout.addWidget(self._title_label)

        self.setFrameStyle(QFrame.StyledPanel | QFrame.Plain)
        self.setCursor(Qt.PointingHandCursor)
        self.setToolTip(f"<b>{self.positioned.task.title}</b><br>"
                        f"{start.strftime('%H:%M')} - {end.strftime('%H:%M')}")

    def _apply_style(self) -> None:
        task = self.positioned.task
        bg_color = self.colors.status_color(task.status.value)
        bg_lighter = lighten_color(bg_color, 0.4)
        text_color = get_contrasting_text_color(bg_lighter)
        border_style = "dashed" if self.ghost else "solid"

        self.setStyleSheet(f"""
            TaskBlockWidget {{
                background-color: {bg_lighter};
                border: 1px {border_style} {bg_color};
                border-left: 4px {border_style} {bg_color};
                border-radius: 3px;
                color: {text_color};
            }}
            QLabel {{
                color: {text_color};
                background: transparent;
                border: none;
            }}
        """)
        if self.ghost:
            effect = QGraphicsOpacityEffect(self)
            effect.setOpacity(self.colors.ghost_opacity)
            self.setGraphicsEffect(effect)

    # --- Gesture handling ---

    def _edge_at(self, pos: QPoint):
        y = pos.y()
        if y <= self.RESIZE_ZONE_HEIGHT:
            return ResizeEdge.START
        if y >= self.height() - self.RESIZE_ZONE_HEIGHT:
            return ResizeEdge.END
        return None

    def _update_cursor(self, pos: QPoint) -> None:
        if self._edge_at(pos) is not None:
            self.setCursor(Qt.SizeVerCursor)
        else:
            self.setCursor(Qt.OpenHandCursor)

    def _settle(self) -> None:
        self.state = gesture_state.settle(self.state)

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.LeftButton or self.ghost:
            super().mousePressEvent(event)
            return
        self._press_pos = event.pos()
        self._press_global_y = event.globalPosition().toPoint().y()
        edge = self._edge_at(event.pos())
        if edge is not None:
            self.state = gesture_state.begin_resize(self.state, edge)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if self._press_pos is None or not (event.buttons() & Qt.LeftButton):
            self._update_cursor(event.pos())
            super().mouseMoveEvent(event)
            return

        global_pos = event.globalPosition().toPoint()
        if self.state.is_resizing:
            self.resize_moved.emit(self.task_id, self.state.edge, float(global_pos.y() - self._press_global_y))
            return

        if self.state.phase != gesture_state.GesturePhase.DRAGGING:
            distance = (event.pos() - self._press_pos).manhattanLength()
            if distance < self.DRAG_THRESHOLD or not gesture_state.accepts_drag(self.state):
                return
            self.state = gesture_state.begin_drag(self.state)
            self.setCursor(Qt.ClosedHandCursor)
        self.drag_moved.emit(self.task_id, global_pos)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.LeftButton or self._press_pos is None:
            super().mouseReleaseEvent(event)
            return

        global_pos = event.globalPosition().toPoint()
        phase = self.state.phase
        if phase == gesture_state.GesturePhase.RESIZING:
            self.resize_finished.emit(self.task_id, self.state.edge, float(global_pos.y() - self._press_global_y))
            self.state = gesture_state.release(self.state)
            self._settle_timer.start(self.layout_config.click_suppress_ms)
        elif phase == gesture_state.GesturePhase.DRAGGING:
            self.drag_finished.emit(self.task_id, global_pos, self._press_pos.y())
            self.state = gesture_state.release(self.state)
        elif gesture_state.accepts_click(self.state):
            self.clicked.emit(self.task_id)

        self._press_pos = None
        self._update_cursor(event.pos())

    def leaveEvent(self, event) -> None:
        if self._press_pos is None:
            self.setCursor(Qt.PointingHandCursor)
        super().leaveEvent(event)
