"""
Per-block gesture state.

Each task block carries one immutable GestureState value. Transitions are
plain functions returning the next value, so a block's state is never
shared with another block.

    IDLE --begin_drag--> DRAGGING --release--> IDLE
    IDLE --begin_resize--> RESIZING --release--> JUST_FINISHED_RESIZING
    JUST_FINISHED_RESIZING --settle--> IDLE

JUST_FINISHED_RESIZING swallows the click a pointer release generates after
a resize, so it is not taken as "open this task".
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .gestures import ResizeEdge


class GesturePhase(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    RESIZING = "resizing"
    JUST_FINISHED_RESIZING = "just_finished_resizing"


@dataclass(frozen=True)
class GestureState:
    phase: GesturePhase = GesturePhase.IDLE
    edge: Optional[ResizeEdge] = None

    @property
    def is_resizing(self) -> bool:
        return self.phase == GesturePhase.RESIZING


IDLE = GestureState()


def begin_drag(state: GestureState) -> GestureState:
    if state.phase != GesturePhase.IDLE:
        return state
    return GestureState(GesturePhase.DRAGGING)


def begin_resize(state: GestureState, edge: ResizeEdge) -> GestureState:
    if state.phase in (GesturePhase.DRAGGING, GesturePhase.RESIZING):
        return state
    return GestureState(GesturePhase.RESIZING, edge=edge)


def release(state: GestureState) -> GestureState:
    if state.phase == GesturePhase.RESIZING:
        return replace(state, phase=GesturePhase.JUST_FINISHED_RESIZING)
    if state.phase == GesturePhase.DRAGGING:
        return IDLE
    return state


def settle(state: GestureState) -> GestureState:
    """Timer callback: the click-suppression window is over."""
    if state.phase == GesturePhase.JUST_FINISHED_RESIZING:
        return IDLE
    return state


def accepts_click(state: GestureState) -> bool:
    return state.phase == GesturePhase.IDLE


def accepts_drag(state: GestureState) -> bool:
    return state.phase in (GesturePhase.IDLE, GesturePhase.DRAGGING)
