from datetime import date, datetime, timedelta

import pytest

from timeline import gesture_state
from timeline.gesture_state import GesturePhase
from timeline.gestures import (
    DropTarget, ResizeEdge, drop_start, pixels_to_delta, reschedule, reschedule_task, resize, resize_task
)
from timeline.interval import Interval
from timeline.layout import LayoutSettings
from timeline.task import Task
from timeline.timezone_utils import localize, set_timezone
from timeline.validation import TimeRangeError, adjust, validate

MINIMUM = timedelta(minutes=15)


def _at(hour: int, minute: int = 0, day: int = 5) -> datetime:
    return localize(datetime(2024, 3, day, hour, minute))


def _nine_to_ten() -> Interval:
    return Interval(_at(9), _at(10))


def test_reschedule_moves_to_the_drop_slot_and_keeps_duration() -> None:
    moved = reschedule(_nine_to_ten(), DropTarget(date(2024, 3, 5), 14, 1))

    assert moved == Interval(_at(14, 15), _at(15, 15))


def test_reschedule_to_another_day() -> None:
    target = DropTarget.from_key("2024-03-07", 8, 3)
    moved = reschedule(Interval(_at(9), _at(9, 10)), target)

    assert target.day_key == "2024-03-07"
    assert moved == Interval(_at(8, 45, day=7), _at(8, 55, day=7))


def test_reschedule_with_positive_minimum_lengthens_short_tasks() -> None:
    moved = reschedule(Interval(_at(9), _at(9, 5)), DropTarget(date(2024, 3, 5), 11, 0), MINIMUM)

    assert moved == Interval(_at(11), _at(11, 15))


def test_reschedule_keeps_local_wall_clock_across_dst() -> None:
    set_timezone("Europe/Berlin")
    original = Interval(localize(datetime(2024, 3, 30, 9)), localize(datetime(2024, 3, 30, 10)))

    moved = reschedule(original, DropTarget(date(2024, 3, 31), 14, 0))

    assert moved.start.strftime("%Y-%m-%d %H:%M") == "2024-03-31 14:00"
    assert moved.end.strftime("%H:%M") == "15:00"
    assert moved.start.utcoffset() == timedelta(hours=2)


def test_drop_into_a_skipped_hour_lands_after_the_clock_change() -> None:
    set_timezone("Europe/Berlin")
    original = Interval(localize(datetime(2024, 3, 30, 9)), localize(datetime(2024, 3, 30, 10)))

    moved = reschedule(original, DropTarget(date(2024, 3, 31), 2, 2))

    assert moved.start.strftime("%Y-%m-%d %H:%M") == "2024-03-31 03:30"
    assert moved.start.utcoffset() == timedelta(hours=2)
    assert moved.end.strftime("%H:%M") == "04:30"
    assert moved.end - moved.start == timedelta(hours=1)


def test_drop_start_rejects_out_of_range_slots() -> None:
    with pytest.raises(ValueError):
        drop_start(_at(9), DropTarget(date(2024, 3, 5), 24, 0))
    with pytest.raises(ValueError):
        drop_start(_at(9), DropTarget(date(2024, 3, 5), 9, 4))


def test_resize_end_clamps_to_minimum_duration() -> None:
    resized = resize(_nine_to_ten(), ResizeEdge.END, timedelta(minutes=-50), MINIMUM)

    assert resized == Interval(_at(9), _at(9, 15))


def test_resize_start_clamps_to_minimum_duration() -> None:
    resized = resize(_nine_to_ten(), ResizeEdge.START, timedelta(minutes=50), MINIMUM)

    assert resized == Interval(_at(9, 45), _at(10))


def test_resize_moves_only_the_dragged_edge() -> None:
    earlier = resize(_nine_to_ten(), ResizeEdge.START, timedelta(minutes=-30), MINIMUM)
    later = resize(_nine_to_ten(), ResizeEdge.END, timedelta(minutes=45), MINIMUM)

    assert earlier == Interval(_at(8, 30), _at(10))
    assert later == Interval(_at(9), _at(10, 45))


def test_resize_rejects_non_positive_minimum() -> None:
    with pytest.raises(ValueError):
        resize(_nine_to_ten(), ResizeEdge.END, timedelta(minutes=10), timedelta(0))


def test_pixels_to_delta_rounds_to_minutes() -> None:
    assert pixels_to_delta(20, 40) == timedelta(minutes=30)
    assert pixels_to_delta(-50 * 40 / 60, 40) == timedelta(minutes=-50)
    assert pixels_to_delta(1, 40) == timedelta(minutes=2)
    with pytest.raises(ValueError):
        pixels_to_delta(10, 0)


def test_task_engines_report_original_and_result() -> None:
    task = Task(id=1, start="2024-03-05T09:00", end="2024-03-05T10:00")

    moved = reschedule_task(task, DropTarget(date(2024, 3, 5), 14, 1))
    resized = resize_task(task, ResizeEdge.END, -50 * 40 / 60)

    assert moved.task_id == 1
    assert moved.original == _nine_to_ten()
    assert moved.interval == Interval(_at(14, 15), _at(15, 15))
    assert not moved.was_adjusted
    assert resized.interval == Interval(_at(9), _at(9, 15))
    assert resized.edge == ResizeEdge.END


def test_task_engines_skip_tasks_without_interval() -> None:
    task = Task(id=2, start="2024-03-05T09:00")

    assert reschedule_task(task, DropTarget(date(2024, 3, 5), 14, 1)) is None
    assert resize_task(task, ResizeEdge.START, 10, LayoutSettings()) is None


def test_validate_reports_inverted_and_short_ranges() -> None:
    assert validate(_nine_to_ten(), MINIMUM).valid
    inverted = validate(Interval(_at(10), _at(9)), MINIMUM)
    short = validate(Interval(_at(9), _at(9, 10)), MINIMUM)

    assert not inverted.valid
    assert inverted.reason == "end must be after start"
    assert not short.valid
    with pytest.raises(ValueError):
        validate(_nine_to_ten(), timedelta(minutes=-1))


def test_adjust_extends_the_end_and_keeps_the_start() -> None:
    result = adjust(Interval(_at(9), _at(9, 10)), MINIMUM)
    untouched = adjust(_nine_to_ten(), MINIMUM)

    assert result.interval == Interval(_at(9), _at(9, 15))
    assert result.was_adjusted
    assert untouched.interval == _nine_to_ten()
    assert not untouched.was_adjusted


def test_adjust_raises_when_no_positive_range_is_possible() -> None:
    with pytest.raises(TimeRangeError):
        adjust(Interval(_at(10), _at(9)), timedelta(0))


def test_resize_release_suppresses_the_following_click() -> None:
    state = gesture_state.begin_resize(gesture_state.IDLE, ResizeEdge.END)
    assert state.is_resizing
    assert state.edge == ResizeEdge.END
    assert not gesture_state.accepts_click(state)

    state = gesture_state.release(state)
    assert state.phase == GesturePhase.JUST_FINISHED_RESIZING
    assert not gesture_state.accepts_click(state)
    assert not gesture_state.accepts_drag(state)

    assert gesture_state.settle(state) == gesture_state.IDLE


def test_drag_cycle_and_ignored_transitions() -> None:
    dragging = gesture_state.begin_drag(gesture_state.IDLE)
    assert dragging.phase == GesturePhase.DRAGGING
    assert gesture_state.accepts_drag(dragging)
    assert gesture_state.begin_resize(dragging, ResizeEdge.START) == dragging
    assert gesture_state.release(dragging) == gesture_state.IDLE

    resizing = gesture_state.begin_resize(gesture_state.IDLE, ResizeEdge.START)
    assert gesture_state.begin_drag(resizing) == resizing
    assert gesture_state.settle(resizing) == resizing
