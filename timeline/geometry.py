"""
Conversions between clock time and pixel offsets on the hour grid.
"""

import math
from typing import NamedTuple


class Slot(NamedTuple):
    """A snapped grid position: an hour and a sub-hour slot index."""
    hour: int
    quarter_index: int


def time_to_offset(hour: int, minute: float, hour_height: float) -> float:
    """Pixel offset of ``hour:minute`` from the top of the day grid."""
    return hour * hour_height + (minute / 60) * hour_height


def offset_to_slot(offset: float, hour_height: float, quarter_count: int = 4) -> Slot:
    """
    Snap a pixel offset to the slot containing it.

    Floor-based, clamped to hours [0, 23] and slots [0, quarter_count - 1].
    """
    if hour_height <= 0:
        raise ValueError(f"hour_height must be positive, got {hour_height}")
    if quarter_count <= 0:
        raise ValueError(f"quarter_count must be positive, got {quarter_count}")

    hours = offset / hour_height
    # Small epsilon keeps exact slot boundaries from flooring one slot low
    hour = math.floor(hours + 1e-9)
    if hour < 0:
        return Slot(0, 0)
    if hour > 23:
        return Slot(23, quarter_count - 1)

    fraction = hours - hour
    quarter = math.floor(fraction * quarter_count + 1e-9)
    quarter = max(0, min(quarter_count - 1, quarter))
    return Slot(hour, quarter)


def slot_minutes(quarter_index: int, quarter_count: int = 4) -> int:
    """Minutes past the hour at which a slot begins."""
    return quarter_index * 60 // quarter_count


def slot_height(hour_height: float, quarter_count: int = 4) -> float:
    return hour_height / quarter_count


def first_visible_hour(current_hour: int) -> int:
    """Hour the grid opens at: one hour of context above the current one."""
    return max(0, current_hour - 1)
