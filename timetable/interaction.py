"""
Pointer interaction states for dragging and resizing timetable blocks
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from utils.constants import DAYS

from .drafts import EntryKey
from .grid import (
    DEFAULT_WINDOW,
    GridWindow,
    clamp,
    offset_to_time,
    pixels_to_days,
    pixels_to_hours,
    snap,
    time_to_offset,
)
from .normalize import ScheduleTuple

# Displacements below this many hours are treated as pointer jitter
JITTER_EPSILON_HOURS = 1e-3


class GestureMode(str, Enum):
    MOVE = 'move'
    RESIZE = 'resize'


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Moving:
    key: EntryKey
    origin_x: float
    origin_y: float
    column_width: float
    row_height: float
    base_start: float
    base_end: float
    base_day_index: int


@dataclass(frozen=True)
class Resizing:
    key: EntryKey
    origin_x: float
    column_width: float
    base_start: float
    base_end: float
    base_day_index: int


Interaction = Union[Idle, Moving, Resizing]

IDLE = Idle()


def begin_gesture(mode, key, schedule: ScheduleTuple, x, y, geometry, window: GridWindow = DEFAULT_WINDOW):
    """Capture the base placement and grid measurements at pointer-down"""
    mode = GestureMode(mode)
    base_start = time_to_offset(schedule.start_time, window)
    base_end = time_to_offset(schedule.end_time, window)
    base_day_index = DAYS.index(schedule.day)

    if mode is GestureMode.MOVE:
        return Moving(
            key=key,
            origin_x=x,
            origin_y=y,
            column_width=geometry.column_width(),
            row_height=geometry.row_height(),
            base_start=base_start,
            base_end=base_end,
            base_day_index=base_day_index,
        )
    return Resizing(
        key=key,
        origin_x=x,
        column_width=geometry.column_width(),
        base_start=base_start,
        base_end=base_end,
        base_day_index=base_day_index,
    )


def _moved_schedule(state: Moving, current: ScheduleTuple, x, y, window):
    hours_delta = pixels_to_hours(x - state.origin_x, state.column_width)
    days_delta = pixels_to_days(y - state.origin_y, state.row_height)

    duration = max(state.base_end - state.base_start, window.min_duration_hours)
    latest_start = window.hours - duration
    start = clamp(state.base_start + hours_delta, 0, latest_start)
    start = clamp(snap(start, window.snap_hours), 0, latest_start)
    day_index = clamp(state.base_day_index + days_delta, 0, len(DAYS) - 1)

    return current.replace(
        day=DAYS[day_index],
        start_time=offset_to_time(start, window),
        end_time=offset_to_time(start + duration, window),
    )


def _resized_schedule(state: Resizing, current: ScheduleTuple, x, window):
    hours_delta = pixels_to_hours(x - state.origin_x, state.column_width)

    # The end never precedes start + minimum duration
    earliest_end = min(state.base_start + window.min_duration_hours, window.hours)
    end = clamp(state.base_end + hours_delta, earliest_end, window.hours)
    end = clamp(snap(end, window.snap_hours), earliest_end, window.hours)

    return current.replace(end_time=offset_to_time(end, window))


def _displaced(candidate: ScheduleTuple, current: ScheduleTuple, window) -> bool:
    if candidate.day != current.day:
        return True
    for name in ('start_time', 'end_time'):
        before = time_to_offset(getattr(current, name), window)
        after = time_to_offset(getattr(candidate, name), window)
        if abs(after - before) > JITTER_EPSILON_HOURS:
            return True
    return False


def gesture_schedule(state: Interaction, current: ScheduleTuple, x, y,
                     window: GridWindow = DEFAULT_WINDOW) -> Optional[ScheduleTuple]:
    """
    Schedule implied by the pointer position for the active gesture.

    Returns None when idle or when the result does not move past the jitter epsilon.
    """
    if isinstance(state, Idle):
        return None
    if isinstance(state, Moving):
        candidate = _moved_schedule(state, current, x, y, window)
    elif isinstance(state, Resizing):
        candidate = _resized_schedule(state, current, x, window)
    else:
        raise TypeError(f"Unknown interaction state: {state!r}")

    if not _displaced(candidate, current, window):
        return None
    return candidate
