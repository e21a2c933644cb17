"""
Schedule tuple normalization
"""
from dataclasses import dataclass, fields, replace
from typing import Optional

from utils.constants import DAYS

from .grid import DEFAULT_WINDOW, GridWindow, clamp, format_time, parse_time


@dataclass(frozen=True)
class ScheduleTuple:
    """Placement of one entry on the weekly grid"""
    day: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    room: Optional[str] = None

    @property
    def is_scheduled(self) -> bool:
        return self.day in DAYS and self.start_time is not None and self.end_time is not None

    def replace(self, **changes) -> "ScheduleTuple":
        return replace(self, **changes)


EMPTY_SCHEDULE = ScheduleTuple()

SCHEDULE_FIELDS = tuple(f.name for f in fields(ScheduleTuple))


def normalize_day(value) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip().upper()
    return value if value in DAYS else None


def normalize_room(value) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def normalize(schedule: ScheduleTuple, window: GridWindow = DEFAULT_WINDOW) -> ScheduleTuple:
    """
    Coerce a schedule into a valid placement or the empty one.

    Without a valid day, or with neither time set, every field is cleared.
    A single missing bound is derived from the other using the minimum
    duration, then both are clamped into the window with end >= start + minimum.
    """
    day = normalize_day(schedule.day)
    start = parse_time(schedule.start_time)
    end = parse_time(schedule.end_time)

    if day is None or (start is None and end is None):
        return EMPTY_SCHEDULE

    min_duration = window.min_duration_minutes
    if start is None:
        start = end - min_duration
    elif end is None:
        end = start + min_duration

    start = clamp(start, window.start_minute, window.end_minute)
    end = clamp(end, window.start_minute, window.end_minute)

    if end < start + min_duration:
        end = start + min_duration
        if end > window.end_minute:
            end = window.end_minute
            start = end - min_duration

    return ScheduleTuple(
        day=day,
        start_time=format_time(start),
        end_time=format_time(end),
        room=normalize_room(schedule.room),
    )


def diff_schedule(current: ScheduleTuple, known: ScheduleTuple) -> tuple:
    """Names of the fields that differ between two schedules"""
    return tuple(name for name in SCHEDULE_FIELDS if getattr(current, name) != getattr(known, name))
