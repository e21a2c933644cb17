"""
Block layout for rendering the weekly grid
"""
from dataclasses import dataclass
from typing import Optional

from utils.constants import DAYS

from .drafts import EntryKey
from .grid import clamp, time_to_offset


@dataclass(frozen=True)
class Block:
    """
    One rendered placement.

    left and width are fractions of the time axis, row is the day index.
    """
    key: EntryKey
    code: str
    title: str
    day: str
    row: int
    start_time: str
    end_time: str
    room: Optional[str]
    left: float
    width: float
    pending: bool


def layout_blocks(editor):
    window = editor.window
    blocks = []
    for key, schedule in editor.entries():
        course = editor.course(key.course_id)
        if course is None or schedule.day not in DAYS:
            continue
        start = clamp(time_to_offset(schedule.start_time, window), 0, window.hours)
        end = clamp(time_to_offset(schedule.end_time, window), start, window.hours)
        blocks.append(Block(
            key=key,
            code=course.code,
            title=course.display_name,
            day=schedule.day,
            row=DAYS.index(schedule.day),
            start_time=schedule.start_time,
            end_time=schedule.end_time,
            room=schedule.room,
            left=start / window.hours,
            width=(end - start) / window.hours,
            pending=editor.drafts.is_pending(key) or editor.is_course_pending(key.course_id),
        ))
    blocks.sort(key=lambda b: (b.row, b.left, b.code))
    return blocks
