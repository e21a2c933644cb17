"""
Time and grid math for the weekly timetable
Conversions between HH:MM strings, hour offsets and pixel displacements
"""
import math
import re
from dataclasses import dataclass
from typing import Optional, Protocol

from utils.constants import (
    DAY_LABEL_WIDTH_PX,
    DAY_ROW_HEIGHT_PX,
    MIN_DURATION_MINUTES,
    SNAP_MINUTES,
    WINDOW_END_HOUR,
    WINDOW_START_HOUR,
)

_TIME_RE = re.compile(r'^\s*(\d{1,2}):(\d{2})\s*$')


@dataclass(frozen=True)
class GridWindow:
    """Daily time range the grid renders and clamps into"""
    start_hour: int = WINDOW_START_HOUR
    end_hour: int = WINDOW_END_HOUR
    snap_minutes: int = SNAP_MINUTES
    min_duration_minutes: int = MIN_DURATION_MINUTES

    def __post_init__(self):
        if self.end_hour * 60 - self.start_hour * 60 < self.min_duration_minutes:
            raise ValueError("window is shorter than the minimum duration")

    @property
    def hours(self) -> int:
        return self.end_hour - self.start_hour

    @property
    def minutes(self) -> int:
        return self.hours * 60

    @property
    def start_minute(self) -> int:
        return self.start_hour * 60

    @property
    def end_minute(self) -> int:
        return self.end_hour * 60

    @property
    def snap_hours(self) -> float:
        return self.snap_minutes / 60

    @property
    def min_duration_hours(self) -> float:
        return self.min_duration_minutes / 60


DEFAULT_WINDOW = GridWindow()


def clamp(value, low, high):
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def snap(value: float, step: float) -> float:
    """Round to the nearest multiple of step (ties go up)"""
    return round_half_up(value / step) * step


def parse_time(value) -> Optional[int]:
    """Minutes since midnight for an H:MM / HH:MM string, None if unset or invalid"""
    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value)
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def format_time(minutes_since_midnight: int) -> str:
    hours, minutes = divmod(int(minutes_since_midnight), 60)
    return f"{hours:02d}:{minutes:02d}"


def time_to_offset(time, window: GridWindow = DEFAULT_WINDOW) -> float:
    """Hours from the window start; 0 for unset or invalid input, which is not midnight"""
    minutes = parse_time(time)
    if minutes is None:
        return 0.0
    return (minutes - window.start_minute) / 60


def offset_to_time(hours: float, window: GridWindow = DEFAULT_WINDOW) -> str:
    """Clamp to the window, snap to the nearest tick and format as HH:MM"""
    clamped = clamp(hours, 0, window.hours)
    return minutes_to_time(clamped * 60, window)


def time_to_minutes(time, window: GridWindow = DEFAULT_WINDOW) -> int:
    """Minutes from the window start, clamped to the window; 0 for unset or invalid input"""
    minutes = parse_time(time)
    if minutes is None:
        return 0
    return clamp(minutes - window.start_minute, 0, window.minutes)


def minutes_to_time(minutes: float, window: GridWindow = DEFAULT_WINDOW) -> str:
    clamped = clamp(minutes, 0, window.minutes)
    snapped = clamp(snap(clamped, window.snap_minutes), 0, window.minutes)
    return format_time(window.start_minute + int(snapped))


# --- Pixel domain ---

class GridGeometry(Protocol):
    """Live measurements of the rendered grid"""

    def column_width(self) -> float:
        """Pixels per hour"""

    def row_height(self) -> float:
        """Pixels per day row"""


def compute_column_width(total_width: float, day_label_width: float, window: GridWindow = DEFAULT_WINDOW) -> float:
    drawable = total_width - day_label_width
    if drawable <= 0:
        raise ValueError("grid has no drawable width")
    return drawable / window.hours


@dataclass
class FixedGridGeometry:
    """Geometry with known dimensions, for headless use and tests"""
    total_width: float
    day_label_width: float = DAY_LABEL_WIDTH_PX
    day_row_height: float = DAY_ROW_HEIGHT_PX
    window: GridWindow = DEFAULT_WINDOW

    def column_width(self) -> float:
        return compute_column_width(self.total_width, self.day_label_width, self.window)

    def row_height(self) -> float:
        return self.day_row_height


def pixels_to_hours(dx: float, column_width: float) -> float:
    return dx / column_width


def pixels_to_days(dy: float, row_height: float) -> int:
    return round_half_up(dy / row_height)
