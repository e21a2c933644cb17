"""
Weekly timetable editor core
"""
from .api import CourseApi, CourseApiError, HttpCourseApi
from .drafts import DraftStore, EntryKey, EntryKind
from .editor import ErrorBanner, ScheduleEditor
from .grid import FixedGridGeometry, GridWindow
from .interaction import GestureMode, Idle, Moving, Resizing
from .layout import Block, layout_blocks
from .normalize import EMPTY_SCHEDULE, ScheduleTuple, normalize
from .records import CourseRecord, MeetingRecord
from .workspace import PlanWorkspace

__all__ = [
    'CourseApi', 'CourseApiError', 'HttpCourseApi',
    'DraftStore', 'EntryKey', 'EntryKind',
    'ErrorBanner', 'ScheduleEditor',
    'FixedGridGeometry', 'GridWindow',
    'GestureMode', 'Idle', 'Moving', 'Resizing',
    'Block', 'layout_blocks',
    'EMPTY_SCHEDULE', 'ScheduleTuple', 'normalize',
    'CourseRecord', 'MeetingRecord',
    'PlanWorkspace',
]
