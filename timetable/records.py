"""
Client-side course records
Mirror the camelCase JSON the /api/user-courses endpoints exchange
"""
from dataclasses import dataclass, field, replace
from typing import List, Optional

from utils.constants import COURSE_TYPE_KEYS

from .normalize import ScheduleTuple, normalize_day

INLINE_WIRE_FIELDS = {
    'day': 'scheduleDay',
    'start_time': 'scheduleStartTime',
    'end_time': 'scheduleEndTime',
    'room': 'scheduleRoom',
}

MEETING_WIRE_FIELDS = {
    'day': 'day',
    'start_time': 'startTime',
    'end_time': 'endTime',
    'room': 'room',
}


def _text(value):
    """Wire strings use '' for unset"""
    if isinstance(value, str) and value.strip():
        return value
    return None


def _int(value, default=0):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def schedule_payload(schedule: ScheduleTuple, names, wire_fields) -> dict:
    return {wire_fields[name]: getattr(schedule, name) for name in names}


@dataclass
class MeetingRecord:
    id: int
    day: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    room: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            day=normalize_day(data.get('day')),
            start_time=_text(data.get('startTime')),
            end_time=_text(data.get('endTime')),
            room=_text(data.get('room')),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'day': self.day or '',
            'startTime': self.start_time or '',
            'endTime': self.end_time or '',
            'room': self.room or '',
        }

    @property
    def schedule(self) -> ScheduleTuple:
        return ScheduleTuple(self.day, self.start_time, self.end_time, self.room)


@dataclass
class CourseRecord:
    """One course placed in the user's plan"""
    id: object
    course_id: Optional[int] = None
    code: str = ''
    name_en: str = ''
    name_th: str = ''
    credits: int = 0
    year: int = 0
    semester: int = 0
    course_type: str = ''
    completed: bool = False
    position: int = 0
    schedule_day: Optional[str] = None
    schedule_start_time: Optional[str] = None
    schedule_end_time: Optional[str] = None
    schedule_room: Optional[str] = None
    meetings: List[MeetingRecord] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        course_type = data.get('courseType') or ''
        return cls(
            id=data['id'],
            course_id=data.get('courseId'),
            code=data.get('code') or '',
            name_en=data.get('nameEN') or '',
            name_th=data.get('nameTH') or '',
            credits=_int(data.get('credits')),
            year=_int(data.get('year')),
            semester=_int(data.get('semester')),
            course_type=course_type if course_type in COURSE_TYPE_KEYS else '',
            completed=bool(data.get('completed')),
            position=_int(data.get('position')),
            schedule_day=normalize_day(data.get('scheduleDay')),
            schedule_start_time=_text(data.get('scheduleStartTime')),
            schedule_end_time=_text(data.get('scheduleEndTime')),
            schedule_room=_text(data.get('scheduleRoom')),
            meetings=[MeetingRecord.from_dict(m) for m in data.get('meetings') or []],
        )

    def to_dict(self):
        return {
            'id': self.id,
            'courseId': self.course_id,
            'code': self.code,
            'nameEN': self.name_en,
            'nameTH': self.name_th,
            'credits': self.credits,
            'year': self.year,
            'semester': self.semester,
            'courseType': self.course_type,
            'completed': self.completed,
            'position': self.position,
            'scheduleDay': self.schedule_day or '',
            'scheduleStartTime': self.schedule_start_time or '',
            'scheduleEndTime': self.schedule_end_time or '',
            'scheduleRoom': self.schedule_room or '',
            'meetings': [m.to_dict() for m in self.meetings],
        }

    @property
    def inline_schedule(self) -> ScheduleTuple:
        return ScheduleTuple(
            self.schedule_day, self.schedule_start_time, self.schedule_end_time, self.schedule_room
        )

    def with_inline_schedule(self, schedule: ScheduleTuple) -> "CourseRecord":
        return replace(
            self,
            schedule_day=schedule.day,
            schedule_start_time=schedule.start_time,
            schedule_end_time=schedule.end_time,
            schedule_room=schedule.room,
        )

    def find_meeting(self, meeting_id) -> Optional[MeetingRecord]:
        for meeting in self.meetings:
            if meeting.id == meeting_id:
                return meeting
        return None

    @property
    def display_name(self) -> str:
        return self.name_en or self.name_th or self.code
