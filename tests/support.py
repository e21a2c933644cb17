import copy
import itertools

from timetable.api import CourseApi, CourseApiError
from timetable.records import CourseRecord, MeetingRecord

INLINE_COLUMNS = {
    'scheduleDay': 'schedule_day',
    'scheduleStartTime': 'schedule_start_time',
    'scheduleEndTime': 'schedule_end_time',
    'scheduleRoom': 'schedule_room',
}
MEETING_COLUMNS = {'day': 'day', 'startTime': 'start_time', 'endTime': 'end_time', 'room': 'room'}
PLAN_COLUMNS = {'year': 'year', 'semester': 'semester', 'credits': 'credits',
                'courseType': 'course_type', 'completed': 'completed'}
CATALOG_COLUMNS = {'code': 'code', 'nameEN': 'name_en', 'nameTH': 'name_th'}


def make_course(course_id, code='CS101', day=None, start=None, end=None, room=None, **fields):
    return CourseRecord(
        id=course_id,
        code=code,
        name_en=fields.pop('name_en', f'{code} name'),
        credits=fields.pop('credits', 3),
        year=fields.pop('year', 1),
        semester=fields.pop('semester', 1),
        schedule_day=day,
        schedule_start_time=start,
        schedule_end_time=end,
        schedule_room=room,
        **fields,
    )


class FakeCourseApi(CourseApi):
    """In-memory course plan store that records every call"""

    def __init__(self, courses=()):
        self.courses = {c.id: copy.deepcopy(c) for c in courses}
        self.calls = []
        self.fail_on = set()
        self.error_message = "Network error"
        self.hook = None
        self._ids = itertools.count(1000)

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        if self.hook:
            self.hook(name)
        if name in self.fail_on:
            raise CourseApiError(self.error_message, 500)

    def calls_named(self, name):
        return [c for c in self.calls if c[0] == name]

    def _course(self, course_id):
        if course_id not in self.courses:
            raise CourseApiError("Course not found", 404)
        return self.courses[course_id]

    def list_courses(self):
        self._call('list_courses')
        return [copy.deepcopy(c) for c in self.courses.values()]

    def create_course(self, payload):
        self._call('create_course', payload)
        course = CourseRecord(id=next(self._ids))
        for wire, attr in {**PLAN_COLUMNS, **CATALOG_COLUMNS}.items():
            if wire in payload:
                setattr(course, attr, payload[wire])
        self.courses[course.id] = course
        return copy.deepcopy(course)

    def update_course(self, course_id, payload):
        self._call('update_course', course_id, payload)
        course = self._course(course_id)
        for wire, attr in {**INLINE_COLUMNS, **PLAN_COLUMNS}.items():
            if wire in payload:
                setattr(course, attr, payload[wire])
        for wire, value in (payload.get('course') or {}).items():
            setattr(course, CATALOG_COLUMNS[wire], value)
        return copy.deepcopy(course)

    def delete_course(self, course_id):
        self._call('delete_course', course_id)
        self._course(course_id)
        del self.courses[course_id]

    def create_meeting(self, course_id, payload):
        self._call('create_meeting', course_id, payload)
        meeting = MeetingRecord(id=next(self._ids))
        for wire, attr in MEETING_COLUMNS.items():
            setattr(meeting, attr, payload.get(wire))
        self._course(course_id).meetings.append(meeting)
        return copy.deepcopy(meeting)

    def update_meeting(self, course_id, meeting_id, payload):
        self._call('update_meeting', course_id, meeting_id, payload)
        meeting = self._course(course_id).find_meeting(meeting_id)
        if meeting is None:
            raise CourseApiError("Meeting not found", 404)
        for wire, attr in MEETING_COLUMNS.items():
            if wire in payload:
                setattr(meeting, attr, payload[wire])
        return copy.deepcopy(meeting)

    def delete_meeting(self, course_id, meeting_id):
        self._call('delete_meeting', course_id, meeting_id)
        course = self._course(course_id)
        if course.find_meeting(meeting_id) is None:
            raise CourseApiError("Meeting not found", 404)
        course.meetings = [m for m in course.meetings if m.id != meeting_id]

    def logout(self):
        self._call('logout')


class RecordingPointerEvents:
    """Pointer event source that lets tests fire global move/up events"""

    def __init__(self):
        self.on_move = None
        self.on_up = None
        self.subscriptions = 0
        self.unsubscriptions = 0

    @property
    def attached(self):
        return self.on_move is not None

    def subscribe(self, on_move, on_up):
        self.on_move, self.on_up = on_move, on_up
        self.subscriptions += 1
        return self._unsubscribe

    def _unsubscribe(self):
        self.on_move = self.on_up = None
        self.unsubscriptions += 1

    def move(self, x, y):
        if self.on_move:
            self.on_move(x, y)

    def up(self, x=0, y=0):
        if self.on_up:
            self.on_up(x, y)
