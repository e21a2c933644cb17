"""
Course plan service
Per-user course rows, their inline timetable slot and extra meetings
"""
import logging
import math
import secrets

from sqlalchemy import func

from utils.constants import COURSE_TYPE_KEYS, DEFAULT_COURSE_CREDITS, UNTITLED_COURSE_NAME
from utils.decorators import NotFoundError
from utils.helpers import sanitize_day, sanitize_text, sanitize_time

logger = logging.getLogger(__name__)

# wire name -> (column, sanitizer)
INLINE_SCHEDULE_FIELDS = {
    'scheduleDay': ('schedule_day', sanitize_day),
    'scheduleStartTime': ('schedule_start_time', sanitize_time),
    'scheduleEndTime': ('schedule_end_time', sanitize_time),
    'scheduleRoom': ('schedule_room', sanitize_text),
}

MEETING_FIELDS = {
    'day': ('day', sanitize_day),
    'startTime': ('start_time', sanitize_time),
    'endTime': ('end_time', sanitize_time),
    'room': ('room', sanitize_text),
}


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _read_credits(value):
    if not _is_number(value) or value < 0:
        raise ValueError("`credits` must be a non-negative number")
    return int(value)


def _read_course_type(value):
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("`courseType` must be a string")
    value = value.strip()
    if not value:
        return None
    if value not in COURSE_TYPE_KEYS:
        raise ValueError(f"Unknown course type: {value}")
    return value


def read_schedule_fields(payload, fields, allow_null=True):
    """Collect sanitized schedule columns present in the payload"""
    updates = {}
    for wire_name, (column, sanitizer) in fields.items():
        if wire_name not in payload:
            continue
        value = payload[wire_name]
        if value is None:
            if allow_null:
                updates[column] = None
            continue
        if not isinstance(value, str):
            raise ValueError(f"`{wire_name}` must be a string")
        updates[column] = sanitizer(value)
    return updates


def get_user_course_plan(user_id):
    """All plan rows of a user, ordered for display"""
    from models import Course, UserCourse

    return (
        UserCourse.query.join(Course, UserCourse.course_id == Course.id)
        .filter(UserCourse.user_id == user_id)
        .order_by(
            func.coalesce(UserCourse.year, 0),
            func.coalesce(UserCourse.semester, 0),
            UserCourse.position,
            Course.code,
        )
        .all()
    )


def get_user_course(user_id, user_course_id):
    from models import UserCourse, db

    user_course = db.session.get(UserCourse, user_course_id)
    if not user_course or user_course.user_id != user_id:
        raise NotFoundError("Course not found")
    return user_course


def ensure_course(code=None, name_en=None, name_th=None, credits=None):
    """Find a catalog course by code, creating it when missing"""
    from models import Course, db

    code = (code or '').strip() or f"NEW-{secrets.token_hex(3)}"
    existing = Course.query.filter_by(code=code).first()
    if existing:
        return existing

    course = Course(
        code=code,
        name_en=(name_en or '').strip() or UNTITLED_COURSE_NAME,
        name_th=(name_th or '').strip() or None,
        default_credits=credits if credits is not None else DEFAULT_COURSE_CREDITS,
    )
    db.session.add(course)
    db.session.flush()
    return course


def create_user_course(user_id, payload):
    """Add a course row to the end of its year/semester"""
    from models import UserCourse, db

    year = payload.get('year')
    semester = payload.get('semester')
    if not _is_int(year):
        raise ValueError("`year` must be an integer")
    if not _is_int(semester):
        raise ValueError("`semester` must be an integer")

    credits = _read_credits(payload['credits']) if _is_number(payload.get('credits')) else None
    course_type = _read_course_type(payload.get('courseType'))
    completed = payload.get('completed') if isinstance(payload.get('completed'), bool) else False

    course = ensure_course(
        code=payload.get('code') if isinstance(payload.get('code'), str) else None,
        name_en=payload.get('nameEN') if isinstance(payload.get('nameEN'), str) else None,
        name_th=payload.get('nameTH') if isinstance(payload.get('nameTH'), str) else None,
        credits=credits,
    )

    max_position = (
        db.session.query(func.coalesce(func.max(UserCourse.position), 0))
        .filter(
            UserCourse.user_id == user_id,
            UserCourse.year == year,
            UserCourse.semester == semester,
        )
        .scalar()
    )

    user_course = UserCourse(
        user_id=user_id,
        course_id=course.id,
        year=year,
        semester=semester,
        course_type=course_type,
        completed=completed,
        credits=credits if credits is not None else course.default_credits,
        position=(max_position or 0) + 1,
    )
    for column, value in read_schedule_fields(payload, INLINE_SCHEDULE_FIELDS, allow_null=False).items():
        setattr(user_course, column, value)

    db.session.add(user_course)
    db.session.commit()
    logger.info(f"Created plan course {user_course.id} for user {user_id}")
    return user_course


def _apply_catalog_updates(course, updates):
    from models import Course

    changed = False
    if isinstance(updates.get('code'), str):
        code = updates['code'].strip()
        if not code:
            raise ValueError("`code` cannot be empty")
        clash = Course.query.filter(Course.code == code, Course.id != course.id).first()
        if clash:
            raise ValueError(f"Course code already exists: {code}")
        course.code = code
        changed = True
    if isinstance(updates.get('nameEN'), str):
        course.name_en = updates['nameEN'].strip() or UNTITLED_COURSE_NAME
        changed = True
    if isinstance(updates.get('nameTH'), str):
        course.name_th = updates['nameTH'].strip() or None
        changed = True
    if _is_number(updates.get('credits')):
        course.default_credits = _read_credits(updates['credits'])
        changed = True
    return changed


def update_user_course(user_id, user_course_id, payload):
    """Apply a partial update; only fields present in the payload change"""
    from models import db

    user_course = get_user_course(user_id, user_course_id)
    changed = False

    nested = payload.get('course')
    if isinstance(nested, dict):
        changed = _apply_catalog_updates(user_course.course, nested) or changed

    if _is_int(payload.get('year')):
        user_course.year = payload['year']
        changed = True
    if _is_int(payload.get('semester')):
        user_course.semester = payload['semester']
        changed = True
    if 'courseType' in payload:
        user_course.course_type = _read_course_type(payload['courseType'])
        changed = True
    if isinstance(payload.get('completed'), bool):
        user_course.completed = payload['completed']
        changed = True
    if _is_number(payload.get('credits')):
        user_course.credits = _read_credits(payload['credits'])
        changed = True

    schedule_updates = read_schedule_fields(payload, INLINE_SCHEDULE_FIELDS)
    for column, value in schedule_updates.items():
        setattr(user_course, column, value)
    changed = changed or bool(schedule_updates)

    if not changed:
        raise ValueError("No valid fields to update")

    db.session.commit()
    return user_course


def delete_user_course(user_id, user_course_id):
    from models import db

    user_course = get_user_course(user_id, user_course_id)
    db.session.delete(user_course)
    db.session.commit()


def get_meeting(user_id, user_course_id, meeting_id):
    from models import UserCourseMeeting, db

    user_course = get_user_course(user_id, user_course_id)
    meeting = db.session.get(UserCourseMeeting, meeting_id)
    if not meeting or meeting.user_course_id != user_course.id:
        raise NotFoundError("Meeting not found")
    return meeting


def create_meeting(user_id, user_course_id, payload):
    from models import UserCourseMeeting, db

    user_course = get_user_course(user_id, user_course_id)
    meeting = UserCourseMeeting(user_course_id=user_course.id)
    for column, value in read_schedule_fields(payload, MEETING_FIELDS, allow_null=False).items():
        setattr(meeting, column, value)
    db.session.add(meeting)
    db.session.commit()
    return meeting


def update_meeting(user_id, user_course_id, meeting_id, payload):
    from models import db

    meeting = get_meeting(user_id, user_course_id, meeting_id)
    updates = read_schedule_fields(payload, MEETING_FIELDS)
    if not updates:
        raise ValueError("No valid fields to update")
    for column, value in updates.items():
        setattr(meeting, column, value)
    db.session.commit()
    return meeting


def delete_meeting(user_id, user_course_id, meeting_id):
    from models import db

    meeting = get_meeting(user_id, user_course_id, meeting_id)
    db.session.delete(meeting)
    db.session.commit()
