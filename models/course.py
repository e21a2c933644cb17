"""
Course catalog and personal course plan models
"""
from utils.helpers import utcnow
from . import db


class Course(db.Model):
    """Catalog entry shared between users, keyed by course code"""
    __tablename__ = 'courses'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(50), unique=True, nullable=False, index=True)
    name_en = db.Column(db.String(255), nullable=False)
    name_th = db.Column(db.String(255))
    default_credits = db.Column(db.Integer, default=3, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user_courses = db.relationship('UserCourse', backref='course', lazy=True, cascade="all, delete-orphan")


class UserCourse(db.Model):
    """One row of a user's plan, with its primary (inline) timetable slot"""
    __tablename__ = 'user_courses'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False)
    year = db.Column(db.Integer)
    semester = db.Column(db.Integer)
    course_type = db.Column(db.String(20))
    credits = db.Column(db.Integer)
    completed = db.Column(db.Boolean, default=False, nullable=False)
    position = db.Column(db.Integer, default=0, nullable=False)
    schedule_day = db.Column(db.String(3))
    schedule_start_time = db.Column(db.String(5))
    schedule_end_time = db.Column(db.String(5))
    schedule_room = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    meetings = db.relationship(
        'UserCourseMeeting', backref='user_course', lazy=True,
        cascade="all, delete-orphan", order_by='UserCourseMeeting.id'
    )

    __table_args__ = (
        db.Index('user_courses_user_idx', 'user_id', 'course_id', 'year', 'semester'),
    )

    def to_dict(self):
        course = self.course
        return {
            "id": self.id,
            "courseId": course.id,
            "code": course.code,
            "nameEN": course.name_en,
            "nameTH": course.name_th or "",
            "credits": self.credits if self.credits is not None else course.default_credits,
            "year": self.year or 0,
            "semester": self.semester or 0,
            "courseType": self.course_type or "",
            "completed": bool(self.completed),
            "position": self.position,
            "scheduleDay": self.schedule_day or "",
            "scheduleStartTime": self.schedule_start_time or "",
            "scheduleEndTime": self.schedule_end_time or "",
            "scheduleRoom": self.schedule_room or "",
            "meetings": [m.to_dict() for m in self.meetings],
        }


class UserCourseMeeting(db.Model):
    """Additional weekly slot of a planned course"""
    __tablename__ = 'user_course_meetings'

    id = db.Column(db.Integer, primary_key=True)
    user_course_id = db.Column(db.Integer, db.ForeignKey('user_courses.id'), nullable=False, index=True)
    day = db.Column(db.String(3))
    start_time = db.Column(db.String(5))
    end_time = db.Column(db.String(5))
    room = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "day": self.day or "",
            "startTime": self.start_time or "",
            "endTime": self.end_time or "",
            "room": self.room or "",
        }
