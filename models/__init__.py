"""
Database models package
"""
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

from .user import User, UserSession
from .course import Course, UserCourse, UserCourseMeeting

__all__ = [
    'db', 'User', 'UserSession',
    'Course', 'UserCourse', 'UserCourseMeeting'
]
