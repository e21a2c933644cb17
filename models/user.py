"""
User and login session models
"""
import uuid

from utils.helpers import utcnow
from . import db


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    sessions = db.relationship('UserSession', backref='user', lazy=True, cascade="all, delete-orphan")
    user_courses = db.relationship('UserCourse', backref='user', lazy=True, cascade="all, delete-orphan")

    def to_dict(self):
        return {'id': self.id, 'email': self.email}


class UserSession(db.Model):
    __tablename__ = 'sessions'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False, index=True)
    token = db.Column(db.String(128), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)

    @property
    def is_expired(self):
        return self.expires_at <= utcnow()
