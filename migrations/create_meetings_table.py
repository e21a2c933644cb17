#!/usr/bin/env python3
"""
DB migration: user_course_meetings table
Extra weekly time slots for a plan course, beyond its inline schedule
"""

import sys
import os

# Add the project root to the import path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models import db
from models.course import UserCourseMeeting

TABLE_NAME = UserCourseMeeting.__tablename__


def create_meetings_table(app, confirm=input):
    """Create the meetings table; returns False when the operator cancels"""
    with app.app_context():
        inspector = db.inspect(db.engine)
        if TABLE_NAME in inspector.get_table_names():
            print(f"'{TABLE_NAME}' table already exists.")
            response = confirm("Drop and recreate it? Existing meetings are lost (yes/no): ")
            if response.strip().lower() != 'yes':
                print("Migration cancelled.")
                return False

            UserCourseMeeting.__table__.drop(db.engine)
            print(f"Dropped existing '{TABLE_NAME}' table.")

        UserCourseMeeting.__table__.create(db.engine)
        print(f"Created '{TABLE_NAME}' table:")
        print("=" * 60)
        for column in UserCourseMeeting.__table__.columns:
            print(f"  - {column.name}: {column.type} (nullable={column.nullable})")
        print("=" * 60)
        return True


if __name__ == '__main__':
    from app import create_app

    print("=" * 60)
    print("Timetable meetings migration")
    print("=" * 60)

    try:
        create_meetings_table(create_app())
    except Exception as e:
        print(f"Migration failed: {e}")
        raise
