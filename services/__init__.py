"""
Service layer
Business logic behind the route handlers
"""
from .auth_service import (
    validate_credentials,
    find_user_by_email,
    create_user,
    verify_password,
    touch_user,
    create_session,
    delete_session,
    get_user_by_token,
    purge_expired_sessions,
    purge_sessions_job
)
from .course_service import (
    get_user_course_plan,
    get_user_course,
    create_user_course,
    update_user_course,
    delete_user_course,
    create_meeting,
    update_meeting,
    delete_meeting
)

__all__ = [
    'validate_credentials',
    'find_user_by_email',
    'create_user',
    'verify_password',
    'touch_user',
    'create_session',
    'delete_session',
    'get_user_by_token',
    'purge_expired_sessions',
    'purge_sessions_job',
    'get_user_course_plan',
    'get_user_course',
    'create_user_course',
    'update_user_course',
    'delete_user_course',
    'create_meeting',
    'update_meeting',
    'delete_meeting'
]
