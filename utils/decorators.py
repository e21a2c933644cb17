"""
Authentication and error-handling decorators
"""
import logging
from functools import wraps

from flask import g, jsonify, session

logger = logging.getLogger(__name__)


class NotFoundError(LookupError):
    """Resource missing or owned by another user"""


def _get_current_user():
    """Return the user behind the session cookie"""
    from services.auth_service import get_user_by_token

    token = session.get('session_token')
    if not token:
        return None

    # Cache on g for the rest of the request
    if not hasattr(g, 'user'):
        g.user = get_user_by_token(token)
        if not g.user:
            session.clear()  # stale or expired token
    return g.user


def error_response(message, status):
    return jsonify({"status": "error", "message": message}), status


def login_required(f):
    """Reject API calls without a valid session"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = _get_current_user()
        if not user:
            return error_response("Unauthorized", 401)
        return f(*args, **kwargs)
    return decorated_function


def handle_errors(f):
    """Map service exceptions onto the JSON error envelope"""
    @wraps(f)
    def decorated(*args, **kwargs):
        from models import db

        try:
            return f(*args, **kwargs)
        except ValueError as e:
            db.session.rollback()
            logger.warning(f"Invalid request: {e}")
            return error_response(str(e), 400)
        except NotFoundError as e:
            db.session.rollback()
            message = e.args[0] if e.args else "Not found"
            logger.warning(f"Not found: {message}")
            return error_response(message, 404)
        except Exception as e:
            db.session.rollback()
            logger.error(f"Server error: {e}", exc_info=True)
            return error_response("Internal server error", 500)
    return decorated
