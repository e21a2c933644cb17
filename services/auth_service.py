"""
Account and login session service
Password hashing, session tokens, expired-session cleanup
"""
import logging
import secrets
from datetime import timedelta

from flask import current_app
from werkzeug.security import check_password_hash, generate_password_hash

from utils.constants import MIN_PASSWORD_LENGTH, SESSION_TOKEN_BYTES
from utils.helpers import utcnow

logger = logging.getLogger(__name__)


def validate_credentials(email, password, confirm_password=None):
    """Normalize the email and check password rules; raises ValueError"""
    if not isinstance(email, str) or '@' not in email.strip():
        raise ValueError("A valid email is required")
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if confirm_password is not None and confirm_password != password:
        raise ValueError("Password confirmation does not match")
    return email.strip().lower()


def find_user_by_email(email):
    from models import User

    return User.query.filter_by(email=email).first()


def create_user(email, password):
    from models import User, db

    user = User(
        email=email,
        password_hash=generate_password_hash(password, method='pbkdf2:sha256'),
    )
    db.session.add(user)
    db.session.commit()
    logger.info(f"Registered user {user.id}")
    return user


def verify_password(user, password):
    return bool(user) and check_password_hash(user.password_hash, password)


def touch_user(user):
    from models import db

    user.updated_at = utcnow()
    db.session.commit()


def create_session(user):
    """Issue a new session token for the user"""
    from models import UserSession, db

    lifetime = timedelta(days=current_app.config.get('SESSION_LIFETIME_DAYS', 7))
    user_session = UserSession(
        user_id=user.id,
        token=secrets.token_hex(SESSION_TOKEN_BYTES),
        expires_at=utcnow() + lifetime,
    )
    db.session.add(user_session)
    db.session.commit()
    return user_session


def delete_session(token):
    from models import UserSession, db

    UserSession.query.filter_by(token=token).delete()
    db.session.commit()


def get_user_by_token(token):
    """Resolve a session token; expired sessions are removed"""
    from models import UserSession, db

    user_session = UserSession.query.filter_by(token=token).first()
    if not user_session:
        return None

    if user_session.is_expired:
        db.session.delete(user_session)
        db.session.commit()
        return None

    return user_session.user


def purge_expired_sessions():
    """Delete every expired session row, returning the count"""
    from models import UserSession, db

    try:
        removed = UserSession.query.filter(UserSession.expires_at <= utcnow()).delete()
        db.session.commit()
        return removed
    except Exception:
        db.session.rollback()
        raise


def purge_sessions_job(app):
    """Scheduled cleanup of expired sessions"""
    with app.app_context():
        try:
            removed = purge_expired_sessions()
            logger.info(f"Session purge finished, {removed} expired session(s) removed")
        except Exception as e:
            logger.error(f"ERROR in session purge job: {e}", exc_info=True)
