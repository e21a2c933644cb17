"""
Credit Tracker - route definitions
"""
import logging

from flask import Blueprint, g, jsonify, request, session

from utils.constants import PLAN_REQUIREMENTS
from utils.decorators import error_response, handle_errors, login_required
from utils.helpers import summarize_credits

logger = logging.getLogger(__name__)

main_bp = Blueprint('main', __name__)
auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')
api_bp = Blueprint('api', __name__, url_prefix='/api')


def _json_payload():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValueError("Invalid JSON payload")
    return payload


def _start_session(user):
    from services import create_session

    user_session = create_session(user)
    session.clear()
    session['session_token'] = user_session.token
    session.permanent = True


# ===== Health =====

@main_bp.route('/healthz')
def healthz():
    return jsonify({"status": "ok"})


# ===== Authentication =====

@auth_bp.route('/register', methods=['POST'])
@handle_errors
def register():
    from services import create_user, find_user_by_email, validate_credentials

    payload = _json_payload()
    email = validate_credentials(
        payload.get('email'), payload.get('password'), payload.get('confirmPassword')
    )
    if find_user_by_email(email):
        return error_response("Email is already registered, please log in", 409)

    user = create_user(email, payload['password'])
    _start_session(user)
    return jsonify({"status": "success", "mode": "register", "user": user.to_dict()}), 201


@auth_bp.route('/login', methods=['POST'])
@handle_errors
def login():
    from services import find_user_by_email, touch_user, validate_credentials, verify_password

    payload = _json_payload()
    email = validate_credentials(payload.get('email'), payload.get('password'))

    user = find_user_by_email(email)
    if not user:
        return error_response("User not found, please register first", 404)
    if not verify_password(user, payload['password']):
        return error_response("Incorrect email or password", 401)

    touch_user(user)
    _start_session(user)
    return jsonify({"status": "success", "mode": "login", "user": user.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
@handle_errors
def logout():
    from services import delete_session

    token = session.get('session_token')
    if token:
        delete_session(token)
    session.clear()
    return jsonify({"status": "success"})


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify({"status": "success", "user": g.user.to_dict()})


# ===== Course plan =====

@api_bp.route('/user-courses', methods=['GET'])
@login_required
@handle_errors
def list_user_courses():
    from services import get_user_course_plan

    courses = [uc.to_dict() for uc in get_user_course_plan(g.user.id)]
    return jsonify({"status": "success", "courses": courses})


@api_bp.route('/user-courses', methods=['POST'])
@login_required
@handle_errors
def create_user_course():
    from services import create_user_course as create

    user_course = create(g.user.id, _json_payload())
    return jsonify({"status": "success", "course": user_course.to_dict()}), 201


@api_bp.route('/user-courses/<int:user_course_id>', methods=['PATCH'])
@login_required
@handle_errors
def update_user_course(user_course_id):
    from services import update_user_course as update

    user_course = update(g.user.id, user_course_id, _json_payload())
    return jsonify({"status": "success", "course": user_course.to_dict()})


@api_bp.route('/user-courses/<int:user_course_id>', methods=['DELETE'])
@login_required
@handle_errors
def delete_user_course(user_course_id):
    from services import delete_user_course as delete

    delete(g.user.id, user_course_id)
    return '', 204


@api_bp.route('/user-courses/<int:user_course_id>/meetings', methods=['POST'])
@login_required
@handle_errors
def create_meeting(user_course_id):
    from services import create_meeting as create

    meeting = create(g.user.id, user_course_id, _json_payload())
    return jsonify({"status": "success", "meeting": meeting.to_dict()}), 201


@api_bp.route('/user-courses/<int:user_course_id>/meetings/<int:meeting_id>', methods=['PATCH'])
@login_required
@handle_errors
def update_meeting(user_course_id, meeting_id):
    from services import update_meeting as update

    meeting = update(g.user.id, user_course_id, meeting_id, _json_payload())
    return jsonify({"status": "success", "meeting": meeting.to_dict()})


@api_bp.route('/user-courses/<int:user_course_id>/meetings/<int:meeting_id>', methods=['DELETE'])
@login_required
@handle_errors
def delete_meeting(user_course_id, meeting_id):
    from services import delete_meeting as delete

    delete(g.user.id, user_course_id, meeting_id)
    return '', 204


# ===== Credit summary =====

@api_bp.route('/credits', methods=['GET'])
@login_required
@handle_errors
def get_credit_summary():
    from services import get_user_course_plan

    plan = request.args.get('plan') or None
    if plan and plan not in PLAN_REQUIREMENTS:
        raise ValueError(f"Unknown plan: {plan}")

    courses = [uc.to_dict() for uc in get_user_course_plan(g.user.id)]
    return jsonify({"status": "success", "summary": summarize_credits(courses, plan)})
