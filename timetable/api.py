"""
Course plan API clients
"""
import abc
import logging

import requests

from .records import CourseRecord, MeetingRecord

logger = logging.getLogger(__name__)


class CourseApiError(Exception):
    """A request to the course plan API failed"""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        self.status = status


class CourseApi(abc.ABC):
    """Operations the editor needs from the course plan collaborator"""

    @abc.abstractmethod
    def list_courses(self):
        """Return every course in the current user's plan"""

    @abc.abstractmethod
    def create_course(self, payload):
        pass

    @abc.abstractmethod
    def update_course(self, course_id, payload):
        """Apply a partial update and return the updated course"""

    @abc.abstractmethod
    def delete_course(self, course_id):
        pass

    @abc.abstractmethod
    def create_meeting(self, course_id, payload):
        pass

    @abc.abstractmethod
    def update_meeting(self, course_id, meeting_id, payload):
        pass

    @abc.abstractmethod
    def delete_meeting(self, course_id, meeting_id):
        pass

    @abc.abstractmethod
    def logout(self):
        pass


class HttpCourseApi(CourseApi):
    """CourseApi over the JSON endpoints served by routes.py"""

    def __init__(self, base_url, session=None, timeout=10):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method, path, payload=None, params=None):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, params=params, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise CourseApiError(f"Network error: {e}") from e

        body = None
        if response.status_code != 204 and response.content:
            try:
                body = response.json()
            except ValueError:
                body = None

        if not response.ok:
            message = None
            if isinstance(body, dict):
                message = body.get('message') or body.get('error')
            raise CourseApiError(message or f"Request failed ({response.status_code})", response.status_code)

        return body if isinstance(body, dict) else {}

    # --- Authentication ---

    def login(self, email, password):
        body = self._request('POST', '/api/auth/login', {'email': email, 'password': password})
        return body.get('user')

    def register(self, email, password, confirm_password):
        body = self._request('POST', '/api/auth/register', {
            'email': email,
            'password': password,
            'confirmPassword': confirm_password,
        })
        return body.get('user')

    def logout(self):
        self._request('POST', '/api/auth/logout')

    # --- Courses ---

    def list_courses(self):
        body = self._request('GET', '/api/user-courses')
        return [CourseRecord.from_dict(c) for c in body.get('courses', [])]

    def create_course(self, payload):
        body = self._request('POST', '/api/user-courses', payload)
        return CourseRecord.from_dict(body['course'])

    def update_course(self, course_id, payload):
        body = self._request('PATCH', f'/api/user-courses/{course_id}', payload)
        return CourseRecord.from_dict(body['course'])

    def delete_course(self, course_id):
        self._request('DELETE', f'/api/user-courses/{course_id}')

    def credit_summary(self, plan=None):
        params = {'plan': plan} if plan else None
        return self._request('GET', '/api/credits', params=params).get('summary')

    # --- Meetings ---

    def create_meeting(self, course_id, payload):
        body = self._request('POST', f'/api/user-courses/{course_id}/meetings', payload)
        return MeetingRecord.from_dict(body['meeting'])

    def update_meeting(self, course_id, meeting_id, payload):
        body = self._request('PATCH', f'/api/user-courses/{course_id}/meetings/{meeting_id}', payload)
        return MeetingRecord.from_dict(body['meeting'])

    def delete_meeting(self, course_id, meeting_id):
        self._request('DELETE', f'/api/user-courses/{course_id}/meetings/{meeting_id}')
