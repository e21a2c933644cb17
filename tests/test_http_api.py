import json
import unittest
from urllib.parse import urlencode, urlsplit

import requests

from app import create_app
from config import TestingConfig
from models import db
from timetable.api import CourseApiError, HttpCourseApi
from timetable.drafts import EntryKey
from timetable.grid import FixedGridGeometry
from timetable.workspace import PlanWorkspace


class FlaskClientResponse:
    """The slice of requests.Response that HttpCourseApi reads"""

    def __init__(self, response):
        self.status_code = response.status_code
        self.content = response.data
        self.ok = response.status_code < 400

    def json(self):
        return json.loads(self.content)


class FlaskClientSession:
    """Sends HttpCourseApi requests through a Flask test client"""

    def __init__(self, client):
        self.client = client
        self.requests = []

    def request(self, method, url, params=None, json=None, timeout=None):
        path = urlsplit(url).path
        self.requests.append((method, path + (f"?{urlencode(params)}" if params else "")))
        return FlaskClientResponse(self.client.open(path, method=method, query_string=params, json=json))


class BrokenSession:
    def request(self, method, url, params=None, json=None, timeout=None):
        raise requests.ConnectionError("connection refused")


class TestHttpCourseApi(unittest.TestCase):
    def setUp(self):
        self.app = create_app(TestingConfig)
        self.ctx = self.app.app_context()
        self.ctx.push()
        db.create_all()
        self.transport = FlaskClientSession(self.app.test_client())
        self.api = HttpCourseApi("http://localhost/", session=self.transport)

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.ctx.pop()

    def login(self):
        self.api.register("planner@example.com", "long-enough-pw", "long-enough-pw")

    def test_error_envelope_becomes_course_api_error(self):
        with self.assertRaises(CourseApiError) as caught:
            self.api.list_courses()
        self.assertEqual(caught.exception.status, 401)
        self.assertEqual(str(caught.exception), "Unauthorized")

    def test_network_failure_becomes_course_api_error(self):
        api = HttpCourseApi("http://localhost", session=BrokenSession())
        with self.assertRaises(CourseApiError) as caught:
            api.list_courses()
        self.assertIsNone(caught.exception.status)
        self.assertIn("connection refused", str(caught.exception))

    def test_course_and_meeting_round_trip(self):
        self.login()
        course = self.api.create_course({"year": 1, "semester": 2, "code": "CS101", "courseType": "core"})
        self.assertEqual((course.code, course.course_type, course.semester), ("CS101", "core", 2))

        updated = self.api.update_course(course.id, {"scheduleDay": "THU", "scheduleStartTime": "08:00",
                                                     "scheduleEndTime": "09:00"})
        self.assertTrue(updated.inline_schedule.is_scheduled)

        meeting = self.api.create_meeting(course.id, {"day": "FRI", "startTime": "10:00", "endTime": "11:00"})
        meeting = self.api.update_meeting(course.id, meeting.id, {"room": "B12"})
        self.assertEqual(meeting.room, "B12")

        (listed,) = self.api.list_courses()
        self.assertEqual([m.id for m in listed.meetings], [meeting.id])

        self.api.delete_meeting(course.id, meeting.id)
        self.api.delete_course(course.id)
        self.assertEqual(self.api.list_courses(), [])
        self.assertEqual(self.transport.requests[-1], ("GET", "/api/user-courses"))

    def test_credit_summary(self):
        self.login()
        self.api.create_course({"year": 1, "semester": 1, "courseType": "free", "credits": 3, "completed": True})
        summary = self.api.credit_summary("regular")
        self.assertEqual(summary["types"]["free"]["earned"], 3)
        self.assertEqual(self.transport.requests[-1], ("GET", "/api/credits?plan=regular"))

    def test_credit_summary_plan_is_sent_as_one_query_value(self):
        self.login()
        with self.assertRaises(CourseApiError) as caught:
            self.api.credit_summary("regular&plan=honors")
        self.assertEqual(caught.exception.status, 400)
        self.assertEqual(self.transport.requests[-1], ("GET", "/api/credits?plan=regular%26plan%3Dhonors"))

    def test_workspace_against_live_routes(self):
        self.login()
        workspace = PlanWorkspace(self.api, FixedGridGeometry(total_width=1280))
        self.assertTrue(workspace.load())

        draft = workspace.add_course(1, 1)
        workspace.update_course(draft.id, code="GE100", name_en="Writing", course_type="ge")
        self.assertTrue(workspace.save())
        (course,) = workspace.courses

        key = workspace.editor.add_placement(course.id)
        self.assertEqual(key, EntryKey.inline(course.id))
        self.assertTrue(workspace.editor.start_gesture(key, "move", 0, 0))
        workspace.editor.update_gesture(200, 70)
        self.assertTrue(workspace.editor.end_gesture())

        second = workspace.editor.add_placement(course.id)
        self.assertFalse(second.is_inline)

        (stored,) = self.api.list_courses()
        self.assertEqual(
            (stored.schedule_day, stored.schedule_start_time, stored.schedule_end_time),
            ("TUE", "11:00", "12:00"),
        )
        self.assertEqual(len(stored.meetings), 1)
        self.assertEqual(workspace.course(course.id).schedule_day, "TUE")
        self.assertFalse(workspace.has_changes)

        self.assertTrue(workspace.logout())
        with self.assertRaises(CourseApiError):
            self.api.list_courses()


if __name__ == "__main__":
    unittest.main(verbosity=2)
