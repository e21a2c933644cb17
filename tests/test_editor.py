import unittest

from timetable.drafts import EntryKey
from timetable.editor import ScheduleEditor
from timetable.grid import FixedGridGeometry
from timetable.interaction import Idle
from timetable.layout import layout_blocks
from timetable.normalize import EMPTY_SCHEDULE, ScheduleTuple
from timetable.records import MeetingRecord

from tests.support import FakeCourseApi, RecordingPointerEvents, make_course

PLACED = EntryKey.inline(1)
UNPLACED = EntryKey.inline(2)
ORIGINAL = ScheduleTuple("MON", "09:00", "11:00", "A1")


class EditorTestCase(unittest.TestCase):
    def setUp(self):
        self.api = FakeCourseApi([
            make_course(1, "CS101", day="MON", start="09:00", end="11:00", room="A1"),
            make_course(2, "CS102"),
        ])
        self.pointer = RecordingPointerEvents()
        # 100 px per hour, 70 px per day row
        self.editor = ScheduleEditor(self.api, FixedGridGeometry(total_width=1280), self.pointer)
        self.assertTrue(self.editor.reload())
        self.api.calls.clear()

    def drag(self, key, dx, dy, mode="move"):
        self.assertTrue(self.editor.start_gesture(key, mode, 400, 100))
        self.pointer.move(400 + dx, 100 + dy)


class TestLoad(EditorTestCase):
    def test_drafts_follow_authoritative_data(self):
        self.assertEqual(self.editor.draft(PLACED), ORIGINAL)
        self.assertEqual(self.editor.draft(UNPLACED), EMPTY_SCHEDULE)
        self.assertEqual([key for key, _ in self.editor.entries()], [PLACED])

    def test_layout_positions_blocks_on_the_time_axis(self):
        (block,) = layout_blocks(self.editor)
        self.assertEqual(block.row, 0)
        self.assertAlmostEqual(block.left, 2 / 12)
        self.assertAlmostEqual(block.width, 2 / 12)
        self.assertEqual(block.code, "CS101")
        self.assertFalse(block.pending)


class TestGestures(EditorTestCase):
    def test_drag_updates_draft_then_commits_changed_fields_on_release(self):
        self.drag(PLACED, 200, 70)

        self.assertEqual(self.editor.draft(PLACED), ScheduleTuple("TUE", "11:00", "13:00", "A1"))
        self.assertEqual(self.api.calls, [])
        self.assertTrue(self.editor.drafts.is_pending(PLACED))

        self.pointer.up()

        self.assertEqual(self.api.calls_named("update_course"), [
            ("update_course", 1, {
                "scheduleDay": "TUE",
                "scheduleStartTime": "11:00",
                "scheduleEndTime": "13:00",
            }),
        ])
        self.assertFalse(self.editor.drafts.is_pending(PLACED))
        self.assertIsInstance(self.editor.interaction, Idle)
        self.assertEqual(self.editor.course(1).schedule_day, "TUE")

    def test_listeners_exist_only_during_a_gesture(self):
        self.assertFalse(self.pointer.attached)
        self.drag(PLACED, 100, 0)
        self.assertTrue(self.pointer.attached)
        self.pointer.up()
        self.assertFalse(self.pointer.attached)
        self.assertEqual((self.pointer.subscriptions, self.pointer.unsubscriptions), (1, 1))

    def test_resize_keeps_minimum_duration(self):
        self.drag(PLACED, -300, 0, mode="resize")
        self.assertEqual(self.editor.draft(PLACED).end_time, "09:30")
        self.editor.end_gesture()
        self.assertEqual(self.api.calls_named("update_course"), [
            ("update_course", 1, {"scheduleEndTime": "09:30"}),
        ])

    def test_release_without_change_makes_no_request(self):
        self.drag(PLACED, 5, 5)
        self.pointer.up()
        self.assertEqual(self.api.calls, [])
        self.assertFalse(self.editor.drafts.is_pending(PLACED))

    def test_unscheduled_entry_cannot_be_dragged(self):
        self.assertFalse(self.editor.start_gesture(UNPLACED, "move", 0, 0))
        self.assertFalse(self.pointer.attached)

    def test_release_on_out_of_window_schedule_makes_no_request(self):
        early = EntryKey.inline(3)
        self.api.courses[3] = make_course(3, "CS103", day="MON", start="06:00", end="08:00")
        self.assertTrue(self.editor.reload())
        self.api.calls.clear()

        self.assertTrue(self.editor.start_gesture(early, "move", 400, 100))
        self.pointer.up()

        self.assertEqual(self.api.calls, [])
        self.assertEqual(self.editor.draft(early), ScheduleTuple("MON", "07:00", "08:00"))
        self.assertFalse(self.editor.drafts.is_pending(early))

    def test_unknown_day_cannot_be_dragged(self):
        self.api.courses[3] = make_course(3, "CS103", day="Funday", start="09:00", end="10:00")
        self.assertTrue(self.editor.reload())
        self.assertFalse(self.editor.start_gesture(EntryKey.inline(3), "move", 0, 0))
        self.assertNotIn(EntryKey.inline(3), [key for key, _ in self.editor.entries()])

    def test_refresh_during_gesture_keeps_the_draft(self):
        self.drag(PLACED, 200, 0)
        self.assertTrue(self.editor.reload())
        self.assertEqual(self.editor.draft(PLACED).start_time, "11:00")
        self.pointer.up()
        self.assertEqual(self.api.courses[1].schedule_start_time, "11:00")

    def test_disabling_mid_gesture_releases(self):
        self.drag(PLACED, 100, 0)
        self.editor.disabled = True
        self.assertIsInstance(self.editor.interaction, Idle)
        self.assertFalse(self.pointer.attached)
        self.assertEqual(len(self.api.calls_named("update_course")), 1)

    def test_disabled_editor_ignores_gestures(self):
        self.editor.disabled = True
        self.assertFalse(self.editor.start_gesture(PLACED, "move", 0, 0))
        self.assertFalse(self.editor.set_entry(PLACED, day="WED"))

    def test_new_gesture_releases_the_previous_one(self):
        self.drag(PLACED, 100, 0)
        self.assertTrue(self.editor.start_gesture(PLACED, "resize", 0, 0))
        self.assertEqual(len(self.api.calls_named("update_course")), 1)
        self.assertEqual(self.editor.draft(PLACED).start_time, "10:00")

    def test_course_is_pending_while_its_commit_is_in_flight(self):
        seen = []

        def during_update(name):
            if name == "update_course":
                seen.append(self.editor.is_course_pending(1))
                seen.append(self.editor.start_gesture(PLACED, "move", 0, 0))
                seen.append(layout_blocks(self.editor)[0].pending)

        self.api.hook = during_update
        self.drag(PLACED, 100, 0)
        self.pointer.up()

        self.assertEqual(seen, [True, False, True])
        self.assertFalse(self.editor.is_course_pending(1))


class TestCommitFailure(EditorTestCase):
    def test_failed_commit_reports_and_restores_authoritative_schedule(self):
        self.api.fail_on.add("update_course")
        self.drag(PLACED, 200, 70)

        self.assertFalse(self.editor.end_gesture())

        self.assertEqual(self.editor.banner.message, "Network error")
        self.assertFalse(self.editor.is_course_pending(1))
        self.assertFalse(self.editor.drafts.is_pending(PLACED))
        self.assertEqual(len(self.api.calls_named("list_courses")), 1)
        self.assertEqual(self.editor.draft(PLACED), ORIGINAL)

    def test_newest_error_replaces_the_banner(self):
        self.api.fail_on.add("update_course")
        self.editor.set_entry(PLACED, day="TUE")
        self.api.error_message = "Unauthorized"
        self.editor.set_entry(PLACED, day="WED")
        self.assertEqual(self.editor.banner.message, "Unauthorized")

    def test_commit_against_a_vanished_meeting_resyncs(self):
        self.api.courses[1].meetings.append(MeetingRecord(id=50, day="FRI", start_time="13:00", end_time="14:00"))
        self.editor.reload()
        meeting_key = EntryKey.meeting(1, 50)
        self.api.courses[1].meetings.clear()

        self.assertFalse(self.editor.set_entry(meeting_key, day="SAT"))

        self.assertEqual(self.editor.banner.message, "Meeting not found")
        self.assertNotIn(meeting_key, self.editor.drafts)


class TestDirectInput(EditorTestCase):
    def test_immediate_commit_sends_normalized_fields(self):
        self.assertTrue(self.editor.set_entry(PLACED, day="wed", room="  B2 "))
        self.assertEqual(self.api.calls_named("update_course"), [
            ("update_course", 1, {"scheduleDay": "WED", "scheduleRoom": "B2"}),
        ])
        self.assertEqual(self.editor.draft(PLACED), ScheduleTuple("WED", "09:00", "11:00", "B2"))

    def test_commit_without_draft_changes_is_a_no_op(self):
        self.assertTrue(self.editor.commit_entry(PLACED))
        self.assertTrue(self.editor.set_entry(PLACED, room="A1"))
        self.assertEqual(self.api.calls, [])

    def test_clearing_inline_schedule_nulls_all_fields(self):
        self.assertTrue(self.editor.clear_entry(PLACED))
        self.assertEqual(self.api.calls_named("update_course"), [
            ("update_course", 1, {
                "scheduleDay": None,
                "scheduleStartTime": None,
                "scheduleEndTime": None,
                "scheduleRoom": None,
            }),
        ])
        self.assertEqual(self.editor.entries(), [])


class TestPlacements(EditorTestCase):
    def test_first_placement_uses_inline_schedule(self):
        key = self.editor.add_placement(2)
        self.assertEqual(key, UNPLACED)
        self.assertEqual(self.api.calls_named("update_course"), [
            ("update_course", 2, {
                "scheduleDay": "MON",
                "scheduleStartTime": "09:00",
                "scheduleEndTime": "10:00",
            }),
        ])
        self.assertEqual(self.api.calls_named("create_meeting"), [])

    def test_second_placement_creates_an_independent_meeting(self):
        key = self.editor.add_placement(1)

        self.assertEqual(self.api.calls_named("update_course"), [])
        self.assertEqual(len(self.api.calls_named("create_meeting")), 1)
        self.assertFalse(key.is_inline)
        self.assertEqual(self.editor.draft(key), ScheduleTuple("MON", "09:00", "10:00"))
        self.assertEqual(len(self.editor.entries()), 2)

        self.assertTrue(self.editor.start_gesture(key, "move", 0, 0))
        self.editor.update_gesture(300, 140)
        self.editor.end_gesture()

        self.assertEqual(self.api.calls_named("update_meeting"), [
            ("update_meeting", 1, key.meeting_id, {
                "day": "WED",
                "startTime": "12:00",
                "endTime": "13:00",
            }),
        ])
        self.assertEqual(self.editor.draft(PLACED), ORIGINAL)

    def test_removing_a_meeting_deletes_it(self):
        key = self.editor.add_placement(1)
        self.assertTrue(self.editor.clear_entry(key))
        self.assertEqual(self.api.calls_named("delete_meeting"), [("delete_meeting", 1, key.meeting_id)])
        self.assertNotIn(key, self.editor.drafts)
        self.assertEqual(self.editor.course(1).meetings, [])

    def test_unknown_course_cannot_be_placed(self):
        self.assertIsNone(self.editor.add_placement(99))
        self.assertEqual(self.api.calls, [])


class TestTeardown(EditorTestCase):
    def test_teardown_flushes_pending_entries(self):
        self.drag(PLACED, 100, 0)
        self.editor.teardown()

        self.assertFalse(self.pointer.attached)
        self.assertEqual(len(self.api.calls_named("update_course")), 1)
        self.assertEqual(self.editor.drafts.pending_keys(), [])
        self.assertFalse(self.editor.start_gesture(PLACED, "move", 0, 0))


if __name__ == "__main__":
    unittest.main(verbosity=2)
