"""
Weekly schedule editor
Owns the draft store and the pointer interaction, and commits placements through a CourseApi
"""
import logging
from typing import Callable, Optional, Protocol

from utils.constants import DEFAULT_SCHEDULE_DAY, DEFAULT_SCHEDULE_END, DEFAULT_SCHEDULE_START

from .api import CourseApiError
from .drafts import DraftStore, EntryKey, authoritative_entries
from .grid import DEFAULT_WINDOW
from .interaction import IDLE, GestureMode, Idle, begin_gesture, gesture_schedule
from .normalize import EMPTY_SCHEDULE, ScheduleTuple, diff_schedule, normalize
from .records import INLINE_WIRE_FIELDS, MEETING_WIRE_FIELDS, schedule_payload

logger = logging.getLogger(__name__)


class PointerEvents(Protocol):
    """Source of global pointer events"""

    def subscribe(self, on_move: Callable[[float, float], None],
                  on_up: Callable[[float, float], None]) -> Callable[[], None]:
        """Attach listeners and return a callable that detaches them"""


class ErrorBanner:
    """Single error message slot; the newest message replaces the previous one"""

    def __init__(self):
        self.message = None

    def show(self, message):
        self.message = str(message)

    def clear(self):
        self.message = None

    def __bool__(self):
        return self.message is not None


def default_schedule() -> ScheduleTuple:
    return ScheduleTuple(DEFAULT_SCHEDULE_DAY, DEFAULT_SCHEDULE_START, DEFAULT_SCHEDULE_END)


class ScheduleEditor:
    def __init__(self, api, geometry, pointer_events: Optional[PointerEvents] = None,
                 window=DEFAULT_WINDOW, banner: Optional[ErrorBanner] = None,
                 on_course_updated=None, on_commit_failed=None):
        self.api = api
        self.geometry = geometry
        self.pointer_events = pointer_events
        self.window = window
        self.banner = banner or ErrorBanner()
        self.on_course_updated = on_course_updated
        self.on_commit_failed = on_commit_failed
        self.drafts = DraftStore()

        self._courses = {}
        self._pending_courses = set()
        self._interaction = IDLE
        self._unsubscribe = None
        self._disabled = False
        self._closed = False

    # ===== Authoritative data =====

    @property
    def courses(self):
        return list(self._courses.values())

    def course(self, course_id):
        return self._courses.get(course_id)

    def load(self, courses):
        """Replace the authoritative course list and refresh every draft not pending"""
        self._courses = {course.id: course for course in courses}
        self.drafts.reconcile(authoritative_entries(self._courses.values()))

    def reload(self) -> bool:
        try:
            courses = self.api.list_courses()
        except CourseApiError as e:
            logger.warning(f"Reloading courses failed: {e}")
            self.banner.show(e)
            return False
        self.load(courses)
        return True

    def _resync(self):
        if self.on_commit_failed:
            self.on_commit_failed()
        else:
            self.reload()

    def authoritative_schedule(self, key: EntryKey) -> Optional[ScheduleTuple]:
        course = self._courses.get(key.course_id)
        if course is None:
            return None
        if key.is_inline:
            return course.inline_schedule
        meeting = course.find_meeting(key.meeting_id)
        return meeting.schedule if meeting else None

    def draft(self, key: EntryKey) -> ScheduleTuple:
        schedule = self.drafts.get(key)
        if schedule is None:
            schedule = self.authoritative_schedule(key) or EMPTY_SCHEDULE
        return schedule

    def entries(self):
        """(key, schedule) for every entry currently placed on the grid"""
        return [(key, schedule) for key, schedule in self.drafts.items() if schedule.is_scheduled]

    def _store_course(self, course):
        self._courses[course.id] = course
        if self.on_course_updated:
            self.on_course_updated(course)

    def _store_meeting(self, course_id, meeting):
        course = self._courses.get(course_id)
        if course is None:
            return
        course.meetings = [m for m in course.meetings if m.id != meeting.id] + [meeting]
        course.meetings.sort(key=lambda m: m.id)
        if self.on_course_updated:
            self.on_course_updated(course)

    def _drop_meeting(self, course_id, meeting_id):
        course = self._courses.get(course_id)
        if course is None:
            return
        course.meetings = [m for m in course.meetings if m.id != meeting_id]
        if self.on_course_updated:
            self.on_course_updated(course)

    # ===== Pending / disabled state =====

    @property
    def disabled(self) -> bool:
        return self._disabled

    @disabled.setter
    def disabled(self, value):
        self._disabled = bool(value)
        if self._disabled and not isinstance(self._interaction, Idle):
            logger.debug("Interactions disabled mid-gesture, releasing")
            self.end_gesture()

    def is_course_pending(self, course_id) -> bool:
        return course_id in self._pending_courses

    def _accepts_edits(self, course_id) -> bool:
        return not (self._disabled or self._closed or course_id in self._pending_courses)

    @property
    def interaction(self):
        return self._interaction

    @property
    def is_dragging(self) -> bool:
        return not isinstance(self._interaction, Idle)

    # ===== Gestures =====

    def start_gesture(self, key: EntryKey, mode, x, y) -> bool:
        if not self._accepts_edits(key.course_id):
            return False
        if self.is_dragging:
            self.end_gesture()

        schedule = self.draft(key)
        if not schedule.is_scheduled:
            return False

        self._interaction = begin_gesture(GestureMode(mode), key, schedule, x, y, self.geometry, self.window)
        self.drafts.set(key, schedule)
        self.drafts.mark_pending(key)
        self._attach_listeners()
        return True

    def update_gesture(self, x, y) -> bool:
        """Apply a pointer move to the active entry's draft without committing it"""
        state = self._interaction
        if isinstance(state, Idle):
            return False
        if self._disabled:
            self.end_gesture()
            return False

        candidate = gesture_schedule(state, self.draft(state.key), x, y, self.window)
        if candidate is None:
            return False
        self.drafts.set(state.key, candidate)
        return True

    def end_gesture(self) -> bool:
        state = self._interaction
        if isinstance(state, Idle):
            return False
        self._interaction = IDLE
        self._detach_listeners()
        return self.commit_entry(state.key)

    def _attach_listeners(self):
        if self.pointer_events is not None and self._unsubscribe is None:
            self._unsubscribe = self.pointer_events.subscribe(self._on_pointer_move, self._on_pointer_up)

    def _detach_listeners(self):
        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()

    def _on_pointer_move(self, x, y):
        self.update_gesture(x, y)

    def _on_pointer_up(self, x=None, y=None):
        self.end_gesture()

    # ===== Commit =====

    def commit_entry(self, key: EntryKey) -> bool:
        """
        Normalize the entry's draft and send the fields that differ from the
        normalized authoritative schedule. Returns False when the update failed.
        """
        known = self.authoritative_schedule(key) or EMPTY_SCHEDULE
        draft = self.drafts.get(key, known)
        normalized = normalize(draft, self.window)
        changed = diff_schedule(normalized, normalize(known, self.window))

        if not changed:
            self.drafts.set(key, normalized)
            self.drafts.clear_pending(key)
            return True

        self.drafts.set(key, normalized)
        self.drafts.mark_pending(key)
        self._pending_courses.add(key.course_id)
        try:
            if key.is_inline:
                payload = schedule_payload(normalized, changed, INLINE_WIRE_FIELDS)
                course = self.api.update_course(key.course_id, payload)
            else:
                payload = schedule_payload(normalized, changed, MEETING_WIRE_FIELDS)
                meeting = self.api.update_meeting(key.course_id, key.meeting_id, payload)
        except CourseApiError as e:
            logger.warning(f"Committing schedule for course {key.course_id} failed: {e}")
            self.drafts.clear_pending(key)
            self._pending_courses.discard(key.course_id)
            self.drafts.set(key, known)
            self.banner.show(e)
            self._resync()
            return False

        if key.is_inline:
            self._store_course(course)
        else:
            self._store_meeting(key.course_id, meeting)
        self.drafts.clear_pending(key)
        self._pending_courses.discard(key.course_id)
        self.drafts.set(key, self.authoritative_schedule(key) or EMPTY_SCHEDULE)
        return True

    def set_entry(self, key: EntryKey, schedule: Optional[ScheduleTuple] = None, **fields) -> bool:
        """Update a draft from a direct-input control and commit it straight away"""
        if not self._accepts_edits(key.course_id):
            return False
        candidate = schedule if schedule is not None else self.draft(key).replace(**fields)
        self.drafts.set(key, candidate)
        self.drafts.mark_pending(key)
        return self.commit_entry(key)

    def clear_entry(self, key: EntryKey) -> bool:
        """Remove a placement: inline schedules are nulled, meetings are deleted"""
        if not self._accepts_edits(key.course_id):
            return False
        if key.is_inline:
            return self.set_entry(key, EMPTY_SCHEDULE)

        self._pending_courses.add(key.course_id)
        try:
            self.api.delete_meeting(key.course_id, key.meeting_id)
        except CourseApiError as e:
            logger.warning(f"Deleting meeting {key.meeting_id} failed: {e}")
            self.banner.show(e)
            self._resync()
            return False
        finally:
            self._pending_courses.discard(key.course_id)

        self.drafts.discard(key)
        self._drop_meeting(key.course_id, key.meeting_id)
        return True

    def add_placement(self, course_id) -> Optional[EntryKey]:
        """
        Place a course on the grid. The first placement fills the inline
        schedule, later ones create meetings.
        """
        if not self._accepts_edits(course_id) or course_id not in self._courses:
            return None

        inline_key = EntryKey.inline(course_id)
        if not self.draft(inline_key).is_scheduled:
            self.drafts.set(inline_key, default_schedule())
            self.drafts.mark_pending(inline_key)
            return inline_key if self.commit_entry(inline_key) else None

        defaults = default_schedule()
        self._pending_courses.add(course_id)
        try:
            meeting = self.api.create_meeting(
                course_id, schedule_payload(defaults, ('day', 'start_time', 'end_time'), MEETING_WIRE_FIELDS)
            )
        except CourseApiError as e:
            logger.warning(f"Adding a meeting to course {course_id} failed: {e}")
            self.banner.show(e)
            self._resync()
            return None
        finally:
            self._pending_courses.discard(course_id)

        self._store_meeting(course_id, meeting)
        key = EntryKey.meeting(course_id, meeting.id)
        self.drafts.set(key, meeting.schedule)
        return key

    def flush_pending(self):
        """Commit every entry still marked pending"""
        for key in self.drafts.pending_keys():
            self.commit_entry(key)

    def teardown(self):
        """Detach listeners and flush pending edits; the editor accepts no edits afterwards"""
        self._detach_listeners()
        self._interaction = IDLE
        self.flush_pending()
        self._closed = True
