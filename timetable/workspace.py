"""
Course plan workspace
Edits are kept locally against a snapshot and persisted in one batch on save
"""
import copy
import itertools
import logging
from collections import namedtuple

from utils.constants import DEFAULT_COURSE_CREDITS
from utils.helpers import summarize_credits

from .api import CourseApiError
from .editor import ErrorBanner, ScheduleEditor
from .grid import DEFAULT_WINDOW
from .records import CourseRecord

logger = logging.getLogger(__name__)

DRAFT_ID_PREFIX = 'draft-'

# record attribute -> wire name
PLAN_FIELDS = {
    'year': 'year',
    'semester': 'semester',
    'credits': 'credits',
    'course_type': 'courseType',
    'completed': 'completed',
}
CATALOG_FIELDS = {
    'code': 'code',
    'name_en': 'nameEN',
    'name_th': 'nameTH',
}
EDITABLE_FIELDS = tuple(PLAN_FIELDS) + tuple(CATALOG_FIELDS)

ChangeSet = namedtuple('ChangeSet', ['new', 'modified'])


def is_draft_id(course_id):
    return isinstance(course_id, str) and course_id.startswith(DRAFT_ID_PREFIX)


def _sort_key(course):
    return (course.year, course.semester, course.position, course.code)


def update_payload(original, current):
    """Fields of current that differ from original, shaped for PATCH /api/user-courses/<id>"""
    payload = {}
    for attr, wire in PLAN_FIELDS.items():
        if getattr(current, attr) != getattr(original, attr):
            payload[wire] = getattr(current, attr)
    catalog = {
        wire: getattr(current, attr)
        for attr, wire in CATALOG_FIELDS.items()
        if getattr(current, attr) != getattr(original, attr)
    }
    if catalog:
        payload['course'] = catalog
    return payload


def create_payload(draft):
    payload = {wire: getattr(draft, attr) for attr, wire in PLAN_FIELDS.items()}
    payload.update({wire: getattr(draft, attr) for attr, wire in CATALOG_FIELDS.items() if getattr(draft, attr)})
    return payload


class PlanWorkspace:
    def __init__(self, api, geometry, pointer_events=None, window=DEFAULT_WINDOW):
        self.api = api
        self.banner = ErrorBanner()
        self.editor = ScheduleEditor(
            api, geometry, pointer_events, window,
            banner=self.banner,
            on_course_updated=self._on_schedule_committed,
            on_commit_failed=self.resync,
        )
        self.snapshot = []
        self.courses = []
        self.is_loading = False
        self.is_saving = False
        self.is_logging_out = False
        self.logged_out = False
        self._pending = set()
        self._draft_ids = itertools.count(1)

    # ===== State =====

    @property
    def disabled(self) -> bool:
        return self.is_saving or self.is_logging_out or self.logged_out

    def _set_busy(self, attr, value):
        setattr(self, attr, value)
        self.editor.disabled = self.disabled

    def is_pending(self, course_id) -> bool:
        return course_id in self._pending or self.editor.is_course_pending(course_id)

    def course(self, course_id):
        for course in self.courses:
            if course.id == course_id:
                return course
        return None

    def _snapshot_course(self, course_id):
        for course in self.snapshot:
            if course.id == course_id:
                return course
        return None

    def _reset(self, records):
        records = sorted(records, key=_sort_key)
        self.snapshot = copy.deepcopy(records)
        self.courses = copy.deepcopy(records)
        self.editor.load(copy.deepcopy(records))

    def load(self) -> bool:
        self.is_loading = True
        try:
            records = self.api.list_courses()
        except CourseApiError as e:
            logger.warning(f"Loading courses failed: {e}")
            self.banner.show(e)
            return False
        finally:
            self.is_loading = False
        self._reset(records)
        self.banner.clear()
        return True

    def resync(self) -> bool:
        """Drop local state and reload the authoritative course list"""
        try:
            records = self.api.list_courses()
        except CourseApiError as e:
            logger.warning(f"Resync failed: {e}")
            self.banner.show(e)
            return False
        self._reset(records)
        return True

    def grouped(self):
        """Working copy grouped by (year, semester)"""
        groups = {}
        for course in sorted(self.courses, key=_sort_key):
            groups.setdefault((course.year, course.semester), []).append(course)
        return groups

    # ===== Local edits =====

    def add_course(self, year, semester) -> CourseRecord:
        if self.disabled:
            raise RuntimeError("Workspace is busy")
        positions = [c.position for c in self.courses if c.year == year and c.semester == semester]
        draft = CourseRecord(
            id=f"{DRAFT_ID_PREFIX}{next(self._draft_ids)}",
            credits=DEFAULT_COURSE_CREDITS,
            year=year,
            semester=semester,
            position=max(positions, default=0) + 1,
        )
        self.courses.append(draft)
        return draft

    def update_course(self, course_id, **fields) -> bool:
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Not editable: {', '.join(sorted(unknown))}")
        if self.disabled or self.is_pending(course_id):
            return False
        course = self.course(course_id)
        if course is None:
            return False
        for attr, value in fields.items():
            setattr(course, attr, value)
        return True

    def toggle_completed(self, course_id) -> bool:
        course = self.course(course_id)
        if course is None:
            return False
        return self.update_course(course_id, completed=not course.completed)

    def remove_course(self, course_id) -> bool:
        """Draft rows are dropped locally; persisted rows are deleted right away"""
        if self.disabled or self.is_pending(course_id):
            return False
        if is_draft_id(course_id):
            self.courses = [c for c in self.courses if c.id != course_id]
            return True

        previous_courses, previous_snapshot = self.courses, self.snapshot
        self.courses = [c for c in self.courses if c.id != course_id]
        self.snapshot = [c for c in self.snapshot if c.id != course_id]
        self._pending.add(course_id)
        try:
            self.api.delete_course(course_id)
        except CourseApiError as e:
            logger.warning(f"Deleting course {course_id} failed: {e}")
            self.courses, self.snapshot = previous_courses, previous_snapshot
            self.banner.show(e)
            return False
        finally:
            self._pending.discard(course_id)

        self.editor.load([c for c in self.editor.courses if c.id != course_id])
        return True

    def discard(self):
        self.courses = copy.deepcopy(self.snapshot)

    # ===== Batched save =====

    def change_set(self) -> ChangeSet:
        new = [c for c in self.courses if is_draft_id(c.id)]
        modified = []
        for course in self.courses:
            if is_draft_id(course.id):
                continue
            original = self._snapshot_course(course.id)
            if original is None:
                continue
            payload = update_payload(original, course)
            if payload:
                modified.append((course, payload))
        return ChangeSet(new, modified)

    @property
    def has_changes(self) -> bool:
        changes = self.change_set()
        return bool(changes.new or changes.modified)

    def save(self) -> bool:
        """
        Create new courses, then apply updates, one request at a time.

        A failure stops the batch and resyncs; requests already sent stay applied.
        """
        if self.disabled:
            return False
        changes = self.change_set()
        if not (changes.new or changes.modified):
            return True

        self._set_busy('is_saving', True)
        try:
            confirmed = {}
            for draft in changes.new:
                confirmed[draft.id] = self.api.create_course(create_payload(draft))
            for course, payload in changes.modified:
                confirmed[course.id] = self.api.update_course(course.id, payload)
        except CourseApiError as e:
            logger.warning(f"Saving course plan failed: {e}")
            self.banner.show(e)
            self.resync()
            return False
        finally:
            self._set_busy('is_saving', False)

        merged = [confirmed.get(c.id, c) for c in self.courses]
        logger.info(f"Saved {len(changes.new)} new and {len(changes.modified)} modified course(s)")
        self._reset(merged)
        self.banner.clear()
        return True

    def _on_schedule_committed(self, record):
        """Schedules are persisted by the editor; mirror them without touching other edits"""
        for courses in (self.snapshot, self.courses):
            for index, course in enumerate(courses):
                if course.id == record.id:
                    updated = course.with_inline_schedule(record.inline_schedule)
                    updated.meetings = copy.deepcopy(record.meetings)
                    courses[index] = updated

    # ===== Session =====

    def logout(self) -> bool:
        self._set_busy('is_logging_out', True)
        try:
            self.editor.flush_pending()
            self.api.logout()
        except CourseApiError as e:
            logger.warning(f"Logout failed: {e}")
            self.banner.show(e)
            return False
        finally:
            self._set_busy('is_logging_out', False)

        self.editor.teardown()
        self.snapshot = []
        self.courses = []
        self.logged_out = True
        self.editor.disabled = True
        return True

    # ===== Credits =====

    def credit_summary(self, plan=None):
        return summarize_credits([c.to_dict() for c in self.courses], plan)
