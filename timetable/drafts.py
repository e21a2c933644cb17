"""
Draft schedules keyed by entry, with a pending set that shields in-flight edits from refreshes
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional

from .normalize import ScheduleTuple


class EntryKind(str, Enum):
    INLINE = 'inline'
    MEETING = 'meeting'


@dataclass(frozen=True)
class EntryKey:
    """Identifies one placement: a course's inline schedule or one of its meetings"""
    course_id: object
    kind: EntryKind
    meeting_id: Optional[int] = None

    @classmethod
    def inline(cls, course_id):
        return cls(course_id, EntryKind.INLINE)

    @classmethod
    def meeting(cls, course_id, meeting_id):
        return cls(course_id, EntryKind.MEETING, meeting_id)

    @property
    def is_inline(self) -> bool:
        return self.kind is EntryKind.INLINE


def authoritative_entries(courses: Iterable) -> Dict[EntryKey, ScheduleTuple]:
    """Every entry the given course records define, inline entries included even when empty"""
    entries = {}
    for course in courses:
        entries[EntryKey.inline(course.id)] = course.inline_schedule
        for meeting in course.meetings:
            entries[EntryKey.meeting(course.id, meeting.id)] = meeting.schedule
    return entries


class DraftStore:
    """Locally edited schedules; the owning editor is the only writer"""

    def __init__(self):
        self._drafts = {}
        self._pending = set()

    def __contains__(self, key):
        return key in self._drafts

    def __len__(self):
        return len(self._drafts)

    def get(self, key, default=None):
        return self._drafts.get(key, default)

    def set(self, key, schedule: ScheduleTuple):
        self._drafts[key] = schedule

    def discard(self, key):
        self._drafts.pop(key, None)
        self._pending.discard(key)

    def items(self):
        return list(self._drafts.items())

    def mark_pending(self, key):
        self._pending.add(key)

    def clear_pending(self, key):
        self._pending.discard(key)

    def is_pending(self, key) -> bool:
        return key in self._pending

    def pending_keys(self):
        return list(self._pending)

    def reconcile(self, authoritative: Dict[EntryKey, ScheduleTuple]):
        """
        Adopt fresh authoritative values for every key not pending.
        Keys the authority no longer has are dropped unless pending.
        """
        for key, schedule in authoritative.items():
            if key not in self._pending:
                self._drafts[key] = schedule
        for key in list(self._drafts):
            if key not in authoritative and key not in self._pending:
                del self._drafts[key]
