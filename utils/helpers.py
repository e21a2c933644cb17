"""
Utility helper functions
"""
import re
from datetime import datetime

import pytz

from .constants import (
    BASE_CREDIT_REQUIREMENTS,
    COURSE_TYPE_KEYS,
    COURSE_TYPE_LABELS,
    DAYS,
    PLAN_REQUIREMENTS,
)

TIME_RE = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


def utcnow():
    """Naive UTC timestamp for DateTime columns"""
    return datetime.now(pytz.utc).replace(tzinfo=None)


def sanitize_text(value):
    """Trim a string; empty or non-string becomes None"""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def sanitize_day(value):
    """Upper-case a day symbol; raises ValueError for anything outside the week"""
    value = sanitize_text(value)
    if value is None:
        return None
    value = value.upper()
    if value not in DAYS:
        raise ValueError(f"Invalid day: {value}")
    return value


def sanitize_time(value):
    """Validate an HH:MM string; empty becomes None"""
    value = sanitize_text(value)
    if value is None:
        return None
    if len(value) == 4 and value[1] == ':':
        value = '0' + value
    if not TIME_RE.match(value):
        raise ValueError(f"Invalid time: {value}")
    return value


def credit_requirements(plan=None):
    """Required credits per course type for a study plan"""
    requirements = {key: BASE_CREDIT_REQUIREMENTS.get(key, 0) for key in COURSE_TYPE_KEYS}
    plan_info = PLAN_REQUIREMENTS.get(plan) if plan else None
    requirements['majorElective'] = plan_info['majorElective'] if plan_info else 0
    return requirements


def summarize_credits(courses, plan=None):
    """Earned vs. required credits from course dicts (API shape)"""
    requirements = credit_requirements(plan)
    earned = {key: 0 for key in COURSE_TYPE_KEYS}

    for course in courses:
        course_type = course.get('courseType')
        if not course.get('completed') or course_type not in earned:
            continue
        credits = course.get('credits')
        if not isinstance(credits, (int, float)) or isinstance(credits, bool):
            continue
        earned[course_type] += credits

    total_earned = sum(earned.values())
    total_required = sum(requirements.values())

    def percent(value, required):
        return round(min(value / required * 100, 100), 1) if required > 0 else 0.0

    return {
        'plan': plan if plan in PLAN_REQUIREMENTS else None,
        'planName': PLAN_REQUIREMENTS[plan]['name'] if plan in PLAN_REQUIREMENTS else None,
        'types': {
            key: {
                'label': COURSE_TYPE_LABELS[key],
                'earned': earned[key],
                'required': requirements[key],
                'percent': percent(earned[key], requirements[key]),
            }
            for key in COURSE_TYPE_KEYS
        },
        'total': {
            'earned': total_earned,
            'required': total_required,
            'percent': percent(total_earned, total_required),
        },
    }
