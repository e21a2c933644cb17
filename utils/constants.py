"""
Application constants
"""

# --- Weekly timetable ---
DAYS = ('MON', 'TUE', 'WED', 'THU', 'FRI', 'SAT', 'SUN')

WINDOW_START_HOUR = 7
WINDOW_END_HOUR = 19
SNAP_MINUTES = 15
MIN_DURATION_MINUTES = 30

# Placement given to a course that has never been scheduled
DEFAULT_SCHEDULE_DAY = 'MON'
DEFAULT_SCHEDULE_START = '09:00'
DEFAULT_SCHEDULE_END = '10:00'

# Rendered grid
DAY_LABEL_WIDTH_PX = 80
DAY_ROW_HEIGHT_PX = 70

# --- Course categories (degree-credit accounting) ---
COURSE_TYPE_KEYS = ('required', 'core', 'major', 'majorElective', 'minor', 'free', 'ge')

COURSE_TYPE_LABELS = {
    'required': 'วิชาบังคับ',
    'core': 'วิชาแกน',
    'major': 'วิชาเอก',
    'majorElective': 'วิชาเอกเลือก',
    'minor': 'วิชาโท',
    'free': 'วิชาเสรี',
    'ge': 'วิชา GE',
}

PLAN_REQUIREMENTS = {
    'regular': {'name': 'แผนปกติ', 'majorElective': 15},
    'coop': {'name': 'แผนสหกิจศึกษา', 'majorElective': 12},
    'honors': {'name': 'แผนก้าวหน้า', 'majorElective': 27},
}

BASE_CREDIT_REQUIREMENTS = {
    'required': 24,
    'core': 24,
    'major': 41,
    'ge': 6,
    'free': 6,
    'minor': 15,
}

# --- Catalog defaults ---
DEFAULT_COURSE_CREDITS = 3
UNTITLED_COURSE_NAME = 'Untitled Course'

# --- Auth ---
MIN_PASSWORD_LENGTH = 8
SESSION_TOKEN_BYTES = 32
