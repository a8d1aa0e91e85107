#!/usr/bin/env python3
"""
Constants used by the Bakalari Timetable application.
"""

# Portal endpoints (relative to the portal base URL)
LOGIN_PATH = "/Login"
PUBLIC_TIMETABLE_PATH = "/timetable/public"

# Name of the cookie that carries the session token
AUTH_COOKIE_NAME = "BakaAuth"

# Lifetime of an issued token in seconds
TOKEN_LIFETIME = 60 * 5

# Text that must appear on the public timetable page
CONNECTION_MARKER = "timetable"

# Year inference window for "D.M." dates, in days
DATE_INFERENCE_WINDOW_DAYS = 60

# Default timeout for portal requests in seconds
DEFAULT_TIMEOUT = 30.0

# Default headers for portal requests
DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

# Directory page selectors, one <select> per subject kind
CLASSES_SELECTOR = "select#selectedClass > option"
TEACHERS_SELECTOR = "select#selectedTeacher > option"
ROOMS_SELECTOR = "select#selectedRoom > option"

# Timetable page selectors
HOUR_SELECTOR = "div.bk-hour-wrapper"
HOUR_NUM_SELECTOR = "div.num"
HOUR_TIMES_SELECTOR = "div.hour > span"
DAY_SELECTOR = "div.bk-timetable-row"
DAY_DATE_SELECTOR = "span.bk-day-date"
CELL_SELECTOR = "div.bk-timetable-cell"
DAY_ITEM_SELECTOR = "div.day-item"
LESSON_SELECTOR = "div.day-item-hover"
LESSON_ABBR_SELECTOR = "div.middle"
LESSON_TEACHER_ABBR_SELECTOR = "div.bottom"

# Attribute holding the JSON lesson payload
LESSON_DATA_ATTRIBUTE = "data-detail"

# CSS classes that mark changed (substituted or removed) and absence entries
CHANGED_CLASS_INDICATOR = "pink"
ABSENT_CLASS_INDICATOR = "green"

# Separator between subject name and the rest of "subjecttext"
SUBJECT_TEXT_SEPARATOR = " | "

# Default output file for the CLI
DEFAULT_OUTPUT_FILE = "timetable.json"
