#!/usr/bin/env python3
"""
Utility modules for the Bakalari Timetable application.
"""
from bakalari_timetable.utils.date_utils import (
    parse_day_month,
    infer_year,
    parse_portal_date
)
from bakalari_timetable.utils.error_utils import (
    handle_errors,
    BakalariError,
    ConfigError,
    LoginError,
    LoginTransportError,
    LoginFailedError,
    CookieParseError,
    RequestError,
    RequestTransportError,
    UnknownResponseError,
    AuthRequiredError,
    UnknownSelectorError,
    ParseErrorKind,
    TimetableParseError,
    HourParseError,
    DayParseError,
    LessonParseError
)
