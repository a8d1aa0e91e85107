#!/usr/bin/env python3
"""
Module for decoding timetable pages into Timetable models.

Decoding is a pure function of the page content and the selector the page
was requested for. The first structural mismatch aborts the whole parse.
"""

import logging
from datetime import date, datetime
from typing import List, Optional

from bs4 import BeautifulSoup, Tag
from pydantic import ValidationError

from ..constants import (
    CELL_SELECTOR,
    DAY_DATE_SELECTOR,
    DAY_SELECTOR,
    HOUR_NUM_SELECTOR,
    HOUR_SELECTOR,
    HOUR_TIMES_SELECTOR,
    PUBLIC_TIMETABLE_PATH,
)
from ..models import Day, Hour, Selector, Timetable, Which
from ..utils.date_utils import parse_portal_date
from ..utils.error_utils import (
    DayParseError,
    HourParseError,
    ParseErrorKind,
    TimetableParseError,
)
from .lesson_parser import parse_cell

logger = logging.getLogger(__name__)

TIME_FORMAT = "%H:%M"


def timetable_path(which: Which, selector: Selector) -> str:
    """Build the page path, e.g. ``/timetable/public/actual/class/2A``."""
    return f"{PUBLIC_TIMETABLE_PATH}/{Which(which).value}/{selector.kind.value}/{selector.id}"


def _single_text(element: Tag) -> Optional[str]:
    """The element's only text node, or None when it has zero or several."""
    texts = list(element.strings)
    if len(texts) != 1:
        return None
    return texts[0].strip()


def _parse_time(text: str, kind: ParseErrorKind, index: int):
    try:
        return datetime.strptime(text, TIME_FORMAT).time()
    except ValueError as e:
        raise HourParseError(kind, index, detail=str(e)) from e


def parse_hour(block: Tag, index: int) -> Hour:
    """
    Decode one hour header block.

    The block's printed number must equal its 1-based position. Its times are
    three spans: start, a dash, end.

    Args:
        block: The ``div.bk-hour-wrapper`` element.
        index: 0-based position of the block on the page.

    Raises:
        HourParseError: Naming exactly which part is missing or malformed.
    """
    nums = block.select(HOUR_NUM_SELECTOR)
    if len(nums) != 1:
        raise HourParseError(ParseErrorKind.NO_NUM, index)
    num_text = _single_text(nums[0])
    if num_text is None:
        raise HourParseError(ParseErrorKind.NO_NUM_TEXT, index)
    try:
        num = int(num_text)
    except ValueError as e:
        raise HourParseError(ParseErrorKind.PARSE_NUM, index, detail=num_text) from e
    if num != index + 1:
        raise HourParseError(ParseErrorKind.MISMATCHED_NUM, index, detail=f"expected {index + 1}, got {num}")

    spans = block.select(HOUR_TIMES_SELECTOR)
    if len(spans) < 1:
        raise HourParseError(ParseErrorKind.NO_FROM, index)
    if len(spans) < 2:
        raise HourParseError(ParseErrorKind.NO_DASH, index)
    if len(spans) != 3:
        raise HourParseError(ParseErrorKind.NO_TO, index)
    start_span, _, end_span = spans

    start_text = _single_text(start_span)
    if start_text is None:
        raise HourParseError(ParseErrorKind.NO_FROM_TEXT, index)
    start = _parse_time(start_text, ParseErrorKind.PARSE_FROM, index)

    end_text = _single_text(end_span)
    if end_text is None:
        raise HourParseError(ParseErrorKind.NO_TO_TEXT, index)
    end = _parse_time(end_text, ParseErrorKind.PARSE_TO, index)

    duration = (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)
    return Hour(start=start, duration=duration)


def parse_hours(soup: BeautifulSoup) -> List[Hour]:
    """Decode all hour header blocks in document order."""
    return [parse_hour(block, i) for i, block in enumerate(soup.select(HOUR_SELECTOR))]


def parse_day_date(row: Tag, index: int, today: Optional[date] = None) -> Optional[date]:
    """
    Read the optional date of a day row.

    The row must contain exactly one date span. An empty span means the
    window has no dates (permanent timetable).

    Raises:
        DayParseError: NO_DATE for a missing span, PARSE_DATE for bad text.
    """
    spans = row.select(DAY_DATE_SELECTOR)
    if len(spans) != 1:
        raise DayParseError(ParseErrorKind.NO_DATE, index)

    texts = [t.strip() for t in spans[0].strings if t.strip()]
    if not texts:
        return None
    if len(texts) > 1:
        raise DayParseError(ParseErrorKind.NO_DATE, index, detail="more than one date text")

    try:
        return parse_portal_date(texts[0], today)
    except ValueError as e:
        raise DayParseError(ParseErrorKind.PARSE_DATE, index, detail=texts[0]) from e


def parse_day(row: Tag, index: int, selector: Selector, today: Optional[date] = None) -> Day:
    """Decode one day row: its date and one lesson slot per cell."""
    day_date = parse_day_date(row, index, today)
    lessons = [parse_cell(cell, selector) for cell in row.select(CELL_SELECTOR)]
    return Day(date=day_date, lessons=lessons)


def parse_days(soup: BeautifulSoup, selector: Selector, today: Optional[date] = None) -> List[Day]:
    """Decode all day rows in document order."""
    return [parse_day(row, i, selector, today) for i, row in enumerate(soup.select(DAY_SELECTOR))]


def parse_timetable(html: str, selector: Selector, today: Optional[date] = None) -> Timetable:
    """
    Decode a timetable page.

    Args:
        html: The page content.
        selector: The timetable the page was requested for. It supplies the
            teacher or class name the lesson payloads leave out.
        today: Reference date for inferring the year of printed dates.

    Returns:
        Timetable: Hours and days, every day holding one slot per hour.

    Raises:
        TimetableParseError: On the first structural mismatch.
    """
    soup = BeautifulSoup(html, "lxml")
    hours = parse_hours(soup)
    days = parse_days(soup, selector, today)

    for i, day in enumerate(days):
        if len(day.lessons) != len(hours):
            raise TimetableParseError(
                ParseErrorKind.MISMATCHED_LESSON_COUNT,
                detail=f"day {i + 1} has {len(day.lessons)} slots, expected {len(hours)}",
            )

    try:
        timetable = Timetable(hours=hours, days=days)
    except ValidationError as e:
        raise TimetableParseError(ParseErrorKind.MISMATCHED_LESSON_COUNT, detail=str(e)) from e

    logger.debug(f"Parsed {selector}: {len(hours)} hours, {len(days)} days")
    return timetable
