#!/usr/bin/env python3
"""
Utility functions for handling the dates printed on timetable pages.

The portal prints day dates as "D.M." without a year. Timetables span the
calendar-year boundary, so the year is inferred relative to today.
"""
import re
from datetime import date, timedelta
from typing import Optional

from bakalari_timetable.constants import DATE_INFERENCE_WINDOW_DAYS

# Pre-compiled pattern for "15.1." (trailing dot optional)
DAY_MONTH_DATE = re.compile(r'^(\d{1,2})\.(\d{1,2})\.?$')


def parse_day_month(date_str: str):
    """
    Split a "D.M." date string into its day and month numbers.

    Args:
        date_str (str): The printed date, e.g. "15.1."

    Returns:
        tuple: (day, month) as integers

    Raises:
        ValueError: If the string does not consist of two numeric components.
    """
    match = DAY_MONTH_DATE.match(date_str.strip())
    if not match:
        raise ValueError(f"Unrecognized day date format: {date_str!r}")
    day, month = match.groups()
    return int(day), int(month)


def infer_year(day: int, month: int, today: Optional[date] = None,
               window_days: int = DATE_INFERENCE_WINDOW_DAYS) -> date:
    """
    Build a full date for a day and month printed without a year.

    The current year is the baseline. A candidate more than ``window_days`` in
    the past is moved to next year, one more than ``window_days`` in the
    future is moved to last year.

    Args:
        day (int): Day of month
        month (int): Month number
        today (date, optional): Reference date, defaults to the local date
        window_days (int): Allowed distance from today before the year is shifted

    Returns:
        date: The inferred date

    Raises:
        ValueError: If the day/month combination is not a valid date.
    """
    if today is None:
        today = date.today()

    candidate = date(today.year, month, day)
    diff = candidate - today

    if diff < timedelta(days=-window_days):
        return date(today.year + 1, month, day)
    if diff > timedelta(days=window_days):
        return date(today.year - 1, month, day)
    return candidate


def parse_portal_date(date_str: str, today: Optional[date] = None) -> date:
    """
    Parse a "D.M." string from a timetable page into a date.

    Args:
        date_str (str): The printed date
        today (date, optional): Reference date for year inference

    Returns:
        date: The inferred date

    Raises:
        ValueError: If the string or resulting date is invalid.
    """
    day, month = parse_day_month(date_str)
    return infer_year(day, month, today)
