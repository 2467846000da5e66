"""
Date and time helpers.

Canonical formats used everywhere in the package:
    date: 'yyyy-mm-dd'
    time: 'hh:mm'

WebUntis itself encodes dates as integers (20220420) and times as integers
(800, 1345). The format_untis_* helpers convert those into the canonical
strings before a Period is built.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time

from untisplan.errors import ValidationError


_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^\d{2}:\d{2}$")


class TimeUnits:
    """Time units in milliseconds."""

    MILLISECOND = 1
    SECOND = 1000 * MILLISECOND
    MINUTE = 60 * SECOND
    HOUR = 60 * MINUTE
    DAY = 24 * HOUR
    WEEK = 7 * DAY


def validate_date(value: str) -> None:
    """
    Raise ValidationError unless value is a real calendar day as 'yyyy-mm-dd'.
    """
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise ValidationError(f"Invalid date format: {value!r}")
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise ValidationError(f"Invalid date value: {value!r}") from None


def validate_time(value: str) -> None:
    """
    Raise ValidationError unless value is a time of day as 'hh:mm'.
    """
    if not isinstance(value, str) or not _TIME_RE.match(value):
        raise ValidationError(f"Invalid time format: {value!r}")
    h, m = int(value[:2]), int(value[3:])
    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise ValidationError(f"Invalid time value: {value!r}")


def parse_date(value: str) -> date:
    validate_date(value)
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_time(value: str) -> time:
    validate_time(value)
    return time(int(value[:2]), int(value[3:]))


def combine(day: str, hhmm: str) -> datetime:
    """Combine a canonical date and time into a naive datetime."""
    return datetime.combine(parse_date(day), parse_time(hhmm))


def format_untis_date(value: int) -> str:
    """
    20220420 -> '2022-04-20'
    """
    s = str(value).zfill(8)
    return f"{s[:4]}-{s[4:6]}-{s[6:]}"


def format_untis_time(value: int) -> str:
    """
    800 -> '08:00', 1345 -> '13:45'
    """
    s = str(value).zfill(4)
    return f"{s[:2]}:{s[2:]}"


def to_untis_date(value: date) -> int:
    return value.year * 10000 + value.month * 100 + value.day
