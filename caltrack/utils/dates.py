"""
Calendar helpers.

All dates are plain calendar dates in the server's local time. Strings are
parsed field by field so that no timezone conversion can shift the day.
"""

import re
from datetime import date, datetime, timedelta
from typing import List, Union

DateLike = Union[str, date]

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def to_iso_date(d: DateLike) -> str:
    if isinstance(d, str):
        d = parse_iso_date(d)
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_iso_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = (value or "").strip() if isinstance(value, str) else ""
    if not ISO_DATE_RE.match(s):
        raise ValueError(f"INVALID_DATE: expected YYYY-MM-DD, got {value!r}")
    year, month, day = (int(p) for p in s.split("-"))
    return date(year, month, day)


def _dow_sunday_first(d: date) -> int:
    # date.weekday() is 0=Mon..6=Sun; shift to 0=Sun..6=Sat
    return (d.weekday() + 1) % 7


def start_of_week_monday(value: DateLike) -> date:
    d = parse_iso_date(value)
    offset = (_dow_sunday_first(d) + 6) % 7
    return d - timedelta(days=offset)


def shift_days(value: DateLike, days: int) -> date:
    return parse_iso_date(value) + timedelta(days=days)


def enumerate_days(start: DateLike, count: int) -> List[str]:
    first = parse_iso_date(start)
    return [to_iso_date(first + timedelta(days=i)) for i in range(max(0, count))]


def day_label(value: DateLike) -> str:
    d = parse_iso_date(value)
    return f"{WEEKDAY_LABELS[_dow_sunday_first(d)]} {d.month:02d}/{d.day:02d}"


def today_local() -> date:
    return datetime.now().date()


def yesterday_local() -> date:
    return shift_days(today_local(), -1)
