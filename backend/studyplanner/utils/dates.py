from __future__ import annotations

import calendar
import json
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterator, Optional


def start_of_week(value: date) -> datetime:
    """Monday 00:00 of the week containing ``value`` (Sunday belongs to the previous Monday)."""
    day = value.date() if isinstance(value, datetime) else value
    monday = day - timedelta(days=day.weekday())
    tz = value.tzinfo if isinstance(value, datetime) else None
    return datetime(monday.year, monday.month, monday.day, tzinfo=tz)


def start_of_month(value: date) -> date:
    return date(value.year, value.month, 1)


def end_of_month(value: date) -> date:
    last_day = calendar.monthrange(value.year, value.month)[1]
    return date(value.year, value.month, last_day)


def shift_months(value: date, months: int) -> date:
    """First day of the month ``months`` away from the month containing ``value``."""
    year, month_index = divmod(value.year * 12 + (value.month - 1) + months, 12)
    return date(year, month_index + 1, 1)


def iso_week_number(value: date) -> int:
    return value.isocalendar()[1]


def js_weekday(value: date) -> int:
    """Weekday encoded 0=Sunday .. 6=Saturday."""
    return (value.weekday() + 1) % 7


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day in the closed range; nothing when ``start`` > ``end``."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def to_timezone(value: datetime, tz: tzinfo) -> datetime:
    """
    Express ``value`` in ``tz`` so naive and aware datetimes can be compared.

    Naive datetimes are taken to already be wall-clock time in ``tz``.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def parse_date(value: object) -> Optional[date]:
    """Lenient date parsing: date/datetime objects pass through, ISO strings are parsed, anything else is None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def parse_datetime(value: object) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        # accepts "Z", "+00" and any fraction length
        return datetime.fromisoformat(value.strip())
    except ValueError:
        return None


def parse_lecture_weekdays(value: object) -> list[int]:
    """
    Normalise a stored weekday set (0=Sunday .. 6=Saturday).

    Accepts a list/tuple/set of ints or a JSON-encoded list. Anything that is
    not an int in 0..6 is dropped; unparseable input yields an empty list.
    """
    if not value:
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return []
    if isinstance(value, (set, frozenset)):
        value = sorted(value, key=str)
    if not isinstance(value, (list, tuple)):
        return []

    weekdays: list[int] = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, int):
            continue
        if 0 <= item <= 6 and item not in weekdays:
            weekdays.append(item)
    return weekdays
