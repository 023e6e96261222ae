"""Calendar-day helpers.

Completion records store plain ``date`` values: a day in local time with no
time-of-day component. Everything that compares days goes through
:func:`normalize_day` first.
"""

from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, timedelta

ONE_DAY = timedelta(days=1)


def normalize_day(value: date | datetime) -> date:
    """Return the local calendar day for a date or datetime."""

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def today() -> date:
    """Return today's local calendar day."""

    return date.today()


def start_of_month(value: date | datetime) -> date:
    return normalize_day(value).replace(day=1)


def days_in_month(month_reference: date | datetime) -> list[date]:
    """Return every day of the month containing ``month_reference``, ascending."""

    first = start_of_month(month_reference)
    length = monthrange(first.year, first.month)[1]
    return [first + timedelta(days=offset) for offset in range(length)]


def add_months(value: date | datetime, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""

    day = normalize_day(value)
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    return day.replace(year=year, month=month, day=min(day.day, monthrange(year, month)[1]))


def weekday_index(value: date | datetime) -> int:
    """Weekday with Sunday as 0 and Saturday as 6."""

    return (normalize_day(value).weekday() + 1) % 7


def short_display(value: date | datetime) -> str:
    """Short label such as ``Dec 26``."""

    day = normalize_day(value)
    return f"{day:%b} {day.day}"


def month_year_label(value: date | datetime) -> str:
    """Month heading such as ``December 2025``."""

    return f"{normalize_day(value):%B %Y}"


__all__ = [
    "ONE_DAY",
    "add_months",
    "days_in_month",
    "month_year_label",
    "normalize_day",
    "short_display",
    "start_of_month",
    "today",
    "weekday_index",
]
