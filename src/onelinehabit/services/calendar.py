"""Month calendar view-model built from habit completion history."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterator, Optional, Sequence

from ..dates import (
    add_months,
    days_in_month,
    month_year_label,
    normalize_day,
    start_of_month,
    weekday_index,
)
from ..models.habit import Habit
from .habits import CompletionStatus, DayLike, completion_status_for_day

WEEKDAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


@dataclass(frozen=True)
class CalendarDay:
    day: date
    status: CompletionStatus
    is_today: bool = False
    is_future: bool = False


@dataclass
class CalendarMonth:
    """One month grid, Sunday first, with a completion status per day."""

    month: date
    label: str
    leading_blanks: int
    days: list[CalendarDay] = field(default_factory=list)

    def weeks(self) -> Iterator[list[Optional[CalendarDay]]]:
        """Yield rows of seven cells; ``None`` pads the first and last week."""

        cells: list[Optional[CalendarDay]] = [None] * self.leading_blanks
        cells.extend(self.days)
        while len(cells) % 7:
            cells.append(None)
        for start in range(0, len(cells), 7):
            yield cells[start:start + 7]


def build_calendar_month(
    month_reference: DayLike,
    habits: Sequence[Habit],
    today: DayLike,
    habit: Habit | None = None,
) -> CalendarMonth:
    """Build the grid for the month containing ``month_reference``.

    With ``habit`` set only that habit is considered; otherwise every habit in
    ``habits`` is. Future days are always reported as ``NONE``.
    """

    current = normalize_day(today)
    scope: Habit | Sequence[Habit] = habit if habit is not None else habits
    days = days_in_month(month_reference)

    cells = []
    for day in days:
        is_future = day > current
        status = CompletionStatus.NONE if is_future else completion_status_for_day(day, scope)
        cells.append(CalendarDay(day=day, status=status, is_today=day == current, is_future=is_future))

    first = start_of_month(month_reference)
    return CalendarMonth(
        month=first,
        label=month_year_label(first),
        leading_blanks=weekday_index(first),
        days=cells,
    )


def previous_month(month: DayLike) -> date:
    return add_months(start_of_month(month), -1)


def next_month(month: DayLike) -> date:
    return add_months(start_of_month(month), 1)


__all__ = [
    "WEEKDAY_LABELS",
    "CalendarDay",
    "CalendarMonth",
    "build_calendar_month",
    "next_month",
    "previous_month",
]
