"""Habit completion and streak engine.

Everything here works on ``Habit`` objects (attached to a session or not) and
never performs I/O; repositories call these functions inside a session so the
completion set and the ``is_completed`` flag change in the same commit.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Sequence, Union

from ..dates import ONE_DAY, normalize_day
from ..dates import today as local_today
from ..models.habit import Habit, HabitCompletion

DayLike = Union[date, datetime]


class CompletionStatus(str, Enum):
    """How completely a calendar day was covered by the habits in scope."""

    NONE = "none"
    PARTIAL = "partial"
    COMPLETE = "complete"


@dataclass(frozen=True)
class HabitStats:
    current_streak: int
    longest_streak: int
    total_completions: int


@dataclass(frozen=True)
class AggregateStats:
    """Overall figures shown when no single habit is selected."""

    avg_current_streak: int = 0
    max_longest_streak: int = 0
    total_completions: int = 0


@dataclass(frozen=True)
class TodaySummary:
    completed: int
    total: int

    @property
    def all_done(self) -> bool:
        return self.total > 0 and self.completed == self.total


def completion_days(source: Habit | Iterable[HabitCompletion] | Iterable[DayLike]) -> set[date]:
    """Return the distinct calendar days found in a habit or a collection."""

    items = source.completions if isinstance(source, Habit) else source
    days: set[date] = set()
    for item in items:
        if isinstance(item, HabitCompletion):
            days.add(normalize_day(item.completed_date))
        else:
            days.add(normalize_day(item))
    return days


def was_completed_on(habit: Habit, day: DayLike) -> bool:
    target = normalize_day(day)
    return any(normalize_day(c.completed_date) == target for c in habit.completions)


def current_streak(source, today: DayLike | None = None) -> int:
    """Count consecutive completed days ending today, or yesterday if today is open.

    The streak survives while today is still undone but breaks once both
    today and yesterday are missing.
    """

    days = completion_days(source)
    if not days:
        return 0

    check = normalize_day(today or local_today())
    if check not in days:
        check -= ONE_DAY
        if check not in days:
            return 0

    streak = 0
    while check in days:
        streak += 1
        check -= ONE_DAY
    return streak


def longest_streak(source) -> int:
    """Return the longest run of consecutive completed days."""

    ordered = sorted(completion_days(source))
    if not ordered:
        return 0

    longest = 1
    run = 1
    for previous, current in zip(ordered, ordered[1:]):
        gap = (current - previous).days
        if gap == 1:
            run += 1
            longest = max(longest, run)
        elif gap > 1:
            run = 1
        # gap == 0 is a duplicate day: skip without resetting
    return longest


def compute_streaks(completions, *, today: DayLike | None = None) -> tuple[int, int]:
    """Return (current_streak, longest_streak) for a collection of completions."""

    days = completion_days(completions)
    return current_streak(days, today), longest_streak(days)


def total_completions(habit: Habit) -> int:
    return len(completion_days(habit))


def mark_completed(habit: Habit, today: DayLike) -> bool:
    """Record a completion for ``today`` unless one exists. Returns True if added."""

    added = False
    if not was_completed_on(habit, today):
        habit.completions.append(HabitCompletion.for_day(today))
        added = True
    habit.is_completed = True
    return added


def mark_uncompleted(habit: Habit, today: DayLike) -> int:
    """Drop every completion on ``today``. Returns how many were removed."""

    target = normalize_day(today)
    stale = [c for c in habit.completions if normalize_day(c.completed_date) == target]
    for completion in stale:
        habit.completions.remove(completion)
    habit.is_completed = False
    return len(stale)


def toggle_completion(habit: Habit, today: DayLike) -> bool:
    """Flip today's completion state and return the new ``is_completed`` value."""

    if was_completed_on(habit, today):
        mark_uncompleted(habit, today)
    else:
        mark_completed(habit, today)
    return habit.is_completed


def sync_completed_flag(habit: Habit, today: DayLike) -> bool:
    """Align ``is_completed`` with the history for ``today``. Returns True if it changed."""

    expected = was_completed_on(habit, today)
    if habit.is_completed == expected:
        return False
    habit.is_completed = expected
    return True


def habit_stats(habit: Habit, today: DayLike | None = None) -> HabitStats:
    days = completion_days(habit)
    return HabitStats(
        current_streak=current_streak(days, today),
        longest_streak=longest_streak(days),
        total_completions=len(days),
    )


def aggregate_stats(habits: Sequence[Habit], today: DayLike | None = None) -> AggregateStats:
    """Average current streak (truncated), best longest streak, and total completions."""

    if not habits:
        return AggregateStats()
    stats = [habit_stats(habit, today) for habit in habits]
    return AggregateStats(
        avg_current_streak=sum(s.current_streak for s in stats) // len(stats),
        max_longest_streak=max(s.longest_streak for s in stats),
        total_completions=sum(s.total_completions for s in stats),
    )


def best_current_streak(habits: Iterable[Habit], today: DayLike | None = None) -> int:
    return max((current_streak(habit, today) for habit in habits), default=0)


def today_summary(habits: Sequence[Habit], today: DayLike | None = None) -> TodaySummary:
    day = normalize_day(today or local_today())
    completed = sum(1 for habit in habits if was_completed_on(habit, day))
    return TodaySummary(completed=completed, total=len(habits))


def completion_status_for_day(day: DayLike, habits: Habit | Sequence[Habit]) -> CompletionStatus:
    """Classify a day for the calendar.

    A single habit is either complete or not; a group is partial when some
    but not all of its habits were completed.
    """

    if isinstance(habits, Habit):
        return CompletionStatus.COMPLETE if was_completed_on(habits, day) else CompletionStatus.NONE

    if not habits:
        return CompletionStatus.NONE
    done = sum(1 for habit in habits if was_completed_on(habit, day))
    if done == 0:
        return CompletionStatus.NONE
    if done == len(habits):
        return CompletionStatus.COMPLETE
    return CompletionStatus.PARTIAL


__all__ = [
    "AggregateStats",
    "CompletionStatus",
    "HabitStats",
    "TodaySummary",
    "aggregate_stats",
    "best_current_streak",
    "completion_days",
    "completion_status_for_day",
    "compute_streaks",
    "current_streak",
    "habit_stats",
    "longest_streak",
    "mark_completed",
    "mark_uncompleted",
    "sync_completed_flag",
    "today_summary",
    "toggle_completion",
    "total_completions",
    "was_completed_on",
]
