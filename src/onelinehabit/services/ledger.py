"""Habit ledger: the one place habits and their daily completions change."""

from __future__ import annotations

from datetime import date
from typing import Callable, Iterable, Optional, Sequence, Union

from ..dates import days_in_month as _days_in_month
from ..dates import normalize_day
from ..dates import today as local_today
from ..domain.repositories.habit import HabitRepository
from ..errors import NotFoundError, ValidationError
from ..logging_config import get_logger
from ..models.habit import Habit
from . import habits as engine
from .calendar import CalendarMonth, build_calendar_month

logger = get_logger(__name__)

HabitRef = Union[Habit, int]
Selector = Union[Iterable[HabitRef], Callable[[Habit], bool]]


def _habit_id(habit: HabitRef) -> Optional[int]:
    return habit if isinstance(habit, int) else habit.id


class HabitLedger:
    """Create, complete and delete habits, and answer streak/calendar queries.

    Mutations go through the repository, one transaction each. Reads work on
    the habit objects handed in, so a presentation layer can compute stats for
    a list it already loaded without another round trip.
    """

    def __init__(
        self,
        repo: HabitRepository,
        *,
        clock: Callable[[], date] = local_today,
    ):
        self.repo = repo
        self.clock = clock

    def _today(self, today: Optional[engine.DayLike] = None) -> date:
        return normalize_day(today if today is not None else self.clock())

    def _resolve(self, habit: HabitRef) -> Optional[Habit]:
        if isinstance(habit, Habit):
            return habit
        return self.repo.get_by_id(habit)

    # Habits

    def create_habit(self, title: str, position: Optional[int] = None) -> Habit:
        """Create a habit with no completions.

        ``position`` becomes the sort order; when omitted the current habit
        count is used.
        """
        cleaned = (title or "").strip()
        if not cleaned:
            raise ValidationError("Habit title cannot be empty")

        sort_order = self.repo.count() if position is None else position
        habit = self.repo.create(Habit(title=cleaned, sort_order=sort_order, is_completed=False))
        logger.info("Habit created", extra={"habit_id": habit.id, "sort_order": sort_order})
        return habit

    def list_habits(self, today: Optional[engine.DayLike] = None) -> list[Habit]:
        """All habits by sort order, with yesterday's ``is_completed`` flags cleared."""
        changed = self.repo.sync_completed_flags(self._today(today))
        if changed:
            logger.info("Refreshed stale completion flags", extra={"habits": changed})
        return self.repo.list_all()

    def get_habit(self, habit_id: int) -> Optional[Habit]:
        return self.repo.get_by_id(habit_id)

    def find_habit(self, query: str, habits: Optional[Sequence[Habit]] = None) -> Habit:
        """First habit whose title contains ``query``, ignoring case."""
        needle = (query or "").strip().lower()
        if needle:
            for habit in habits if habits is not None else self.repo.list_all():
                if needle in habit.title.lower():
                    return habit
        raise NotFoundError(query)

    def rename_habit(self, habit: HabitRef, title: str) -> Habit:
        """Change a habit's title; completion history is untouched."""
        cleaned = (title or "").strip()
        if not cleaned:
            raise ValidationError("Habit title cannot be empty")
        # Reload so a stale ``is_completed`` on the caller's copy is not written back.
        habit_id = _habit_id(habit)
        current = self.repo.get_by_id(habit_id) if habit_id is not None else None
        if current is None:
            raise NotFoundError(str(habit_id))

        current.title = cleaned
        renamed = self.repo.update(current)
        logger.info("Habit renamed", extra={"habit_id": renamed.id})
        return renamed

    def delete_habit(self, habit: HabitRef) -> bool:
        """Delete a habit and its history. Unknown habits are ignored."""
        habit_id = _habit_id(habit)
        if habit_id is None:
            return False
        removed = self.repo.delete(habit_id)
        if removed:
            logger.info("Habit deleted", extra={"habit_id": habit_id})
        else:
            logger.debug("Delete ignored for missing habit %s", habit_id)
        return removed

    def delete_habits(self, selector: Selector) -> int:
        """Delete every habit picked by ``selector``; returns how many were removed.

        ``selector`` is either an iterable of habits/ids or a predicate over
        the current habit list.
        """
        if callable(selector):
            targets: Iterable[HabitRef] = [h for h in self.repo.list_all() if selector(h)]
        else:
            targets = list(selector)
        return sum(1 for habit in targets if self.delete_habit(habit))

    # Daily completion

    def toggle_completion(
        self, habit: HabitRef, today: Optional[engine.DayLike] = None
    ) -> Optional[Habit]:
        """Complete or un-complete ``habit`` for today and return its fresh state."""
        day = self._today(today)
        habit_id = _habit_id(habit)
        updated = self.repo.toggle_completion(habit_id, day) if habit_id is not None else None
        if updated is not None:
            logger.info(
                "Habit toggled",
                extra={"habit_id": updated.id, "day": day.isoformat(), "completed": updated.is_completed},
            )
        return updated

    def mark_completed(
        self, habit: HabitRef, today: Optional[engine.DayLike] = None
    ) -> Optional[Habit]:
        day = self._today(today)
        habit_id = _habit_id(habit)
        updated = self.repo.mark_completed(habit_id, day) if habit_id is not None else None
        if updated is not None:
            logger.info("Habit completed", extra={"habit_id": updated.id, "day": day.isoformat()})
        return updated

    def mark_uncompleted(
        self, habit: HabitRef, today: Optional[engine.DayLike] = None
    ) -> Optional[Habit]:
        day = self._today(today)
        habit_id = _habit_id(habit)
        updated = self.repo.mark_uncompleted(habit_id, day) if habit_id is not None else None
        if updated is not None:
            logger.info("Habit uncompleted", extra={"habit_id": updated.id, "day": day.isoformat()})
        return updated

    def reset_all(
        self,
        habits: Optional[Iterable[HabitRef]] = None,
        today: Optional[engine.DayLike] = None,
    ) -> list[Habit]:
        """Uncomplete today for every habit (or the given ones); history is kept."""
        day = self._today(today)
        if habits is None:
            ids = [h.id for h in self.repo.list_all() if h.id is not None]
        else:
            ids = [i for i in (_habit_id(h) for h in habits) if i is not None]
        updated = self.repo.reset_all(ids, day)
        logger.info("Habits reset", extra={"habits": len(updated), "day": day.isoformat()})
        return updated

    # Queries

    def was_completed_on(self, habit: HabitRef, day: engine.DayLike) -> bool:
        resolved = self._resolve(habit)
        return resolved is not None and engine.was_completed_on(resolved, day)

    def current_streak(self, habit: HabitRef, today: Optional[engine.DayLike] = None) -> int:
        resolved = self._resolve(habit)
        return engine.current_streak(resolved, self._today(today)) if resolved else 0

    def longest_streak(self, habit: HabitRef) -> int:
        resolved = self._resolve(habit)
        return engine.longest_streak(resolved) if resolved else 0

    def total_completions(self, habit: HabitRef) -> int:
        resolved = self._resolve(habit)
        return engine.total_completions(resolved) if resolved else 0

    def habit_stats(self, habit: HabitRef, today: Optional[engine.DayLike] = None) -> engine.HabitStats:
        resolved = self._resolve(habit)
        if resolved is None:
            return engine.HabitStats(0, 0, 0)
        return engine.habit_stats(resolved, self._today(today))

    def aggregate_stats(
        self,
        habits: Optional[Sequence[Habit]] = None,
        today: Optional[engine.DayLike] = None,
    ) -> engine.AggregateStats:
        scope = habits if habits is not None else self.repo.list_all()
        return engine.aggregate_stats(scope, self._today(today))

    def best_current_streak(
        self,
        habits: Optional[Sequence[Habit]] = None,
        today: Optional[engine.DayLike] = None,
    ) -> int:
        scope = habits if habits is not None else self.repo.list_all()
        return engine.best_current_streak(scope, self._today(today))

    def today_summary(
        self,
        habits: Optional[Sequence[Habit]] = None,
        today: Optional[engine.DayLike] = None,
    ) -> engine.TodaySummary:
        scope = habits if habits is not None else self.repo.list_all()
        return engine.today_summary(scope, self._today(today))

    @staticmethod
    def days_in_month(month_reference: engine.DayLike) -> list[date]:
        return _days_in_month(month_reference)

    def completion_status_for_day(
        self,
        day: engine.DayLike,
        habits: Optional[Union[Habit, Sequence[Habit]]] = None,
    ) -> engine.CompletionStatus:
        scope = habits if habits is not None else self.repo.list_all()
        return engine.completion_status_for_day(day, scope)

    def calendar_month(
        self,
        month_reference: Optional[engine.DayLike] = None,
        habit: Optional[HabitRef] = None,
        today: Optional[engine.DayLike] = None,
    ) -> CalendarMonth:
        day = self._today(today)
        selected = self._resolve(habit) if habit is not None else None
        if habit is not None and selected is None:
            raise NotFoundError(str(habit))
        habits = [] if selected is not None else self.repo.list_all()
        return build_calendar_month(
            month_reference if month_reference is not None else day,
            habits,
            day,
            habit=selected,
        )


__all__ = ["HabitLedger"]
