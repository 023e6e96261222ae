"""SQLModel implementation of Habit repository."""

from __future__ import annotations

from datetime import date
from typing import Callable, Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import selectinload
from sqlmodel import Session, col, select

from ...logging_config import get_logger
from ...models.habit import Habit
from ...services import habits as engine

logger = get_logger(__name__)


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation.

    Completion changes run through the engine functions in
    :mod:`onelinehabit.services.habits` on attached objects, so each call is a
    single commit covering both the completion rows and ``is_completed``.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    @staticmethod
    def _query():
        return select(Habit).options(selectinload(Habit.completions))  # type: ignore[arg-type]

    def _load(self, session: Session, habit_id: int) -> Optional[Habit]:
        return session.exec(self._query().where(Habit.id == habit_id)).first()

    @staticmethod
    def _detach(session: Session, habit: Habit) -> Habit:
        # Load the collection before leaving the session; callers read it detached.
        list(habit.completions)
        session.expunge(habit)
        return habit

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            habit = self._load(session, habit_id)
            if habit:
                self._detach(session, habit)
            return habit

    def list_all(self) -> list[Habit]:
        """List habits ordered by sort order, then creation."""
        with self.session_factory() as session:
            statement = self._query().order_by(Habit.sort_order, Habit.id)  # type: ignore[arg-type]
            rows = list(session.exec(statement).all())
            for habit in rows:
                self._detach(session, habit)
            return rows

    def count(self) -> int:
        with self.session_factory() as session:
            return session.exec(select(func.count()).select_from(Habit)).one()

    def create(self, habit: Habit) -> Habit:
        """Create a new habit."""
        with self.session_factory() as session:
            session.add(habit)
            session.commit()
            session.refresh(habit)
            return self._detach(session, habit)

    def update(self, habit: Habit) -> Habit:
        """Save title, sort order and flag changes for an existing habit."""
        with self.session_factory() as session:
            stored = self._load(session, habit.id) if habit.id is not None else None
            if stored is None:
                raise ValueError(f"Habit {habit.id} does not exist")
            stored.title = habit.title
            stored.sort_order = habit.sort_order
            stored.is_completed = habit.is_completed
            session.add(stored)
            session.commit()
            return self._detach(session, stored)

    def delete(self, habit_id: int) -> bool:
        """Delete a habit by ID; completions go with it."""
        with self.session_factory() as session:
            habit = self._load(session, habit_id)
            if habit is None:
                return False
            session.delete(habit)
            session.commit()
            return True

    # Completion operations
    def _apply(self, habit_id: int, today: date, action) -> Optional[Habit]:
        with self.session_factory() as session:
            habit = self._load(session, habit_id)
            if habit is None:
                logger.debug("Completion change skipped for unknown habit %s", habit_id)
                return None
            action(habit, today)
            session.add(habit)
            session.commit()
            return self._detach(session, habit)

    def toggle_completion(self, habit_id: int, today: date) -> Optional[Habit]:
        return self._apply(habit_id, today, engine.toggle_completion)

    def mark_completed(self, habit_id: int, today: date) -> Optional[Habit]:
        return self._apply(habit_id, today, engine.mark_completed)

    def mark_uncompleted(self, habit_id: int, today: date) -> Optional[Habit]:
        return self._apply(habit_id, today, engine.mark_uncompleted)

    def reset_all(self, habit_ids: Iterable[int], today: date) -> list[Habit]:
        """Uncomplete today for every listed habit in one transaction."""
        ids = list(habit_ids)
        if not ids:
            return []
        with self.session_factory() as session:
            statement = (
                self._query()
                .where(col(Habit.id).in_(ids))
                .order_by(Habit.sort_order, Habit.id)  # type: ignore[arg-type]
            )
            rows = list(session.exec(statement).all())
            for habit in rows:
                engine.mark_uncompleted(habit, today)
                session.add(habit)
            session.commit()
            for habit in rows:
                self._detach(session, habit)
            return rows

    def sync_completed_flags(self, today: date) -> int:
        """Repair ``is_completed`` flags carried over from an earlier day."""
        with self.session_factory() as session:
            changed = 0
            for habit in session.exec(self._query()).all():
                if engine.sync_completed_flag(habit, today):
                    session.add(habit)
                    changed += 1
            if changed:
                session.commit()
            return changed
