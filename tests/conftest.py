"""Pytest configuration and shared fixtures for One Line Habit tests.

Provides an isolated SQLite database per test, habit factories (persisted and
in-memory), and a ledger wired to a fixed clock so streak assertions never
depend on the real date.
"""

from __future__ import annotations

import logging
import tempfile
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable

import pytest
from sqlmodel import Session, SQLModel, create_engine

# Import models so their tables are registered with SQLModel metadata
from onelinehabit.models import Habit, HabitCompletion
from onelinehabit.infra.repositories import SQLModelHabitRepository
from onelinehabit.services.ledger import HabitLedger

TODAY = date(2025, 12, 26)


# =============================================================================
# Environment
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point config at a throwaway data dir and keep console logging quiet."""
    monkeypatch.setenv("ONELINEHABIT_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("ONELINEHABIT_DEV_MODE", "false")
    monkeypatch.delenv("ONELINEHABIT_DATABASE_URL", raising=False)
    yield
    # Handlers installed by setup_logging may hold streams that pytest closes.
    package_logger = logging.getLogger("onelinehabit")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Session for arranging test data directly."""
    session = Session(db_engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching what repositories expect (Callable[[], Session])."""

    def factory():
        return Session(db_engine, expire_on_commit=False)

    return factory


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def repo(session_factory) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory)


@pytest.fixture
def ledger(repo, today) -> HabitLedger:
    """Ledger whose clock is pinned to ``TODAY``."""
    return HabitLedger(repo, clock=lambda: today)


# =============================================================================
# Test Data Factories
# =============================================================================


def days_ago(*offsets: int, today: date = TODAY) -> list[date]:
    """Dates ``offset`` days before ``today`` for each offset."""
    return [today - timedelta(days=offset) for offset in offsets]


def make_habit(title: str = "Read", days: Iterable[date] = (), **fields) -> Habit:
    """Build an unsaved habit with completions on the given days."""
    habit = Habit(title=title, **fields)
    for day in days:
        habit.completions.append(HabitCompletion.for_day(day))
    return habit


@pytest.fixture
def habit_factory(db_session):
    """Factory for creating persisted habits.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(
        title: str = "Test Habit",
        sort_order: int = 0,
        days: Iterable[date] = (),
        is_completed: bool | None = None,
    ) -> Habit:
        """Create a habit with completions on ``days``.

        ``is_completed`` defaults to whether ``TODAY`` is among the days.
        """
        days = list(days)
        completed = TODAY in days if is_completed is None else is_completed
        habit = make_habit(title, days, sort_order=sort_order, is_completed=completed)
        db_session.add(habit)
        db_session.commit()
        db_session.refresh(habit)
        return habit

    return _create_habit
