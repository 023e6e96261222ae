"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from .config import BaseConfig
from .dates import start_of_month
from .dates import today as local_today
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories import SQLModelHabitRepository
from .services.assistant import HabitAssistant
from .services.ledger import HabitLedger


@dataclass
class AppContext:
    """Process-wide handles created once at startup."""

    config: BaseConfig
    engine: Engine
    session_factory: Callable[[], Session]
    habit_repo: SQLModelHabitRepository
    ledger: HabitLedger
    assistant: HabitAssistant

    # Month the calendar is showing
    current_month: date

    def dispose(self) -> None:
        self.engine.dispose()


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    clock: Callable[[], date] = local_today,
) -> AppContext:
    """Create the engine and schema, then wire repository, ledger and assistant."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    habit_repo = SQLModelHabitRepository(session_factory)
    ledger = HabitLedger(habit_repo, clock=clock)

    return AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        habit_repo=habit_repo,
        ledger=ledger,
        assistant=HabitAssistant(ledger),
        current_month=start_of_month(clock()),
    )
