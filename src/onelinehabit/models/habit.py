"""Habit tracking data structures."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ..dates import normalize_day


class Habit(SQLModel, table=True):
    """A user-defined habit tracked for daily completion."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(nullable=False)
    # Cached "completed today"; every completion mutation keeps it in step.
    is_completed: bool = Field(default=False, nullable=False)
    date_created: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    sort_order: int = Field(default=0, nullable=False, index=True)

    completions: list["HabitCompletion"] = Relationship(
        back_populates="habit",
        sa_relationship=relationship(
            "HabitCompletion",
            back_populates="habit",
            cascade="all, delete-orphan",
        ),
    )

    def __repr__(self) -> str:
        return f"Habit(id={self.id!r}, title={self.title!r}, sort_order={self.sort_order!r})"


class HabitCompletion(SQLModel, table=True):
    """Record that a habit was completed on one calendar day."""

    __tablename__: ClassVar[str] = "habit_completion"

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: Optional[int] = Field(default=None, foreign_key="habit.id", index=True)
    completed_date: date = Field(nullable=False, index=True)

    habit: Optional["Habit"] = Relationship(
        back_populates="completions",
        sa_relationship=relationship("Habit", back_populates="completions"),
    )

    @classmethod
    def for_day(cls, value: date | datetime) -> "HabitCompletion":
        """Build a completion with ``value`` normalized to its calendar day."""

        return cls(completed_date=normalize_day(value))
