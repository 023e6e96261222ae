"""Habit repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol

from ...models.habit import Habit


class HabitRepository(Protocol):
    """Persistence contract the ledger depends on."""

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit (with completions) by ID."""
        ...

    def list_all(self) -> list[Habit]:
        """List habits ordered by sort order."""
        ...

    def count(self) -> int:
        """Number of stored habits."""
        ...

    def create(self, habit: Habit) -> Habit:
        """Persist a new habit."""
        ...

    def update(self, habit: Habit) -> Habit:
        """Save scalar changes to an existing habit."""
        ...

    def delete(self, habit_id: int) -> bool:
        """Delete a habit and its completions. Missing habits are ignored."""
        ...

    # Completion operations
    def toggle_completion(self, habit_id: int, today: date) -> Optional[Habit]:
        """Flip today's completion for a habit."""
        ...

    def mark_completed(self, habit_id: int, today: date) -> Optional[Habit]:
        """Ensure a completion exists for today."""
        ...

    def mark_uncompleted(self, habit_id: int, today: date) -> Optional[Habit]:
        """Remove today's completions."""
        ...

    def reset_all(self, habit_ids: Iterable[int], today: date) -> list[Habit]:
        """Remove today's completions for several habits at once."""
        ...

    def sync_completed_flags(self, today: date) -> int:
        """Fix ``is_completed`` flags that no longer match today's history."""
        ...
