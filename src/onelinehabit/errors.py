"""Exceptions raised by the habit ledger."""

from __future__ import annotations


class HabitError(Exception):
    """Base class for habit tracker errors."""


class ValidationError(HabitError, ValueError):
    """Raised when a habit cannot be created from the given input."""


class NotFoundError(HabitError, LookupError):
    """Raised when a habit lookup by name finds nothing."""

    def __init__(self, query: str):
        super().__init__(f"No habit matches '{query}'")
        self.query = query


__all__ = ["HabitError", "NotFoundError", "ValidationError"]
