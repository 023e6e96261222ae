"""Service module exports."""

from . import assistant, calendar, habits, ledger

__all__ = ["assistant", "calendar", "habits", "ledger"]
