"""Voice/assistant intents.

Each handler takes the text a dictation or assistant front end produced and
returns an ``AssistantReply`` whose ``say`` field can be spoken back. Lookup
and validation failures become replies, never exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..errors import NotFoundError, ValidationError
from ..logging_config import get_logger
from ..models.habit import Habit
from .ledger import HabitLedger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AssistantReply:
    ok: bool
    say: str
    habit: Optional[Habit] = None


def clean_transcript(text: str | None) -> str:
    """Trim surrounding whitespace from dictated text."""

    return (text or "").strip()


class HabitAssistant:
    """Intent handlers backed by a :class:`HabitLedger`."""

    def __init__(self, ledger: HabitLedger):
        self.ledger = ledger

    def add_habit(self, transcript: str) -> AssistantReply:
        title = clean_transcript(transcript)
        try:
            habit = self.ledger.create_habit(title)
        except ValidationError as exc:
            logger.info("Assistant add rejected: %s", exc)
            return AssistantReply(ok=False, say="I didn't catch a habit name. Please try again.")
        return AssistantReply(ok=True, say=f"Added '{habit.title}' to your habits!", habit=habit)

    def complete_habit(self, name: str) -> AssistantReply:
        query = clean_transcript(name)
        try:
            habit = self.ledger.find_habit(query)
        except NotFoundError:
            logger.info("Assistant lookup found nothing", extra={"query": query})
            return AssistantReply(ok=False, say=f"Couldn't find a habit called '{query}'")
        updated = self.ledger.mark_completed(habit) or habit
        return AssistantReply(
            ok=True,
            say=f"Marked '{updated.title}' as complete! Great job!",
            habit=updated,
        )

    def reset_habits(self) -> AssistantReply:
        self.ledger.reset_all()
        return AssistantReply(ok=True, say="All habits have been reset. Ready for a new day!")

    def check_progress(self) -> AssistantReply:
        summary = self.ledger.today_summary(self.ledger.list_habits())
        if summary.total == 0:
            say = "You don't have any habits yet. Add some to get started!"
        elif summary.all_done:
            say = f"Amazing! You've completed all {summary.total} habits today!"
        else:
            say = (
                f"You've completed {summary.completed} out of {summary.total} habits. "
                "Keep going!"
            )
        return AssistantReply(ok=True, say=say)


__all__ = ["AssistantReply", "HabitAssistant", "clean_transcript"]
