"""Tests for the habit ledger facade."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from conftest import TODAY, days_ago

from onelinehabit.errors import NotFoundError, ValidationError
from onelinehabit.services.habits import AggregateStats, CompletionStatus
from onelinehabit.services.ledger import HabitLedger


class TestCreateHabit:
    def test_new_habit_is_blank(self, ledger):
        habit = ledger.create_habit("Read", 0)

        assert habit.title == "Read"
        assert habit.sort_order == 0
        assert habit.is_completed is False
        assert ledger.total_completions(habit) == 0
        assert ledger.current_streak(habit) == 0
        assert ledger.longest_streak(habit) == 0

    def test_title_is_trimmed(self, ledger):
        assert ledger.create_habit("  Meditate \n").title == "Meditate"

    @pytest.mark.parametrize("title", ["", "   ", "\t\n", None])
    def test_empty_title_is_rejected(self, ledger, title):
        with pytest.raises(ValidationError):
            ledger.create_habit(title, 0)
        assert ledger.list_habits() == []

    def test_long_title_is_stored_whole(self, ledger):
        title = "Walk the dog around the whole neighbourhood " * 4

        habit = ledger.create_habit(title)

        assert len(habit.title) > 120
        assert ledger.get_habit(habit.id).title == title.strip()

    def test_validation_error_is_a_value_error(self, ledger):
        with pytest.raises(ValueError):
            ledger.create_habit(" ")

    def test_default_position_is_habit_count(self, ledger):
        ledger.create_habit("A")
        ledger.create_habit("B")
        assert ledger.create_habit("C").sort_order == 2

    def test_count_based_position_can_repeat_after_delete(self, ledger):
        a = ledger.create_habit("A")
        ledger.create_habit("B")
        ledger.delete_habit(a)

        assert ledger.create_habit("C").sort_order == 1
        assert [h.sort_order for h in ledger.list_habits()] == [1, 1]


class TestRenameHabit:
    def test_rename_keeps_history(self, ledger):
        habit = ledger.create_habit("Read")
        ledger.toggle_completion(habit)

        renamed = ledger.rename_habit(habit, "  Read a chapter ")

        assert renamed.title == "Read a chapter"
        stored = ledger.get_habit(habit.id)
        assert stored.title == "Read a chapter"
        assert stored.is_completed is True
        assert ledger.total_completions(stored) == 1

    def test_rename_by_id(self, ledger):
        habit = ledger.create_habit("Run")
        assert ledger.rename_habit(habit.id, "Jog").title == "Jog"

    def test_rename_to_blank_is_rejected(self, ledger):
        habit = ledger.create_habit("Read")

        with pytest.raises(ValidationError):
            ledger.rename_habit(habit, "  ")
        assert ledger.get_habit(habit.id).title == "Read"

    def test_rename_missing_habit(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.rename_habit(999, "Anything")


class TestDeleteHabits:
    def test_delete_removes_habit(self, ledger):
        habit = ledger.create_habit("Read")
        ledger.toggle_completion(habit)

        assert ledger.delete_habit(habit) is True
        assert ledger.get_habit(habit.id) is None

    def test_delete_missing_is_silent(self, ledger):
        habit = ledger.create_habit("Read")
        ledger.delete_habit(habit)

        assert ledger.delete_habit(habit) is False
        assert ledger.delete_habit(9999) is False

    def test_delete_habits_by_ids(self, ledger):
        a = ledger.create_habit("A")
        b = ledger.create_habit("B")
        ledger.create_habit("C")

        assert ledger.delete_habits([a, b.id, 4242]) == 2
        assert [h.title for h in ledger.list_habits()] == ["C"]

    def test_delete_habits_by_predicate(self, ledger):
        ledger.create_habit("Run 5k")
        ledger.create_habit("Read")
        ledger.create_habit("Run stairs")

        assert ledger.delete_habits(lambda h: h.title.startswith("Run")) == 2
        assert [h.title for h in ledger.list_habits()] == ["Read"]


class TestDailyCompletion:
    def test_toggle_is_involutive(self, ledger, habit_factory):
        habit = habit_factory("Read", days=days_ago(2, 1))

        once = ledger.toggle_completion(habit)
        assert once.is_completed is True
        assert ledger.was_completed_on(once, TODAY)

        twice = ledger.toggle_completion(habit)
        assert twice.is_completed is False
        assert not ledger.was_completed_on(twice, TODAY)
        assert ledger.total_completions(twice) == 2

    def test_toggle_unknown_habit_returns_none(self, ledger):
        assert ledger.toggle_completion(777) is None

    def test_explicit_today_overrides_clock(self, ledger):
        habit = ledger.create_habit("Read")
        other_day = date(2025, 12, 1)

        updated = ledger.toggle_completion(habit, today=other_day)

        assert ledger.was_completed_on(updated, other_day)
        assert not ledger.was_completed_on(updated, TODAY)

    def test_mark_uncompleted_is_idempotent(self, ledger):
        habit = ledger.create_habit("Read")

        first = ledger.mark_uncompleted(habit)
        second = ledger.mark_uncompleted(habit)

        assert first.is_completed is False
        assert second.is_completed is False
        assert ledger.total_completions(second) == 0

    def test_reset_all_keeps_history(self, ledger, habit_factory):
        habit_factory("A", sort_order=0, days=days_ago(0, 1, 2))
        habit_factory("B", sort_order=1, days=days_ago(0))

        reset = ledger.reset_all()

        assert [h.is_completed for h in reset] == [False, False]
        a, b = ledger.list_habits()
        assert ledger.total_completions(a) == 2
        assert ledger.current_streak(a) == 2
        assert ledger.total_completions(b) == 0

    def test_reset_selected_habits(self, ledger, habit_factory):
        a = habit_factory("A", sort_order=0, days=days_ago(0))
        habit_factory("B", sort_order=1, days=days_ago(0))

        ledger.reset_all([a])

        assert [h.is_completed for h in ledger.list_habits()] == [False, True]

    def test_list_habits_clears_flags_from_previous_day(self, ledger, habit_factory):
        habit_factory("Read", days=days_ago(1), is_completed=True)

        (habit,) = ledger.list_habits()

        assert habit.is_completed is False
        assert ledger.current_streak(habit) == 1


class TestQueries:
    def test_find_habit_is_case_insensitive_substring(self, ledger):
        ledger.create_habit("Morning Run")
        ledger.create_habit("Evening run")

        assert ledger.find_habit("RUN").title == "Morning Run"
        assert ledger.find_habit("evening").title == "Evening run"

    def test_find_habit_missing(self, ledger):
        ledger.create_habit("Read")

        with pytest.raises(NotFoundError) as excinfo:
            ledger.find_habit("swim")
        assert excinfo.value.query == "swim"

    def test_find_habit_blank_query(self, ledger):
        ledger.create_habit("Read")
        with pytest.raises(NotFoundError):
            ledger.find_habit("   ")

    def test_stats_by_id(self, ledger, habit_factory):
        habit = habit_factory("Read", days=days_ago(0, 1, 2, 5))

        stats = ledger.habit_stats(habit.id)

        assert (stats.current_streak, stats.longest_streak, stats.total_completions) == (3, 3, 4)

    def test_aggregate_stats_empty(self, ledger):
        assert ledger.aggregate_stats() == AggregateStats(0, 0, 0)

    def test_aggregate_stats(self, ledger, habit_factory):
        habit_factory("A", days=days_ago(0, 1))
        habit_factory("B", days=days_ago(5, 6, 7))

        stats = ledger.aggregate_stats()

        assert stats == AggregateStats(avg_current_streak=1, max_longest_streak=3, total_completions=5)

    def test_completion_status_over_all_habits(self, ledger, habit_factory):
        habit_factory("A", days=days_ago(0, 1))
        habit_factory("B", days=days_ago(0))

        assert ledger.completion_status_for_day(TODAY) is CompletionStatus.COMPLETE
        assert ledger.completion_status_for_day(TODAY - timedelta(days=1)) is CompletionStatus.PARTIAL
        assert ledger.completion_status_for_day(TODAY - timedelta(days=2)) is CompletionStatus.NONE

    def test_days_in_month(self, ledger):
        assert len(ledger.days_in_month(TODAY)) == 31

    def test_calendar_for_unknown_habit(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.calendar_month(TODAY, habit=31337)


class TestEndToEnd:
    def test_read_habit_lifecycle(self, repo):
        clock = {"today": TODAY}
        ledger = HabitLedger(repo, clock=lambda: clock["today"])

        habit = ledger.create_habit("Read", 0)
        assert ledger.total_completions(habit) == 0
        assert habit.is_completed is False

        habit = ledger.toggle_completion(habit)
        assert habit.is_completed is True
        assert ledger.total_completions(habit) == 1
        assert ledger.current_streak(habit) == 1

        # Next day, nothing toggled yet: yesterday still carries the streak
        clock["today"] = TODAY + timedelta(days=1)
        assert ledger.current_streak(habit) == 1

        # Two days later with no completion, the streak is broken
        clock["today"] = TODAY + timedelta(days=2)
        assert ledger.current_streak(habit) == 0
        assert ledger.longest_streak(habit) == 1

        ledger.delete_habit(habit)
        assert ledger.list_habits() == []
