"""Command line front end for the habit ledger."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import click
from sqlalchemy.exc import SQLAlchemyError

from .config import BaseConfig
from .context import AppContext, create_app_context
from .dates import short_display
from .errors import NotFoundError, ValidationError
from .logging_config import get_logger, setup_logging
from .services.calendar import WEEKDAY_LABELS
from .services.habits import CompletionStatus

logger = get_logger(__name__)

STATUS_MARKS = {
    CompletionStatus.NONE: " ",
    CompletionStatus.PARTIAL: "~",
    CompletionStatus.COMPLETE: "*",
}

pass_app = click.make_pass_decorator(AppContext)


def _find(app: AppContext, name: str):
    try:
        return app.ledger.find_habit(name)
    except NotFoundError as exc:
        raise click.ClickException(f"Couldn't find a habit called '{exc.query}'") from exc


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    envvar="ONELINEHABIT_DATA_DIR",
    default=None,
    help="Directory holding the habit database and logs.",
)
@click.option(
    "--today",
    "today_override",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    hidden=True,
    help="Pretend today is this date (YYYY-MM-DD).",
)
@click.pass_context
def cli(ctx: click.Context, data_dir: Optional[str], today_override: Optional[datetime]) -> None:
    """Track daily habits, one line at a time."""

    config = BaseConfig(data_dir=data_dir)
    setup_logging(config)
    kwargs = {}
    if today_override is not None:
        fixed = today_override.date()
        kwargs["clock"] = lambda: fixed
    try:
        app = create_app_context(config, **kwargs)
    except SQLAlchemyError as exc:
        logger.exception("Could not open habit store")
        raise click.ClickException(f"Could not open habit store: {exc}") from exc
    ctx.obj = app
    ctx.call_on_close(app.dispose)


@cli.command("add")
@click.argument("title", nargs=-1, required=True)
@click.option("--position", type=int, default=None, help="Sort position (defaults to the end).")
@pass_app
def add_habit(app: AppContext, title: tuple[str, ...], position: Optional[int]) -> None:
    """Create a habit called TITLE."""

    try:
        habit = app.ledger.create_habit(" ".join(title), position)
    except ValidationError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Added '{habit.title}'")


@cli.command("list")
@pass_app
def list_habits(app: AppContext) -> None:
    """Show habits in display order with today's state and current streak."""

    habits = app.ledger.list_habits()
    if not habits:
        click.echo("No habits yet. Add one with 'onelinehabit add <title>'.")
        return
    for habit in habits:
        mark = "x" if habit.is_completed else " "
        streak = app.ledger.current_streak(habit)
        click.echo(f"[{mark}] {habit.title}  ({streak} day streak)")
    summary = app.ledger.today_summary(habits)
    click.echo(f"{summary.completed}/{summary.total} done today")
    best = app.ledger.best_current_streak(habits)
    if best > 0:
        click.echo(f"{best} Day Streak!")


@cli.command("toggle")
@click.argument("name", nargs=-1, required=True)
@pass_app
def toggle_habit(app: AppContext, name: tuple[str, ...]) -> None:
    """Flip today's completion for the habit matching NAME."""

    query = " ".join(name)
    habit = app.ledger.toggle_completion(_find(app, query))
    if habit is None:
        raise click.ClickException(f"Couldn't find a habit called '{query}'")
    state = "done" if habit.is_completed else "not done"
    click.echo(f"'{habit.title}' marked {state} for {short_display(app.ledger.clock())}")


@cli.command("done")
@click.argument("name", nargs=-1, required=True)
@pass_app
def complete_habit(app: AppContext, name: tuple[str, ...]) -> None:
    """Mark the habit matching NAME complete for today."""

    reply = app.assistant.complete_habit(" ".join(name))
    if not reply.ok:
        raise click.ClickException(reply.say)
    click.echo(reply.say)


@cli.command("reset")
@pass_app
def reset_habits(app: AppContext) -> None:
    """Uncomplete every habit for today. Earlier history is kept."""

    click.echo(app.assistant.reset_habits().say)


@cli.command("rename")
@click.argument("name", nargs=-1, required=True)
@click.option("--to", "new_title", required=True, help="The new title.")
@pass_app
def rename_habit(app: AppContext, name: tuple[str, ...], new_title: str) -> None:
    """Give the habit matching NAME a new title, keeping its history."""

    habit = _find(app, " ".join(name))
    try:
        renamed = app.ledger.rename_habit(habit, new_title)
    except ValidationError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Renamed '{habit.title}' to '{renamed.title}'")


@cli.command("delete")
@click.argument("name", nargs=-1, required=True)
@click.option("--yes", is_flag=True, default=False, help="Skip the confirmation prompt.")
@pass_app
def delete_habit(app: AppContext, name: tuple[str, ...], yes: bool) -> None:
    """Delete the habit matching NAME and all of its history."""

    habit = _find(app, " ".join(name))
    if not yes:
        click.confirm(f"Delete '{habit.title}' and its history?", abort=True)
    app.ledger.delete_habit(habit)
    click.echo(f"Deleted '{habit.title}'")


@cli.command("stats")
@click.argument("name", required=False)
@pass_app
def show_stats(app: AppContext, name: Optional[str]) -> None:
    """Streak statistics for one habit, or across all habits."""

    if name:
        habit = _find(app, name)
        stats = app.ledger.habit_stats(habit)
        click.echo(habit.title)
        click.echo(f"Current streak: {stats.current_streak}")
        click.echo(f"Best streak: {stats.longest_streak}")
        click.echo(f"Total: {stats.total_completions}")
        return

    stats = app.ledger.aggregate_stats(app.ledger.list_habits())
    click.echo(f"Avg streak: {stats.avg_current_streak}")
    click.echo(f"Best streak: {stats.max_longest_streak}")
    click.echo(f"Total done: {stats.total_completions}")


@cli.command("calendar")
@click.option("--month", type=click.DateTime(formats=["%Y-%m"]), default=None, help="Month as YYYY-MM.")
@click.option("--habit", "habit_name", default=None, help="Only show this habit.")
@pass_app
def show_calendar(app: AppContext, month: Optional[datetime], habit_name: Optional[str]) -> None:
    """Print a month grid: '*' all done, '~' some done."""

    habit = _find(app, habit_name) if habit_name else None
    grid = app.ledger.calendar_month(month.date() if month else app.current_month, habit=habit)

    click.echo(grid.label.center(7 * 4))
    click.echo("".join(f"{label[:2]:>4}" for label in WEEKDAY_LABELS))
    for week in grid.weeks():
        row = ""
        for cell in week:
            if cell is None:
                row += " " * 4
            else:
                row += f"{cell.day.day:>3}{STATUS_MARKS[cell.status]}"
        click.echo(row.rstrip())


@cli.command("progress")
@pass_app
def check_progress(app: AppContext) -> None:
    """How many habits are done today."""

    click.echo(app.assistant.check_progress().say)


def main() -> None:
    cli(prog_name="onelinehabit")


if __name__ == "__main__":
    main()
