"""Command line entry points for HumbleHabit."""

from __future__ import annotations

from datetime import date

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .errors import HabitError
from .logging_config import setup_logging
from .services import auth
from .services.scheduling import describe_days


def _context(ctx: click.Context) -> AppContext:
    app = ctx.find_object(AppContext)
    if app is None:
        config = BaseConfig()
        setup_logging(config)
        app = create_app_context(config)
        ctx.obj = app
    return app


def _login(app: AppContext, username: str, password: str) -> int:
    user = auth.authenticate(
        username=username, password=password, session_factory=app.session_factory
    )
    owner_id = auth.resolve_owner_id(user)
    if owner_id is None:
        raise click.ClickException("Invalid username or password")
    return owner_id


credentials = [
    click.option("--username", "-u", required=True, help="Account name"),
    click.option("--password", "-p", prompt=True, hide_input=True, help="Account password"),
]


def with_credentials(func):
    for option in reversed(credentials):
        func = option(func)
    return func


@click.group()
@click.pass_context
def main(ctx: click.Context) -> None:
    """Track daily and weekly habits."""


@main.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create database tables."""

    app = _context(ctx)
    click.echo(f"Database ready at {app.config.DATABASE_URL}")


@main.command("create-user")
@click.option("--username", "-u", required=True)
@click.password_option()
@click.pass_context
def create_user(ctx: click.Context, username: str, password: str) -> None:
    """Register a new account."""

    app = _context(ctx)
    try:
        user = auth.create_user(
            username=username, password=password, session_factory=app.session_factory
        )
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Created user {user.username}")


@main.command("add-habit")
@with_credentials
@click.argument("name")
@click.option("--color", default=None, help="Optional color tag")
@click.pass_context
def add_habit(ctx: click.Context, username: str, password: str, name: str, color: str | None) -> None:
    """Add a daily habit."""

    app = _context(ctx)
    owner_id = _login(app, username, password)
    try:
        habit = app.habits.create_habit(owner_id, name, color=color)
    except HabitError as exc:
        raise click.ClickException(exc.message) from exc
    click.echo(f"Added habit #{habit.id}: {habit.name}")


@main.command("add-weekly")
@with_credentials
@click.argument("title")
@click.option(
    "--day",
    "days",
    type=click.IntRange(1, 7),
    multiple=True,
    required=True,
    help="Weekday 1 (Mon) to 7 (Sun); repeat for several days",
)
@click.pass_context
def add_weekly(
    ctx: click.Context, username: str, password: str, title: str, days: tuple[int, ...]
) -> None:
    """Add the weekly habit."""

    app = _context(ctx)
    owner_id = _login(app, username, password)
    try:
        weekly = app.habits.create_weekly_habit(owner_id, title, list(days))
    except HabitError as exc:
        raise click.ClickException(exc.message) from exc
    click.echo(f"Added weekly habit: {weekly.title} ({describe_days(weekly.days)})")


@main.command("check")
@with_credentials
@click.argument("habit_id", type=int)
@click.option("--date", "day", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.pass_context
def check(ctx: click.Context, username: str, password: str, habit_id: int, day) -> None:
    """Toggle a daily habit for a day (default today)."""

    app = _context(ctx)
    owner_id = _login(app, username, password)
    try:
        record = app.habits.toggle_habit(owner_id, habit_id, day.date() if day else None)
    except HabitError as exc:
        raise click.ClickException(exc.message) from exc
    mark = "done" if record.status else "not done"
    click.echo(f"{record.occurred_on.isoformat()}: {mark}")


@main.command("stats")
@with_credentials
@click.option("--month", default=None, help="Month as YYYY-MM (default current month)")
@click.pass_context
def stats(ctx: click.Context, username: str, password: str, month: str | None) -> None:
    """Show monthly progress and failure streaks."""

    app = _context(ctx)
    owner_id = _login(app, username, password)
    today: date = app.habits.today()
    try:
        year, month_no = (int(part) for part in month.split("-")) if month else (today.year, today.month)
    except ValueError as exc:
        raise click.ClickException("Month must look like YYYY-MM") from exc

    try:
        progress = app.habits.month_progress(owner_id, year, month_no)
        weekly = app.habits.weekly_month_progress(owner_id, year, month_no)
    except HabitError as exc:
        raise click.ClickException(exc.message) from exc

    click.echo(f"Progress for {year:04d}-{month_no:02d}")
    if not progress and weekly is None:
        click.echo("No habits yet.")
    for item in progress:
        click.echo(
            f"  {item.name}: completed {item.completions} days, "
            f"current failure streak {item.streaks.current_failure_streak}, "
            f"longest failure streak {item.streaks.longest_failure_streak}"
        )
    if weekly is not None:
        click.echo(
            f"  {weekly.title} (weekly): completed {weekly.completions}"
            f"/{len(weekly.scheduled_days)} scheduled days"
        )


if __name__ == "__main__":  # pragma: no cover
    main()
