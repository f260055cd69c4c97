"""Tests for the click command line interface."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from humblehabit.cli import main
from humblehabit.config import TestingConfig
from humblehabit.context import create_app_context, local_today


@pytest.fixture
def app(tmp_path, monkeypatch):
    # Far from UTC, so local and UTC calendar days usually differ
    monkeypatch.setenv("HUMBLEHABIT_TIMEZONE", "Pacific/Kiritimati")
    context = create_app_context(TestingConfig(tmp_path))
    yield context
    context.engine.dispose()


@pytest.fixture
def invoke(app):
    runner = CliRunner()

    def _invoke(*args, **kwargs):
        return runner.invoke(main, list(args), obj=app, **kwargs)

    return _invoke


@pytest.fixture
def alice(invoke):
    result = invoke("create-user", "-u", "alice", input="pw\npw\n")
    assert result.exit_code == 0, result.output
    return ("-u", "alice", "-p", "pw")


def test_init_db(invoke, app):
    result = invoke("init-db")

    assert result.exit_code == 0
    assert app.config.DATABASE_URL in result.output


def test_create_user(invoke, alice):
    result = invoke("create-user", "-u", "alice", input="pw\npw\n")

    assert result.exit_code == 1
    assert "Username already exists" in result.output


def test_add_habit_and_duplicate(invoke, alice):
    first = invoke("add-habit", *alice, "Read")
    second = invoke("add-habit", *alice, "read")

    assert first.exit_code == 0
    assert "Added habit #1: Read" in first.output
    assert second.exit_code == 1
    assert "already exists" in second.output


def test_daily_limit(invoke, alice):
    invoke("add-habit", *alice, "Read")
    invoke("add-habit", *alice, "Walk")

    result = invoke("add-habit", *alice, "Swim")

    assert result.exit_code == 1
    assert "Maximum 2 daily habits" in result.output


def test_bad_credentials(invoke, alice):
    result = invoke("add-habit", "-u", "alice", "-p", "nope", "Read")

    assert result.exit_code == 1
    assert "Invalid username or password" in result.output


def test_add_weekly(invoke, alice):
    result = invoke("add-weekly", *alice, "Long run", "--day", "7", "--day", "1")

    assert result.exit_code == 0, result.output
    assert "Long run (Mon, Sun)" in result.output

    again = invoke("add-weekly", *alice, "Swim", "--day", "3")
    assert again.exit_code == 1
    assert "already has a weekly habit" in again.output


def test_add_weekly_rejects_bad_day(invoke, alice):
    result = invoke("add-weekly", *alice, "Long run", "--day", "8")

    assert result.exit_code == 2


def test_check_toggles_today(invoke, alice, app):
    invoke("add-habit", *alice, "Read")
    today = local_today(app.config)().isoformat()

    first = invoke("check", *alice, "1")
    second = invoke("check", *alice, "1")

    assert first.output.strip() == f"{today}: done"
    assert second.output.strip() == f"{today}: not done"


def test_check_future_date(invoke, alice):
    invoke("add-habit", *alice, "Read")

    result = invoke("check", *alice, "1", "--date", "2999-01-01")

    assert result.exit_code == 1
    assert "future" in result.output


def test_check_unknown_habit(invoke, alice):
    result = invoke("check", *alice, "42")

    assert result.exit_code == 1
    assert "Habit not found" in result.output


def test_stats(invoke, alice):
    invoke("add-habit", *alice, "Read")
    invoke("add-weekly", *alice, "Long run", *[arg for d in range(1, 8) for arg in ("--day", str(d))])
    invoke("check", *alice, "1")

    result = invoke("stats", *alice)

    assert result.exit_code == 0, result.output
    assert (
        "Read: completed 1 days, current failure streak 0, longest failure streak 0"
        in result.output
    )
    assert "Long run (weekly): completed 0/" in result.output


def test_stats_without_habits(invoke, alice):
    result = invoke("stats", *alice, "--month", "2024-02")

    assert result.exit_code == 0
    assert "Progress for 2024-02" in result.output
    assert "No habits yet." in result.output


@pytest.mark.parametrize("month", ["February", "2024-13"])
def test_stats_bad_month(invoke, alice, month):
    result = invoke("stats", *alice, "--month", month)

    assert result.exit_code == 1
