"""Pytest configuration and shared fixtures for HumbleHabit tests.

This module provides database fixtures, test data factories, and a frozen
calendar day so streak statistics are reproducible.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
from sqlmodel import SQLModel, create_engine

from humblehabit.infra.database import create_session_factory
from humblehabit.infra.repositories import (
    SQLModelHabitRepository,
    SQLModelWeeklyHabitRepository,
)
from humblehabit.models import Habit, User, WeeklyHabit
from humblehabit.services.habits import HabitService

# Frozen "today" shared by service and statistics tests
TODAY = date(2024, 1, 5)

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create an isolated SQLite database for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        echo=False,
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the one repositories get in production."""

    return create_session_factory(db_engine)


@pytest.fixture
def habit_repo(session_factory) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory)


@pytest.fixture
def weekly_repo(session_factory) -> SQLModelWeeklyHabitRepository:
    return SQLModelWeeklyHabitRepository(session_factory)


@pytest.fixture
def service(habit_repo, weekly_repo) -> HabitService:
    """HabitService whose clock is pinned to TODAY."""

    return HabitService(habit_repo, weekly_repo, clock=lambda: TODAY)


# =============================================================================
# Test Data Factories
# =============================================================================


def _make_user(session_factory, username: str) -> User:
    with session_factory() as session:
        user = User(username=username, password_hash="dummy-hash")
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
        return user


@pytest.fixture
def user(session_factory) -> User:
    """Default owner for scoping data."""

    return _make_user(session_factory, "tester")


@pytest.fixture
def other_user(session_factory) -> User:
    """A second owner, used to check that data never crosses owners."""

    return _make_user(session_factory, "intruder")


@pytest.fixture
def habit_factory(session_factory, user):
    """Factory for persisted daily habits.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(
        name: str = "Read",
        *,
        owner: User | None = None,
        created_at: datetime | None = None,
        color: str | None = None,
    ) -> Habit:
        owner = owner or user
        habit = Habit(
            user_id=owner.id,
            name=name,
            color=color,
            created_at=created_at or datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc),
        )
        with session_factory() as session:
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
        return habit

    return _create_habit


@pytest.fixture
def weekly_habit_factory(session_factory, user):
    """Factory for persisted weekly habits."""

    def _create_weekly(
        title: str = "Long run",
        days: list[int] | None = None,
        *,
        owner: User | None = None,
        created_at: datetime | None = None,
    ) -> WeeklyHabit:
        owner = owner or user
        stamp = created_at or datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)
        weekly = WeeklyHabit(
            user_id=owner.id,
            title=title,
            days=days or [1, 7],
            created_at=stamp,
            updated_at=stamp,
        )
        with session_factory() as session:
            session.add(weekly)
            session.commit()
            session.refresh(weekly)
            session.expunge(weekly)
        return weekly

    return _create_weekly
