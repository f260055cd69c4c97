"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from sqlalchemy.engine import Engine

from .config import BaseConfig
from .infra.database import SessionFactory, create_db_engine, create_session_factory, init_database
from .infra.repositories import SQLModelHabitRepository, SQLModelWeeklyHabitRepository
from .services.habits import HabitService


def local_today(config: BaseConfig) -> Callable[[], date]:
    """Clock returning the current calendar day in the configured timezone."""

    zone = config.zone
    return lambda: datetime.now(zone).date()


@dataclass
class AppContext:
    """Centralized application context with repositories and services."""

    config: BaseConfig
    engine: Engine
    session_factory: SessionFactory

    habit_repo: SQLModelHabitRepository
    weekly_repo: SQLModelWeeklyHabitRepository
    habits: HabitService


def create_app_context(
    config: Optional[BaseConfig] = None,
    *,
    clock: Optional[Callable[[], date]] = None,
) -> AppContext:
    """Create the engine, initialise the schema and wire repositories."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    habit_repo = SQLModelHabitRepository(session_factory)
    weekly_repo = SQLModelWeeklyHabitRepository(session_factory)
    service = HabitService(
        habit_repo, weekly_repo, clock=clock or local_today(config), zone=config.zone
    )

    return AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        habit_repo=habit_repo,
        weekly_repo=weekly_repo,
        habits=service,
    )
