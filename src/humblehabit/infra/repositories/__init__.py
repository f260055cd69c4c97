"""Concrete repository implementations using SQLModel."""

from .habit import SQLModelHabitRepository
from .weekly_habit import SQLModelWeeklyHabitRepository

__all__ = [
    "SQLModelHabitRepository",
    "SQLModelWeeklyHabitRepository",
]
