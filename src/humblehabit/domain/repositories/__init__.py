"""Repository protocol definitions for domain layer."""

from .habit import HabitRepository
from .weekly_habit import WeeklyHabitRepository

__all__ = [
    "HabitRepository",
    "WeeklyHabitRepository",
]
