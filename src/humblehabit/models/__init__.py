"""SQLModel table exports."""

from .habit import Habit, HabitRecord
from .user import User
from .weekly_habit import WeeklyHabit, WeeklyHabitRecord

__all__ = [
    "Habit",
    "HabitRecord",
    "User",
    "WeeklyHabit",
    "WeeklyHabitRecord",
]
