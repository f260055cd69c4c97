"""Service module exports."""

from . import auth, habits, scheduling, streaks

__all__ = [
    "auth",
    "habits",
    "scheduling",
    "streaks",
]
