"""Weekly habit record store protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.weekly_habit import WeeklyHabit, WeeklyHabitRecord


class WeeklyHabitRepository(Protocol):
    """Owner-scoped store for the single weekly habit and its records."""

    def get_for_user(self, *, user_id: int) -> Optional[WeeklyHabit]:
        """Return the owner's weekly habit, if any."""
        ...

    def get_by_id(self, weekly_habit_id: int, *, user_id: int) -> Optional[WeeklyHabit]:
        ...

    def count(self, *, user_id: int) -> int:
        """0 or 1."""
        ...

    def create_with_limit(
        self,
        weekly_habit: WeeklyHabit,
        *,
        user_id: int,
        max_total: int,
    ) -> Optional[WeeklyHabit]:
        """Insert unless the owner already has one or would exceed ``max_total``."""
        ...

    def update(self, weekly_habit: WeeklyHabit, *, user_id: int) -> WeeklyHabit:
        ...

    def delete(self, weekly_habit_id: int, *, user_id: int) -> bool:
        """Delete the weekly habit and cascade its records."""
        ...

    def list_records(
        self,
        weekly_habit_id: int,
        *,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[WeeklyHabitRecord]:
        ...

    def upsert_record(
        self, weekly_habit_id: int, occurred_on: date, status: bool, *, user_id: int
    ) -> WeeklyHabitRecord:
        ...
