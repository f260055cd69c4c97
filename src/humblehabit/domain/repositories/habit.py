"""Daily habit record store protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.habit import Habit, HabitRecord


class HabitRepository(Protocol):
    """Owner-scoped store for daily habits and their completion records.

    Every method takes the owner's ``user_id``; a habit owned by someone
    else behaves exactly like a missing one.
    """

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def list_all(self, *, user_id: int) -> list[Habit]:
        """List the owner's habits, oldest first."""
        ...

    def count(self, *, user_id: int) -> int:
        """Number of daily habits the owner has."""
        ...

    def create_with_limit(
        self,
        habit: Habit,
        *,
        user_id: int,
        max_daily: int,
        max_total: int,
    ) -> Optional[Habit]:
        """Insert the habit only if the owner stays within both limits.

        Returns the stored habit, or ``None`` when the limit check failed.
        Raises ``DuplicateName`` when the owner already has a habit with the
        same name, compared case-insensitively.
        """
        ...

    def update(self, habit: Habit, *, user_id: int) -> Habit:
        """Persist changes to an existing habit; a clashing name raises ``DuplicateName``."""
        ...

    def delete(self, habit_id: int, *, user_id: int) -> bool:
        """Delete a habit and its records. Returns False when nothing matched."""
        ...

    # Completion records
    def get_record(self, habit_id: int, occurred_on: date, *, user_id: int) -> Optional[HabitRecord]:
        """Get the record for one habit/day."""
        ...

    def list_records(
        self,
        habit_id: int,
        *,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[HabitRecord]:
        """Records for one habit, ascending by day, optionally within a range."""
        ...

    def list_records_for_user(
        self,
        *,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[HabitRecord]:
        """Records across all of the owner's habits."""
        ...

    def upsert_record(self, habit_id: int, occurred_on: date, status: bool, *, user_id: int) -> HabitRecord:
        """Insert or overwrite the record keyed by (owner, habit, day)."""
        ...

    def delete_record(self, habit_id: int, occurred_on: date, *, user_id: int) -> bool:
        """Remove a record."""
        ...
