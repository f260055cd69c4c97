"""SQLModel implementation of the daily habit repository."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String, func, insert, literal
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from ...errors import DuplicateName
from ...models.habit import Habit, HabitRecord, habit_name_key
from ...models.weekly_habit import WeeklyHabit
from ..database import SessionFactory


def owned_count_subquery(model, user_id: int):
    """Scalar subquery counting rows of ``model`` owned by ``user_id``."""
    return (
        select(func.count(model.id))
        .where(model.user_id == user_id)
        .correlate(None)
        .scalar_subquery()
    )


class SQLModelHabitRepository:
    """SQLModel-based daily habit repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int) -> list[Habit]:
        """List the owner's habits, oldest first."""
        with self.session_factory() as session:
            statement = (
                select(Habit)
                .where(Habit.user_id == user_id)
                .order_by(Habit.created_at, Habit.id)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def count(self, *, user_id: int) -> int:
        with self.session_factory() as session:
            return session.exec(
                select(func.count(Habit.id)).where(Habit.user_id == user_id)
            ).one()

    def create_with_limit(
        self,
        habit: Habit,
        *,
        user_id: int,
        max_daily: int,
        max_total: int,
    ) -> Optional[Habit]:
        """Insert the habit in one conditional statement.

        INSERT ... SELECT ... WHERE <counts below limits> keeps the check and
        the write atomic, so concurrent creations cannot both slip under the
        quota. The owner's unique name key rejects a duplicate that raced past
        the service check with ``DuplicateName``.
        """
        created_at = habit.created_at or datetime.now(timezone.utc)
        with self.session_factory() as session:
            daily = owned_count_subquery(Habit, user_id)
            weekly = owned_count_subquery(WeeklyHabit, user_id)
            source = select(
                literal(user_id),
                literal(habit.name, type_=String()),
                literal(habit_name_key(habit.name), type_=String()),
                literal(habit.color, type_=String()),
                literal(created_at, type_=DateTime()),
            ).where(daily < max_daily, daily + weekly < max_total)
            try:
                result = session.exec(  # type: ignore[call-overload]
                    insert(Habit).from_select(
                        ["user_id", "name", "name_key", "color", "created_at"], source
                    )
                )
            except IntegrityError as exc:
                raise DuplicateName("A habit with this name already exists") from exc
            if not result.rowcount:
                return None
            obj = session.exec(
                select(Habit)
                .where(Habit.user_id == user_id, Habit.name == habit.name)
                .order_by(Habit.id.desc())  # type: ignore[union-attr]
            ).first()
            session.commit()
            if obj:
                session.refresh(obj)
                session.expunge(obj)
            return obj

    def update(self, habit: Habit, *, user_id: int) -> Habit:
        """Update an existing habit."""
        with self.session_factory() as session:
            habit.user_id = user_id
            habit.name_key = habit_name_key(habit.name)
            merged = session.merge(habit)
            try:
                session.commit()
            except IntegrityError as exc:
                raise DuplicateName("A habit with this name already exists") from exc
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def delete(self, habit_id: int, *, user_id: int) -> bool:
        """Delete a habit by ID; its records go with it."""
        with self.session_factory() as session:
            habit = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            ).first()
            if habit is None:
                return False
            session.delete(habit)
            session.commit()
            return True

    # Completion records
    def get_record(
        self, habit_id: int, occurred_on: date, *, user_id: int
    ) -> Optional[HabitRecord]:
        """Get a specific completion record."""
        with self.session_factory() as session:
            obj = session.exec(self._record_query(habit_id, occurred_on, user_id)).first()
            if obj:
                session.expunge(obj)
            return obj

    @staticmethod
    def _record_query(habit_id: int, occurred_on: date, user_id: int):
        return (
            select(HabitRecord)
            .where(HabitRecord.user_id == user_id)
            .where(HabitRecord.habit_id == habit_id)
            .where(HabitRecord.occurred_on == occurred_on)
        )

    def list_records(
        self,
        habit_id: int,
        *,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[HabitRecord]:
        """Get records for a habit, optionally within a date range."""
        with self.session_factory() as session:
            statement = (
                select(HabitRecord)
                .where(HabitRecord.user_id == user_id)
                .where(HabitRecord.habit_id == habit_id)
            )
            if start_date is not None:
                statement = statement.where(HabitRecord.occurred_on >= start_date)
            if end_date is not None:
                statement = statement.where(HabitRecord.occurred_on <= end_date)
            rows = list(session.exec(statement.order_by(HabitRecord.occurred_on)).all())  # type: ignore
            session.expunge_all()
            return rows

    def list_records_for_user(
        self,
        *,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[HabitRecord]:
        with self.session_factory() as session:
            statement = select(HabitRecord).where(HabitRecord.user_id == user_id)
            if start_date is not None:
                statement = statement.where(HabitRecord.occurred_on >= start_date)
            if end_date is not None:
                statement = statement.where(HabitRecord.occurred_on <= end_date)
            statement = statement.order_by(HabitRecord.occurred_on, HabitRecord.habit_id)  # type: ignore
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def upsert_record(
        self, habit_id: int, occurred_on: date, status: bool, *, user_id: int
    ) -> HabitRecord:
        """Insert or overwrite the record for (owner, habit, day); last write wins."""
        with self.session_factory() as session:
            now = datetime.now(timezone.utc)
            query = self._record_query(habit_id, occurred_on, user_id)
            existing = session.exec(query).first()
            if existing is None:
                record = HabitRecord(
                    user_id=user_id,
                    habit_id=habit_id,
                    occurred_on=occurred_on,
                    status=status,
                    updated_at=now,
                )
                session.add(record)
                try:
                    session.commit()
                except IntegrityError:
                    # Lost an insert race on the natural key; overwrite instead.
                    session.rollback()
                    existing = session.exec(query).one()
                else:
                    session.refresh(record)
                    session.expunge(record)
                    return record

            existing.status = status
            existing.updated_at = now
            session.add(existing)
            session.commit()
            session.refresh(existing)
            session.expunge(existing)
            return existing

    def delete_record(self, habit_id: int, occurred_on: date, *, user_id: int) -> bool:
        """Delete a completion record."""
        with self.session_factory() as session:
            record = session.exec(self._record_query(habit_id, occurred_on, user_id)).first()
            if record is None:
                return False
            session.delete(record)
            session.commit()
            return True
