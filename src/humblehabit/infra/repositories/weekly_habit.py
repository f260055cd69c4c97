"""SQLModel implementation of the weekly habit repository."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import JSON, DateTime, String, func, insert, literal
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from ...models.habit import Habit
from ...models.weekly_habit import WeeklyHabit, WeeklyHabitRecord
from ..database import SessionFactory
from .habit import owned_count_subquery


class SQLModelWeeklyHabitRepository:
    """SQLModel-based weekly habit repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_for_user(self, *, user_id: int) -> Optional[WeeklyHabit]:
        with self.session_factory() as session:
            obj = session.exec(select(WeeklyHabit).where(WeeklyHabit.user_id == user_id)).first()
            if obj:
                session.expunge(obj)
            return obj

    def get_by_id(self, weekly_habit_id: int, *, user_id: int) -> Optional[WeeklyHabit]:
        with self.session_factory() as session:
            obj = session.exec(
                select(WeeklyHabit).where(
                    WeeklyHabit.id == weekly_habit_id, WeeklyHabit.user_id == user_id
                )
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def count(self, *, user_id: int) -> int:
        with self.session_factory() as session:
            return session.exec(
                select(func.count(WeeklyHabit.id)).where(WeeklyHabit.user_id == user_id)
            ).one()

    def create_with_limit(
        self,
        weekly_habit: WeeklyHabit,
        *,
        user_id: int,
        max_total: int,
    ) -> Optional[WeeklyHabit]:
        """Conditional insert; the unique owner column backs up the one-per-owner rule."""
        now = datetime.now(timezone.utc)
        with self.session_factory() as session:
            daily = owned_count_subquery(Habit, user_id)
            weekly = owned_count_subquery(WeeklyHabit, user_id)
            source = select(
                literal(user_id),
                literal(weekly_habit.title, type_=String()),
                literal(list(weekly_habit.days), type_=JSON()),
                literal(weekly_habit.created_at or now, type_=DateTime()),
                literal(weekly_habit.updated_at or now, type_=DateTime()),
            ).where(weekly == 0, daily + weekly < max_total)
            try:
                result = session.exec(  # type: ignore[call-overload]
                    insert(WeeklyHabit).from_select(
                        ["user_id", "title", "days", "created_at", "updated_at"], source
                    )
                )
            except IntegrityError:
                session.rollback()
                return None
            if not result.rowcount:
                return None
            session.commit()
            obj = session.exec(select(WeeklyHabit).where(WeeklyHabit.user_id == user_id)).one()
            session.expunge(obj)
            return obj

    def update(self, weekly_habit: WeeklyHabit, *, user_id: int) -> WeeklyHabit:
        with self.session_factory() as session:
            weekly_habit.user_id = user_id
            weekly_habit.updated_at = datetime.now(timezone.utc)
            merged = session.merge(weekly_habit)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def delete(self, weekly_habit_id: int, *, user_id: int) -> bool:
        with self.session_factory() as session:
            obj = session.exec(
                select(WeeklyHabit).where(
                    WeeklyHabit.id == weekly_habit_id, WeeklyHabit.user_id == user_id
                )
            ).first()
            if obj is None:
                return False
            session.delete(obj)
            session.commit()
            return True

    @staticmethod
    def _record_query(weekly_habit_id: int, occurred_on: date, user_id: int):
        return (
            select(WeeklyHabitRecord)
            .where(WeeklyHabitRecord.user_id == user_id)
            .where(WeeklyHabitRecord.weekly_habit_id == weekly_habit_id)
            .where(WeeklyHabitRecord.occurred_on == occurred_on)
        )

    def list_records(
        self,
        weekly_habit_id: int,
        *,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[WeeklyHabitRecord]:
        with self.session_factory() as session:
            statement = (
                select(WeeklyHabitRecord)
                .where(WeeklyHabitRecord.user_id == user_id)
                .where(WeeklyHabitRecord.weekly_habit_id == weekly_habit_id)
            )
            if start_date is not None:
                statement = statement.where(WeeklyHabitRecord.occurred_on >= start_date)
            if end_date is not None:
                statement = statement.where(WeeklyHabitRecord.occurred_on <= end_date)
            rows = list(
                session.exec(statement.order_by(WeeklyHabitRecord.occurred_on)).all()  # type: ignore
            )
            session.expunge_all()
            return rows

    def upsert_record(
        self, weekly_habit_id: int, occurred_on: date, status: bool, *, user_id: int
    ) -> WeeklyHabitRecord:
        with self.session_factory() as session:
            now = datetime.now(timezone.utc)
            query = self._record_query(weekly_habit_id, occurred_on, user_id)
            existing = session.exec(query).first()
            if existing is None:
                record = WeeklyHabitRecord(
                    user_id=user_id,
                    weekly_habit_id=weekly_habit_id,
                    occurred_on=occurred_on,
                    status=status,
                    updated_at=now,
                )
                session.add(record)
                try:
                    session.commit()
                except IntegrityError:
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
