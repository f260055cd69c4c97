"""Weekly habit data structures."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

WEEKLY_TITLE_MAX_LENGTH = 64


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WeeklyHabit(SQLModel, table=True):
    """The single habit an owner tracks on selected weekdays."""

    __tablename__: ClassVar[str] = "weekly_habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    # One weekly habit per owner
    user_id: int = Field(foreign_key="user.id", nullable=False, unique=True, index=True)
    title: str = Field(nullable=False, max_length=WEEKLY_TITLE_MAX_LENGTH)
    # Sorted WeekdayIds, 1=Monday .. 7=Sunday
    days: list[int] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)

    records: list["WeeklyHabitRecord"] = Relationship(
        back_populates="weekly_habit",
        sa_relationship=relationship(
            "WeeklyHabitRecord", back_populates="weekly_habit", cascade="all, delete-orphan"
        ),
    )


class WeeklyHabitRecord(SQLModel, table=True):
    """Completion status of the weekly habit on a scheduled day."""

    __tablename__: ClassVar[str] = "weekly_habit_record"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "weekly_habit_id", "occurred_on", name="uq_weekly_habit_record_day"
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    weekly_habit_id: int = Field(foreign_key="weekly_habit.id", nullable=False, index=True)
    occurred_on: date = Field(nullable=False, index=True)
    status: bool = Field(default=False, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)

    weekly_habit: "WeeklyHabit" = Relationship(
        back_populates="records",
        sa_relationship=relationship("WeeklyHabit", back_populates="records"),
    )
