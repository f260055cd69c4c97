"""Daily habit data structures."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

HABIT_NAME_MAX_LENGTH = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def habit_name_key(name: str) -> str:
    """Normalised form two habit names share when they count as duplicates."""
    return name.strip().casefold()


def _default_name_key(context) -> str:
    return habit_name_key(context.get_current_parameters()["name"])


class Habit(SQLModel, table=True):
    """A habit tracked pass/fail once per calendar day."""

    __tablename__: ClassVar[str] = "habit"
    __table_args__ = (UniqueConstraint("user_id", "name_key", name="uq_habit_owner_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=HABIT_NAME_MAX_LENGTH, index=True)
    # Case-folded name; filled from ``name`` on insert when left unset
    name_key: Optional[str] = Field(
        default=None, nullable=False, sa_column_kwargs={"default": _default_name_key}
    )
    color: Optional[str] = Field(default=None, max_length=32)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)

    records: list["HabitRecord"] = Relationship(
        back_populates="habit",
        sa_relationship=relationship(
            "HabitRecord", back_populates="habit", cascade="all, delete-orphan"
        ),
    )


class HabitRecord(SQLModel, table=True):
    """Completion status of a habit on one calendar day."""

    __tablename__: ClassVar[str] = "habit_record"
    __table_args__ = (
        UniqueConstraint("user_id", "habit_id", "occurred_on", name="uq_habit_record_day"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    habit_id: int = Field(foreign_key="habit.id", nullable=False, index=True)
    occurred_on: date = Field(nullable=False, index=True)
    status: bool = Field(default=False, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)

    habit: "Habit" = Relationship(
        back_populates="records",
        sa_relationship=relationship("Habit", back_populates="records"),
    )
