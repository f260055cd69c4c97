"""Habit use cases: admission, completion toggling and progress statistics.

``HabitService`` reads snapshots from the record store, runs them through the
scheduling policy and the streak engine, and writes back only after every
check has passed. "Today" comes from an injectable clock so callers (and
tests) decide which calendar day is current.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Callable, Optional, Sequence

from ..domain.repositories import HabitRepository, WeeklyHabitRepository
from ..errors import AlreadyExists, LimitReached, NotFound, ValidationError, ValidationErrorKind
from ..logging_config import get_logger
from ..models.habit import Habit, HabitRecord
from ..models.weekly_habit import WeeklyHabit, WeeklyHabitRecord
from . import scheduling
from .streaks import FailureStreaks, compute_failure_streaks, parse_day, successful_days

logger = get_logger(__name__)

Clock = Callable[[], date]


@dataclass(slots=True)
class HabitStats:
    """Lifetime statistics for one daily habit."""

    habit_id: int
    name: str
    total_completions: int
    streaks: FailureStreaks


@dataclass(slots=True)
class MonthlyHabitProgress:
    """A daily habit's completions within one month plus its failure streaks."""

    habit_id: int
    name: str
    color: Optional[str]
    year: int
    month: int
    completed_days: list[date] = field(default_factory=list)
    streaks: FailureStreaks = field(default_factory=FailureStreaks)

    @property
    def completions(self) -> int:
        return len(self.completed_days)


@dataclass(slots=True)
class WeeklyProgress:
    """Scheduled vs completed days of the weekly habit within one month."""

    weekly_habit_id: int
    title: str
    scheduled_days: list[date] = field(default_factory=list)
    completed_days: list[date] = field(default_factory=list)

    @property
    def completions(self) -> int:
        return len(self.completed_days)


@dataclass(slots=True)
class DayEntry:
    habit_id: int
    name: str
    status: bool


@dataclass(slots=True)
class DayOverview:
    """What the owner should see for one calendar day."""

    day: date
    habits: list[DayEntry] = field(default_factory=list)
    weekly: Optional[DayEntry] = None


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""

    if not 1 <= month <= 12:
        raise ValidationError(
            ValidationErrorKind.INVALID_VALUE, f"Invalid month {month}", field="month"
        )
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def local_start_date(created_at: datetime, zone: tzinfo) -> date:
    """Calendar day in ``zone`` on which a habit created at ``created_at`` starts.

    Stored timestamps come back naive from SQLite; those are UTC.
    """

    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at.astimezone(zone).date()


def _coerce_day(value: Any) -> date:
    day = parse_day(value)
    if day is None:
        raise ValidationError(
            ValidationErrorKind.INVALID_VALUE,
            f"Invalid date {value!r}; expected YYYY-MM-DD",
            field="date",
        )
    return day


def _coerce_status(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(
            ValidationErrorKind.INVALID_VALUE, "Status must be a boolean", field="status"
        )
    return value


class HabitService:
    """Owner-scoped habit operations over a record store."""

    def __init__(
        self,
        habit_repo: HabitRepository,
        weekly_repo: WeeklyHabitRepository,
        *,
        clock: Clock = date.today,
        zone: tzinfo = timezone.utc,
    ) -> None:
        self.habit_repo = habit_repo
        self.weekly_repo = weekly_repo
        self.clock = clock
        self.zone = zone

    def today(self) -> date:
        return self.clock()

    def start_date(self, habit: Habit) -> date:
        """First tracked day of ``habit``, in the same zone as the clock."""
        return local_start_date(habit.created_at, self.zone)

    # ------------------------------------------------------------------
    # Daily habits
    # ------------------------------------------------------------------

    def list_habits(self, user_id: int) -> list[Habit]:
        return self.habit_repo.list_all(user_id=user_id)

    def get_habit(self, user_id: int, habit_id: int) -> Habit:
        """Return the owner's habit or raise ``NotFound``."""
        habit = self.habit_repo.get_by_id(habit_id, user_id=user_id)
        if habit is None:
            raise NotFound("Habit not found")
        return habit

    def create_habit(self, user_id: int, name: Any, color: Optional[str] = None) -> Habit:
        name = scheduling.validate_habit_name(name)
        existing = self.habit_repo.list_all(user_id=user_id)
        scheduling.ensure_unique_name(name, existing)
        weekly_count = self.weekly_repo.count(user_id=user_id)
        try:
            scheduling.ensure_can_create_daily_habit(len(existing), weekly_count)
        except LimitReached:
            logger.warning(
                "Daily habit limit reached",
                extra={"user_id": user_id, "daily": len(existing), "weekly": weekly_count},
            )
            raise

        created = self.habit_repo.create_with_limit(
            Habit(user_id=user_id, name=name, color=color),
            user_id=user_id,
            max_daily=scheduling.MAX_DAILY_HABITS,
            max_total=scheduling.MAX_TOTAL_HABITS,
        )
        if created is None:
            # Another request filled the quota between our read and the insert.
            logger.warning("Daily habit insert lost quota race", extra={"user_id": user_id})
            raise LimitReached(
                f"Maximum {scheduling.MAX_DAILY_HABITS} daily habits allowed."
            )
        logger.info("Habit created", extra={"user_id": user_id, "habit_id": created.id})
        return created

    def rename_habit(self, user_id: int, habit_id: int, name: Any) -> Habit:
        name = scheduling.validate_habit_name(name)
        habit = self.get_habit(user_id, habit_id)
        if habit.name == name:
            return habit
        scheduling.ensure_unique_name(
            name, self.habit_repo.list_all(user_id=user_id), exclude_id=habit_id
        )
        habit.name = name
        updated = self.habit_repo.update(habit, user_id=user_id)
        logger.info("Habit renamed", extra={"user_id": user_id, "habit_id": habit_id})
        return updated

    def delete_habit(self, user_id: int, habit_id: int) -> None:
        if not self.habit_repo.delete(habit_id, user_id=user_id):
            raise NotFound("Habit not found")
        logger.info("Habit deleted", extra={"user_id": user_id, "habit_id": habit_id})

    def _ensure_not_future(self, day: date) -> None:
        if day > self.today():
            raise ValidationError(
                ValidationErrorKind.INVALID_VALUE,
                "Cannot record a future date",
                field="date",
            )

    def set_habit_status(self, user_id: int, habit_id: int, day: Any, status: Any) -> HabitRecord:
        """Upsert the completion record for one day."""
        day = _coerce_day(day)
        status = _coerce_status(status)
        self._ensure_not_future(day)
        self.get_habit(user_id, habit_id)
        record = self.habit_repo.upsert_record(habit_id, day, status, user_id=user_id)
        logger.info(
            "Habit status set",
            extra={"user_id": user_id, "habit_id": habit_id, "date": day.isoformat(), "status": status},
        )
        return record

    def toggle_habit(self, user_id: int, habit_id: int, day: Any = None) -> HabitRecord:
        """Flip the day's status; a missing record counts as not completed."""
        day = self.today() if day is None else _coerce_day(day)
        self.get_habit(user_id, habit_id)
        current = self.habit_repo.get_record(habit_id, day, user_id=user_id)
        return self.set_habit_status(
            user_id, habit_id, day, not (current is not None and current.status is True)
        )

    # ------------------------------------------------------------------
    # Weekly habit
    # ------------------------------------------------------------------

    def get_weekly_habit(self, user_id: int) -> Optional[WeeklyHabit]:
        return self.weekly_repo.get_for_user(user_id=user_id)

    def _require_weekly(self, user_id: int, weekly_habit_id: int) -> WeeklyHabit:
        weekly = self.weekly_repo.get_by_id(weekly_habit_id, user_id=user_id)
        if weekly is None:
            raise NotFound("Weekly habit not found")
        return weekly

    def create_weekly_habit(self, user_id: int, title: Any, days: Sequence[Any]) -> WeeklyHabit:
        title = scheduling.validate_weekly_title(title)
        weekdays = scheduling.validate_weekday_set(days)
        daily_count = self.habit_repo.count(user_id=user_id)
        weekly_count = self.weekly_repo.count(user_id=user_id)
        scheduling.ensure_can_create_weekly_habit(daily_count, weekly_count)

        created = self.weekly_repo.create_with_limit(
            WeeklyHabit(user_id=user_id, title=title, days=list(weekdays)),
            user_id=user_id,
            max_total=scheduling.MAX_TOTAL_HABITS,
        )
        if created is None:
            logger.warning("Weekly habit insert lost quota race", extra={"user_id": user_id})
            if self.weekly_repo.count(user_id=user_id):
                raise AlreadyExists("User already has a weekly habit")
            raise LimitReached(f"Maximum {scheduling.MAX_TOTAL_HABITS} habits in total allowed.")
        logger.info(
            "Weekly habit created",
            extra={"user_id": user_id, "weekly_habit_id": created.id, "days": list(weekdays)},
        )
        return created

    def update_weekly_habit(
        self,
        user_id: int,
        weekly_habit_id: int,
        *,
        title: Any = None,
        days: Optional[Sequence[Any]] = None,
    ) -> WeeklyHabit:
        """Rename and/or reschedule; omitted fields stay as they are."""
        new_title = scheduling.validate_weekly_title(title) if title is not None else None
        new_days = scheduling.validate_weekday_set(days) if days is not None else None
        weekly = self._require_weekly(user_id, weekly_habit_id)
        if new_title is not None:
            weekly.title = new_title
        if new_days is not None:
            weekly.days = list(new_days)
        updated = self.weekly_repo.update(weekly, user_id=user_id)
        logger.info(
            "Weekly habit updated", extra={"user_id": user_id, "weekly_habit_id": weekly_habit_id}
        )
        return updated

    def delete_weekly_habit(self, user_id: int, weekly_habit_id: int) -> None:
        if not self.weekly_repo.delete(weekly_habit_id, user_id=user_id):
            raise NotFound("Weekly habit not found")
        logger.info(
            "Weekly habit deleted", extra={"user_id": user_id, "weekly_habit_id": weekly_habit_id}
        )

    def set_weekly_status(
        self, user_id: int, weekly_habit_id: int, day: Any, status: Any
    ) -> WeeklyHabitRecord:
        """Upsert the weekly record; only scheduled days are accepted."""
        day = _coerce_day(day)
        status = _coerce_status(status)
        self._ensure_not_future(day)
        weekly = self._require_weekly(user_id, weekly_habit_id)
        if not scheduling.is_scheduled_on(weekly, day):
            raise ValidationError(
                ValidationErrorKind.INVALID_VALUE,
                f"Weekly habit is not scheduled on {day.isoformat()} "
                f"(days: {scheduling.describe_days(weekly.days)})",
                field="date",
            )
        return self.weekly_repo.upsert_record(weekly_habit_id, day, status, user_id=user_id)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def habit_stats(self, user_id: int, habit_id: int) -> HabitStats:
        today = self.today()
        habit = self.get_habit(user_id, habit_id)
        start = self.start_date(habit)
        records = self.habit_repo.list_records(
            habit_id, user_id=user_id, start_date=start, end_date=today
        )
        streaks = compute_failure_streaks(records, habit.id, start, today=today)
        completed = successful_days(records, habit.id, start=start, end=today)
        return HabitStats(
            habit_id=habit_id, name=habit.name, total_completions=len(completed), streaks=streaks
        )

    def month_progress(self, user_id: int, year: int, month: int) -> list[MonthlyHabitProgress]:
        """Per-habit completions in the month plus lifetime failure streaks."""
        first, last = month_bounds(year, month)
        today = self.today()
        habits = self.habit_repo.list_all(user_id=user_id)
        if not habits:
            return []

        earliest = min([self.start_date(h) for h in habits] + [first])
        records = self.habit_repo.list_records_for_user(
            user_id=user_id, start_date=earliest, end_date=max(today, last)
        )
        by_habit: dict[int, list[HabitRecord]] = {}
        for record in records:
            by_habit.setdefault(record.habit_id, []).append(record)

        progress = []
        for habit in habits:
            habit_records = by_habit.get(habit.id, [])
            in_month = successful_days(habit_records, habit.id, start=first, end=min(last, today))
            progress.append(
                MonthlyHabitProgress(
                    habit_id=habit.id,
                    name=habit.name,
                    color=habit.color,
                    year=year,
                    month=month,
                    completed_days=sorted(in_month),
                    streaks=compute_failure_streaks(
                        habit_records, habit.id, self.start_date(habit), today=today
                    ),
                )
            )
        return progress

    def weekly_month_progress(self, user_id: int, year: int, month: int) -> Optional[WeeklyProgress]:
        weekly = self.get_weekly_habit(user_id)
        if weekly is None:
            return None
        first, last = month_bounds(year, month)
        end = min(last, self.today())
        scheduled = scheduling.scheduled_days_between(weekly, first, end)
        records = self.weekly_repo.list_records(
            weekly.id, user_id=user_id, start_date=first, end_date=end
        )
        done = successful_days(records, start=first, end=end)
        return WeeklyProgress(
            weekly_habit_id=weekly.id,
            title=weekly.title,
            scheduled_days=scheduled,
            completed_days=[d for d in scheduled if d in done],
        )

    def day_overview(self, user_id: int, day: Any = None) -> DayOverview:
        """Status of every habit on ``day`` (default today)."""
        day = self.today() if day is None else _coerce_day(day)
        records = {
            r.habit_id: r.status
            for r in self.habit_repo.list_records_for_user(
                user_id=user_id, start_date=day, end_date=day
            )
        }
        overview = DayOverview(
            day=day,
            habits=[
                DayEntry(habit_id=h.id, name=h.name, status=records.get(h.id) is True)
                for h in self.habit_repo.list_all(user_id=user_id)
            ],
        )
        weekly = self.get_weekly_habit(user_id)
        if weekly is not None and scheduling.is_scheduled_on(weekly, day):
            weekly_records = self.weekly_repo.list_records(
                weekly.id, user_id=user_id, start_date=day, end_date=day
            )
            overview.weekly = DayEntry(
                habit_id=weekly.id,
                name=weekly.title,
                status=any(r.status is True for r in weekly_records),
            )
        return overview
