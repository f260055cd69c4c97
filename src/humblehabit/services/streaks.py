"""Failure-streak statistics computed from sparse completion records.

A habit's history is evaluated over its canonical day sequence: every calendar
day from the habit's start date through "today", inclusive. A day counts as a
failure unless a record for exactly that day has ``status`` strictly ``True``;
days without any record are failures too. Records outside the sequence
(before the start, after today, or with an unreadable date) are ignored.

Everything here is pure. "Today" is always supplied by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Mapping, Optional, Union

DayLike = Union[date, datetime, str]

_DATE_FIELDS = ("date", "occurred_on")


@dataclass(frozen=True, slots=True)
class FailureStreaks:
    """Current and longest runs of failed days for one habit."""

    current_failure_streak: int = 0
    longest_failure_streak: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "currentFailureStreak": self.current_failure_streak,
            "longestFailureStreak": self.longest_failure_streak,
        }


def parse_day(value: Any) -> Optional[date]:
    """Normalise a date, datetime or ``YYYY-MM-DD`` string to a ``date``.

    Returns ``None`` for anything that cannot be read as a calendar day.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def canonical_days(start: date, today: date) -> list[date]:
    """Return every day from ``start`` through ``today`` in ascending order."""

    days: list[date] = []
    cursor = start
    while cursor <= today:
        days.append(cursor)
        cursor += timedelta(days=1)
    return days


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _record_day(record: Any) -> Optional[date]:
    for name in _DATE_FIELDS:
        value = _field(record, name)
        if value is not None:
            return parse_day(value)
    return None


def _belongs_to(record: Any, habit_id: Any) -> bool:
    if habit_id is None:
        return True
    record_habit = _field(record, "habit_id")
    if record_habit is None:
        return True
    return str(record_habit) == str(habit_id)


def successful_days(
    records: Iterable[Any],
    habit_id: Any = None,
    *,
    start: date,
    end: date,
) -> set[date]:
    """Days in ``[start, end]`` that have at least one strictly-true record.

    Records may be mappings or objects exposing ``date`` (or ``occurred_on``)
    and ``status``. When ``habit_id`` is given, records tagged with a
    different habit are skipped.
    """

    days: set[date] = set()
    for record in records:
        if not _belongs_to(record, habit_id):
            continue
        day = _record_day(record)
        if day is None or day < start or day > end:
            continue
        if _field(record, "status") is True:
            days.add(day)
    return days


def compute_failure_streaks(
    records: Iterable[Any],
    habit_id: Any = None,
    habit_start_date: Optional[DayLike] = None,
    *,
    today: DayLike,
) -> FailureStreaks:
    """Compute current and longest failure streaks for one habit.

    Args:
        records: Completion records, in any order, possibly sparse.
        habit_id: Habit whose records count; ``None`` accepts every record.
        habit_start_date: First tracked day. Defaults to ``today`` when unknown.
        today: The last day of the window. Must be readable as a date.

    Returns:
        FailureStreaks for the window; both values are 0 for an empty window.
    """

    end = parse_day(today)
    if end is None:
        raise TypeError(f"today must be a date or ISO date string, got {today!r}")
    start = parse_day(habit_start_date) or end

    days = canonical_days(start, end)
    if not days:
        return FailureStreaks()

    successes = successful_days(records, habit_id, start=start, end=end)

    longest = 0
    run = 0
    for day in days:
        if day in successes:
            run = 0
            continue
        run += 1
        longest = max(longest, run)

    # The run still open after the last day is the one ending today.
    return FailureStreaks(current_failure_streak=run, longest_failure_streak=longest)


__all__ = [
    "DayLike",
    "FailureStreaks",
    "canonical_days",
    "compute_failure_streaks",
    "parse_day",
    "successful_days",
]
