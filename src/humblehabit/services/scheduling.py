"""Habit admission rules and weekly scheduling helpers.

These functions only express decisions. Persisting a habit under the quota
is the record store's job (see ``create_with_limit`` on the repositories),
which re-checks the same constants atomically.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..errors import (
    AlreadyExists,
    DuplicateName,
    LimitReached,
    ValidationError,
    ValidationErrorKind,
)
from ..models.habit import HABIT_NAME_MAX_LENGTH, habit_name_key
from ..models.weekly_habit import WEEKLY_TITLE_MAX_LENGTH

MAX_DAILY_HABITS = 2
MAX_WEEKLY_HABITS = 1
MAX_TOTAL_HABITS = 3

MONDAY = 1
SUNDAY = 7
WEEKDAY_IDS = tuple(range(MONDAY, SUNDAY + 1))
WEEKDAY_NAMES = {1: "Mon", 2: "Tue", 3: "Wed", 4: "Thu", 5: "Fri", 6: "Sat", 7: "Sun"}


# ---------------------------------------------------------------------------
# Quota
# ---------------------------------------------------------------------------


def can_create_daily_habit(existing_daily_count: int, existing_weekly_count: int) -> bool:
    return (
        existing_daily_count < MAX_DAILY_HABITS
        and existing_daily_count + existing_weekly_count < MAX_TOTAL_HABITS
    )


def can_create_weekly_habit(existing_daily_count: int, existing_weekly_count: int) -> bool:
    return (
        existing_weekly_count < MAX_WEEKLY_HABITS
        and existing_daily_count + existing_weekly_count < MAX_TOTAL_HABITS
    )


def ensure_can_create_daily_habit(existing_daily_count: int, existing_weekly_count: int) -> None:
    """Raise ``LimitReached`` when another daily habit would break the quota."""

    if not can_create_daily_habit(existing_daily_count, existing_weekly_count):
        raise LimitReached(
            f"Maximum {MAX_DAILY_HABITS} daily habits ({MAX_TOTAL_HABITS} habits in total) allowed."
        )


def ensure_can_create_weekly_habit(existing_daily_count: int, existing_weekly_count: int) -> None:
    """Raise ``AlreadyExists`` or ``LimitReached`` when a weekly habit is not allowed."""

    if existing_weekly_count >= MAX_WEEKLY_HABITS:
        raise AlreadyExists("User already has a weekly habit")
    if not can_create_weekly_habit(existing_daily_count, existing_weekly_count):
        raise LimitReached(f"Maximum {MAX_TOTAL_HABITS} habits in total allowed.")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _validate_text(raw: Any, *, field: str, label: str, max_length: int) -> str:
    if raw is None:
        raise ValidationError(ValidationErrorKind.EMPTY, f"{label} is required", field=field)
    if not isinstance(raw, str):
        raise ValidationError(
            ValidationErrorKind.INVALID_VALUE, f"{label} must be text", field=field
        )
    value = raw.strip()
    if not value:
        raise ValidationError(ValidationErrorKind.EMPTY, f"{label} cannot be empty", field=field)
    if len(value) > max_length:
        raise ValidationError(
            ValidationErrorKind.TOO_LONG,
            f"{label} too long (max {max_length} characters)",
            field=field,
        )
    return value


def validate_habit_name(raw: Any) -> str:
    """Return the trimmed habit name or raise ``ValidationError``."""

    return _validate_text(raw, field="name", label="Habit name", max_length=HABIT_NAME_MAX_LENGTH)


def validate_weekly_title(raw: Any) -> str:
    """Return the trimmed weekly habit title or raise ``ValidationError``."""

    return _validate_text(raw, field="title", label="Title", max_length=WEEKLY_TITLE_MAX_LENGTH)


def validate_weekday_set(raw: Optional[Iterable[Any]]) -> tuple[int, ...]:
    """Deduplicate and sort WeekdayIds.

    Raises ``ValidationError`` (EMPTY) for an empty selection and
    (INVALID_VALUE) when any entry is not an integer in 1..7.
    """

    values = list(raw or [])
    if not values:
        raise ValidationError(
            ValidationErrorKind.EMPTY, "At least one day must be selected", field="days"
        )
    for value in values:
        # bool is an int subclass but never a weekday
        if isinstance(value, bool) or not isinstance(value, int) or value not in WEEKDAY_IDS:
            raise ValidationError(
                ValidationErrorKind.INVALID_VALUE,
                f"Invalid weekday {value!r}; expected 1 (Mon) to 7 (Sun)",
                field="days",
            )
    return tuple(sorted(set(values)))


# ---------------------------------------------------------------------------
# Weekday scheduling
# ---------------------------------------------------------------------------


def weekday_from_native(native_day: int) -> int:
    """Map a Sunday=0 .. Saturday=6 day number to a WeekdayId (Monday=1 .. Sunday=7)."""

    return ((native_day + 6) % 7) + 1


def weekday_id(day: date) -> int:
    """Return the WeekdayId of ``day``."""

    return day.isoweekday()


def _scheduled_days(weekly_habit: Any) -> Sequence[int]:
    if isinstance(weekly_habit, Mapping):
        return weekly_habit.get("days") or ()
    return getattr(weekly_habit, "days", None) or ()


def is_scheduled_on(weekly_habit: Any, day: date) -> bool:
    """True when the weekly habit is due on ``day``."""

    return weekday_id(day) in set(_scheduled_days(weekly_habit))


def scheduled_days_between(weekly_habit: Any, start: date, end: date) -> list[date]:
    """Due dates of the weekly habit within ``[start, end]``."""

    due = set(_scheduled_days(weekly_habit))
    days = []
    cursor = start
    while cursor <= end:
        if weekday_id(cursor) in due:
            days.append(cursor)
        cursor += timedelta(days=1)
    return days


def describe_days(days: Iterable[int]) -> str:
    return ", ".join(WEEKDAY_NAMES[d] for d in sorted(set(days)) if d in WEEKDAY_NAMES)


# ---------------------------------------------------------------------------
# Duplicate names
# ---------------------------------------------------------------------------


def names_match(left: str, right: str) -> bool:
    """Trim both sides and compare case-insensitively."""

    return habit_name_key(left) == habit_name_key(right)


def _label_of(item: Any) -> Optional[str]:
    if isinstance(item, str):
        return item
    for attr in ("name", "title"):
        value = getattr(item, attr, None)
        if isinstance(value, str):
            return value
    return None


def find_duplicate_name(
    candidate: str,
    existing: Iterable[Any],
    *,
    exclude_id: Any = None,
) -> Optional[Any]:
    """Return the first item in ``existing`` whose name matches ``candidate``.

    ``existing`` holds the owner's other habits (objects with ``id`` and
    ``name``/``title``) or plain names. The item whose id equals
    ``exclude_id`` is skipped so a rename can keep its own name.
    """

    for item in existing:
        if exclude_id is not None and getattr(item, "id", None) == exclude_id:
            continue
        label = _label_of(item)
        if label is not None and names_match(candidate, label):
            return item
    return None


def ensure_unique_name(candidate: str, existing: Iterable[Any], *, exclude_id: Any = None) -> None:
    if find_duplicate_name(candidate, existing, exclude_id=exclude_id) is not None:
        raise DuplicateName("A habit with this name already exists")


__all__ = [
    "MAX_DAILY_HABITS",
    "MAX_TOTAL_HABITS",
    "MAX_WEEKLY_HABITS",
    "WEEKDAY_IDS",
    "can_create_daily_habit",
    "can_create_weekly_habit",
    "describe_days",
    "ensure_can_create_daily_habit",
    "ensure_can_create_weekly_habit",
    "ensure_unique_name",
    "find_duplicate_name",
    "is_scheduled_on",
    "names_match",
    "scheduled_days_between",
    "validate_habit_name",
    "validate_weekday_set",
    "validate_weekly_title",
    "weekday_from_native",
    "weekday_id",
]
