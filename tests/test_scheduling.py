"""Tests for the habit limit, validation and weekday scheduling rules."""

from __future__ import annotations

from datetime import date
from types import MappingProxyType

import pytest

from humblehabit.errors import (
    AlreadyExists,
    DuplicateName,
    LimitReached,
    ValidationError,
    ValidationErrorKind,
)
from humblehabit.models import Habit, WeeklyHabit
from humblehabit.services import scheduling

SUNDAY = date(2024, 1, 7)
MONDAY = date(2024, 1, 8)
TUESDAY = date(2024, 1, 9)


class TestQuota:
    @pytest.mark.parametrize(
        "daily, weekly, expected",
        [
            (0, 0, True),
            (1, 0, True),
            (1, 1, True),
            (2, 0, False),
            (2, 1, False),
        ],
    )
    def test_can_create_daily_habit(self, daily, weekly, expected):
        assert scheduling.can_create_daily_habit(daily, weekly) is expected

    @pytest.mark.parametrize(
        "daily, weekly, expected",
        [
            (0, 0, True),
            (2, 0, True),
            (1, 1, False),
            (0, 1, False),
            (3, 0, False),
        ],
    )
    def test_can_create_weekly_habit(self, daily, weekly, expected):
        assert scheduling.can_create_weekly_habit(daily, weekly) is expected

    def test_limit_constants(self):
        assert scheduling.MAX_DAILY_HABITS == 2
        assert scheduling.MAX_TOTAL_HABITS == 3

    def test_ensure_daily_raises_limit_reached(self):
        with pytest.raises(LimitReached):
            scheduling.ensure_can_create_daily_habit(2, 0)

    def test_ensure_weekly_distinguishes_existing_from_limit(self):
        with pytest.raises(AlreadyExists):
            scheduling.ensure_can_create_weekly_habit(1, 1)
        with pytest.raises(LimitReached):
            scheduling.ensure_can_create_weekly_habit(3, 0)
        scheduling.ensure_can_create_weekly_habit(2, 0)


class TestNameValidation:
    def test_trims_name(self):
        assert scheduling.validate_habit_name("  Read  ") == "Read"

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_empty_name(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            scheduling.validate_habit_name(raw)
        assert exc_info.value.kind is ValidationErrorKind.EMPTY

    def test_name_length_boundary(self):
        assert scheduling.validate_habit_name("x" * 50) == "x" * 50
        with pytest.raises(ValidationError) as exc_info:
            scheduling.validate_habit_name("x" * 51)
        assert exc_info.value.kind is ValidationErrorKind.TOO_LONG

    def test_length_checked_after_trim(self):
        assert scheduling.validate_habit_name("  " + "x" * 50 + "  ") == "x" * 50

    def test_title_length_boundary(self):
        assert scheduling.validate_weekly_title(" " + "t" * 64) == "t" * 64
        with pytest.raises(ValidationError) as exc_info:
            scheduling.validate_weekly_title("t" * 65)
        assert exc_info.value.kind is ValidationErrorKind.TOO_LONG
        assert exc_info.value.field == "title"

    def test_non_text_name_is_invalid(self):
        with pytest.raises(ValidationError) as exc_info:
            scheduling.validate_habit_name(42)
        assert exc_info.value.kind is ValidationErrorKind.INVALID_VALUE

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            scheduling.validate_weekly_title(" ")


class TestWeekdaySet:
    def test_dedupes_and_sorts(self):
        assert scheduling.validate_weekday_set([3, 3, 1]) == (1, 3)

    def test_out_of_range(self):
        with pytest.raises(ValidationError) as exc_info:
            scheduling.validate_weekday_set([0, 8])
        assert exc_info.value.kind is ValidationErrorKind.INVALID_VALUE

    @pytest.mark.parametrize("raw", [[], None, ()])
    def test_empty(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            scheduling.validate_weekday_set(raw)
        assert exc_info.value.kind is ValidationErrorKind.EMPTY

    @pytest.mark.parametrize("bad", [True, "1", 1.0])
    def test_non_integers_rejected(self, bad):
        with pytest.raises(ValidationError) as exc_info:
            scheduling.validate_weekday_set([1, bad])
        assert exc_info.value.kind is ValidationErrorKind.INVALID_VALUE


class TestScheduledOn:
    def test_monday_and_sunday_habit(self):
        habit = WeeklyHabit(user_id=1, title="Run", days=[1, 7])

        assert scheduling.is_scheduled_on(habit, SUNDAY) is True
        assert scheduling.is_scheduled_on(habit, MONDAY) is True
        assert scheduling.is_scheduled_on(habit, TUESDAY) is False

    def test_accepts_plain_mapping(self):
        assert scheduling.is_scheduled_on({"days": [2]}, TUESDAY) is True

    def test_accepts_read_only_mapping(self):
        days = MappingProxyType({"days": [2]})

        assert scheduling.is_scheduled_on(days, TUESDAY) is True
        assert scheduling.scheduled_days_between(days, MONDAY, TUESDAY) == [TUESDAY]

    @pytest.mark.parametrize(
        "native, expected", [(0, 7), (1, 1), (2, 2), (3, 3), (4, 4), (5, 5), (6, 6)]
    )
    def test_native_sunday_zero_mapping(self, native, expected):
        assert scheduling.weekday_from_native(native) == expected

    def test_weekday_id_matches_native_mapping(self):
        for offset in range(7):
            day = date(2024, 1, 7 + offset)  # starts on a Sunday
            native = (day.weekday() + 1) % 7  # Sunday=0
            assert scheduling.weekday_id(day) == scheduling.weekday_from_native(native)

    def test_scheduled_days_between(self):
        habit = WeeklyHabit(user_id=1, title="Run", days=[1, 7])

        days = scheduling.scheduled_days_between(habit, date(2024, 1, 1), date(2024, 1, 14))

        assert days == [date(2024, 1, 1), date(2024, 1, 7), date(2024, 1, 8), date(2024, 1, 14)]

    def test_describe_days(self):
        assert scheduling.describe_days([7, 1, 3]) == "Mon, Wed, Sun"


class TestDuplicateNames:
    def test_case_insensitive_match(self):
        assert scheduling.names_match(" Read", "read ")
        assert not scheduling.names_match("Read", "Reading")

    def test_rename_to_other_habit_name_is_duplicate(self):
        habits = [Habit(id=1, user_id=1, name="Read"), Habit(id=2, user_id=1, name="Walk")]

        with pytest.raises(DuplicateName):
            scheduling.ensure_unique_name("read", habits, exclude_id=2)

    def test_own_name_is_excluded(self):
        habits = [Habit(id=1, user_id=1, name="Read"), Habit(id=2, user_id=1, name="Walk")]

        scheduling.ensure_unique_name("READ", habits, exclude_id=1)

    def test_find_duplicate_over_plain_names(self):
        assert scheduling.find_duplicate_name("walk", ["Read", "Walk"]) == "Walk"
        assert scheduling.find_duplicate_name("swim", ["Read", "Walk"]) is None
