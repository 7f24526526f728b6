"""
Recurrence component unit tests.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from congregation.components.recurrence import (
    ComputeDatesInput,
    RecurrencePattern,
    compute_dates,
    effective_window,
    has_required_fields,
    js_weekday,
    nth_weekday_of_month,
    run_compute_dates,
)

JAN_1 = date(2024, 1, 1)


def weekly(day: int = 0, **kwargs: object) -> RecurrencePattern:
    return RecurrencePattern(pattern_type="weekly", start_date=JAN_1, day_of_week=day, **kwargs)


# --- Weekday convention ---


class TestJsWeekday:
    def test_sunday_is_zero(self) -> None:
        assert js_weekday(date(2024, 1, 7)) == 0

    def test_saturday_is_six(self) -> None:
        assert js_weekday(date(2024, 1, 6)) == 6

    def test_monday_is_one(self) -> None:
        assert js_weekday(JAN_1) == 1


# --- Weekly / bi-weekly / custom ---


class TestSteppedPatterns:
    def test_weekly_sundays_in_january(self) -> None:
        pattern = weekly(end_date=date(2024, 1, 31))
        result = run_compute_dates(ComputeDatesInput(pattern, JAN_1, date(2024, 1, 31)))

        assert result.success
        assert result.date_strings == ["2024-01-07", "2024-01-14", "2024-01-21", "2024-01-28"]

    def test_bi_weekly_steps_fourteen_days(self) -> None:
        pattern = RecurrencePattern(pattern_type="bi_weekly", start_date=JAN_1, day_of_week=0)
        dates = compute_dates(pattern, JAN_1, date(2024, 2, 29))

        assert dates == [date(2024, 1, 7), date(2024, 1, 21), date(2024, 2, 4), date(2024, 2, 18)]

    def test_custom_interval_weeks(self) -> None:
        pattern = RecurrencePattern(
            pattern_type="custom", start_date=JAN_1, day_of_week=0, interval_weeks=3
        )
        dates = compute_dates(pattern, JAN_1, date(2024, 3, 31))

        assert dates == [
            date(2024, 1, 7),
            date(2024, 1, 28),
            date(2024, 2, 18),
            date(2024, 3, 10),
            date(2024, 3, 31),
        ]

    @pytest.mark.parametrize("day", range(7))
    def test_every_date_on_pattern_weekday(self, day: int) -> None:
        dates = compute_dates(weekly(day), JAN_1, date(2024, 6, 30))

        assert dates
        assert all(js_weekday(d) == day for d in dates)

    def test_dates_ascending_without_duplicates(self) -> None:
        dates = compute_dates(weekly(3), JAN_1, date(2024, 12, 31))

        assert dates == sorted(set(dates))
        assert all(b - a == timedelta(days=7) for a, b in zip(dates, dates[1:]))

    def test_window_start_on_weekday_is_inclusive(self) -> None:
        dates = compute_dates(weekly(0), date(2024, 1, 7), date(2024, 1, 14))

        assert dates == [date(2024, 1, 7), date(2024, 1, 14)]


# --- Monthly ---


class TestMonthlyPattern:
    def test_second_sunday_of_february(self) -> None:
        pattern = RecurrencePattern(
            pattern_type="monthly", start_date=JAN_1, day_of_week=0, week_of_month=2
        )
        dates = compute_dates(pattern, date(2024, 2, 1), date(2024, 2, 29))

        assert dates == [date(2024, 2, 11)]

    def test_fifth_occurrence_skips_short_months(self) -> None:
        pattern = RecurrencePattern(
            pattern_type="monthly", start_date=JAN_1, day_of_week=0, week_of_month=5
        )
        dates = compute_dates(pattern, JAN_1, date(2024, 3, 31))

        assert dates == [date(2024, 3, 31)]

    def test_dates_stay_in_their_month(self) -> None:
        pattern = RecurrencePattern(
            pattern_type="monthly", start_date=JAN_1, day_of_week=6, week_of_month=5
        )
        dates = compute_dates(pattern, JAN_1, date(2024, 12, 31))

        assert dates
        for d in dates:
            assert nth_weekday_of_month(d.year, d.month, 6, 5) == d
            assert (d + timedelta(days=7)).month != d.month

    def test_window_starting_after_occurrence_mid_month(self) -> None:
        pattern = RecurrencePattern(
            pattern_type="monthly", start_date=JAN_1, day_of_week=0, week_of_month=2
        )
        dates = compute_dates(pattern, date(2024, 2, 12), date(2024, 3, 31))

        assert dates == [date(2024, 3, 10)]

    def test_window_starting_on_occurrence_is_inclusive(self) -> None:
        pattern = RecurrencePattern(
            pattern_type="monthly", start_date=JAN_1, day_of_week=0, week_of_month=2
        )
        dates = compute_dates(pattern, date(2024, 2, 11), date(2024, 3, 31))

        assert dates == [date(2024, 2, 11), date(2024, 3, 10)]

    def test_window_ending_before_occurrence_mid_month(self) -> None:
        pattern = RecurrencePattern(
            pattern_type="monthly", start_date=JAN_1, day_of_week=0, week_of_month=2
        )
        dates = compute_dates(pattern, JAN_1, date(2024, 2, 10))

        assert dates == [date(2024, 1, 14)]

    def test_crosses_year_boundary(self) -> None:
        pattern = RecurrencePattern(
            pattern_type="monthly", start_date=JAN_1, day_of_week=1, week_of_month=1
        )
        dates = compute_dates(pattern, date(2024, 12, 1), date(2025, 1, 31))

        assert dates == [date(2024, 12, 2), date(2025, 1, 6)]


# --- Bounds and watermark ---


class TestWindowBounds:
    def test_pattern_end_date_clips_window(self) -> None:
        dates = compute_dates(weekly(end_date=date(2024, 1, 20)), JAN_1, date(2024, 3, 31))

        assert dates == [date(2024, 1, 7), date(2024, 1, 14)]

    def test_pattern_start_date_clips_window(self) -> None:
        pattern = RecurrencePattern(
            pattern_type="weekly", start_date=date(2024, 1, 15), day_of_week=0
        )
        dates = compute_dates(pattern, JAN_1, date(2024, 1, 31))

        assert dates == [date(2024, 1, 21), date(2024, 1, 28)]

    def test_watermark_is_exclusive(self) -> None:
        pattern = weekly(last_generated_date=date(2024, 1, 14))
        dates = compute_dates(pattern, JAN_1, date(2024, 1, 31))

        assert dates == [date(2024, 1, 21), date(2024, 1, 28)]

    def test_resuming_from_watermark_yields_only_new_dates(self) -> None:
        end = date(2024, 3, 31)
        full = compute_dates(weekly(), JAN_1, end)

        first = compute_dates(weekly(), JAN_1, date(2024, 2, 15))
        resumed = compute_dates(weekly(last_generated_date=first[-1]), JAN_1, end)

        assert not set(first) & set(resumed)
        assert first + resumed == full

    def test_effective_window(self) -> None:
        pattern = weekly(end_date=date(2024, 2, 1), last_generated_date=date(2024, 1, 9))

        assert effective_window(pattern, JAN_1, date(2024, 3, 1)) == (
            date(2024, 1, 10),
            date(2024, 2, 1),
        )

    def test_empty_when_bounds_cross(self) -> None:
        dates = compute_dates(weekly(end_date=date(2023, 12, 31)), JAN_1, date(2024, 1, 31))

        assert dates == []

    def test_watermark_at_window_end_leaves_nothing(self) -> None:
        pattern = weekly(last_generated_date=date(2024, 3, 31))

        assert effective_window(pattern, JAN_1, date(2024, 3, 31)) is None
        assert compute_dates(pattern, JAN_1, date(2024, 3, 31)) == []


# --- Calendar limits ---


class TestCalendarLimits:
    @pytest.mark.parametrize(("step", "days"), [("weekly", 7), ("bi_weekly", 14)])
    def test_stepping_stops_at_last_representable_date(self, step: str, days: int) -> None:
        pattern = RecurrencePattern(pattern_type=step, start_date=JAN_1, day_of_week=0)

        dates = compute_dates(pattern, date(9999, 12, 1), date.max)

        assert dates
        assert all(js_weekday(d) == 0 for d in dates)
        assert date.max - dates[-1] < timedelta(days=days)

    def test_weekday_after_last_date_is_empty(self) -> None:
        # 9999-12-31 is a Friday
        pattern = weekly(day=6)

        assert compute_dates(pattern, date(9999, 12, 31), date.max) == []

    def test_watermark_at_last_date(self) -> None:
        pattern = weekly(last_generated_date=date.max)

        assert compute_dates(pattern, date(9999, 12, 1), date.max) == []

    def test_monthly_in_last_month(self) -> None:
        pattern = RecurrencePattern(
            pattern_type="monthly", start_date=JAN_1, day_of_week=5, week_of_month=5
        )

        assert compute_dates(pattern, date(9999, 12, 1), date.max) == [date(9999, 12, 31)]


# --- Incomplete patterns ---


class TestIncompletePatterns:
    @pytest.mark.parametrize(
        "pattern",
        [
            RecurrencePattern(pattern_type="weekly", start_date=JAN_1),
            RecurrencePattern(pattern_type="weekly", start_date=JAN_1, day_of_week=7),
            RecurrencePattern(pattern_type="monthly", start_date=JAN_1, day_of_week=0),
            RecurrencePattern(pattern_type="custom", start_date=JAN_1, day_of_week=0),
            RecurrencePattern(
                pattern_type="custom", start_date=JAN_1, day_of_week=0, interval_weeks=0
            ),
        ],
    )
    def test_missing_fields_yield_no_dates(self, pattern: RecurrencePattern) -> None:
        assert not has_required_fields(pattern)

        result = run_compute_dates(ComputeDatesInput(pattern, JAN_1, date(2024, 12, 31)))

        assert result.success
        assert result.dates == ()


# --- Entry point errors ---


class TestRunComputeDates:
    def test_inverted_window_is_error(self) -> None:
        result = run_compute_dates(ComputeDatesInput(weekly(), date(2024, 2, 1), JAN_1))

        assert not result.success
        assert result.errors[0].code == "invalid_window"
