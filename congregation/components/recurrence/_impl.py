"""
RecurrenceEngine - Calendar dates implied by a recurring service pattern.

Functional Core - pure date arithmetic, no I/O.

Key behaviors:
- Window is clipped to the pattern's own start/end bounds
- last_generated_date is an exclusive watermark, so repeated calls resume
- A pattern missing a field its type needs yields no dates (not an error)
- Output is strictly ascending with no duplicates
"""

from __future__ import annotations

from calendar import monthrange
from collections.abc import Iterator
from datetime import date, timedelta

from .models import RecurrencePattern

DAYS_PER_WEEK = 7


def js_weekday(d: date) -> int:
    """Weekday with Sunday = 0 .. Saturday = 6."""
    return (d.weekday() + 1) % DAYS_PER_WEEK


def format_service_date(d: date) -> str:
    """Render a generated date the way services store it (YYYY-MM-DD)."""
    return d.isoformat()


def _valid_day(day_of_week: int | None) -> bool:
    return day_of_week is not None and 0 <= day_of_week <= 6


def has_required_fields(pattern: RecurrencePattern) -> bool:
    """Check the pattern carries every field its type needs."""
    if not _valid_day(pattern.day_of_week):
        return False
    if pattern.pattern_type == "monthly":
        return pattern.week_of_month is not None
    if pattern.pattern_type == "custom":
        return pattern.interval_weeks is not None and pattern.interval_weeks >= 1
    return pattern.pattern_type in ("weekly", "bi_weekly")


def effective_window(
    pattern: RecurrencePattern,
    window_start: date,
    window_end: date,
) -> tuple[date, date] | None:
    """
    Clip the requested window to the pattern bounds and watermark.

    Returns None when nothing is left to generate.
    """
    end = window_end
    if pattern.end_date is not None and pattern.end_date < end:
        end = pattern.end_date

    start = max(pattern.start_date, window_start)
    watermark = pattern.last_generated_date
    if watermark is not None and watermark >= start:
        if watermark >= end:
            return None
        start = watermark + timedelta(days=1)

    if start > end:
        return None
    return start, end


def first_on_or_after(start: date, day_of_week: int) -> date:
    """First date >= start falling on day_of_week (0 = Sunday)."""
    offset = (day_of_week - js_weekday(start)) % DAYS_PER_WEEK
    return start + timedelta(days=offset)


def nth_weekday_of_month(year: int, month: int, day_of_week: int, week: int) -> date | None:
    """
    The week-th occurrence of day_of_week in the given month.

    None when the month has no such occurrence (e.g. a 5th Sunday).
    """
    first = first_on_or_after(date(year, month, 1), day_of_week)
    day = first.day + (week - 1) * DAYS_PER_WEEK
    if not 1 <= day <= monthrange(year, month)[1]:
        return None
    return first.replace(day=day)


def _stepped(start: date, end: date, day_of_week: int, step_days: int) -> Iterator[date]:
    offset = (day_of_week - js_weekday(start)) % DAYS_PER_WEEK
    if (end - start).days < offset:
        return
    current = start + timedelta(days=offset)
    step = timedelta(days=step_days)
    while True:
        yield current
        # stop before stepping past end, which may be date.max
        if end - current < step:
            return
        current += step


def _months(start: date, end: date) -> Iterator[tuple[int, int]]:
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        yield year, month
        month += 1
        if month > 12:
            year, month = year + 1, 1


def _monthly(start: date, end: date, day_of_week: int, week: int) -> Iterator[date]:
    for year, month in _months(start, end):
        candidate = nth_weekday_of_month(year, month, day_of_week, week)
        if candidate is not None and start <= candidate <= end:
            yield candidate


def compute_dates(
    pattern: RecurrencePattern,
    window_start: date,
    window_end: date,
) -> list[date]:
    """
    Compute the ordered service dates a pattern implies within a window.

    Args:
        pattern: Recurring pattern configuration.
        window_start: First date the caller is interested in.
        window_end: Last date the caller is interested in (inclusive).

    Returns:
        Ascending list of dates; empty for incomplete patterns.
    """
    if not has_required_fields(pattern):
        return []

    window = effective_window(pattern, window_start, window_end)
    if window is None:
        return []
    start, end = window

    day = pattern.day_of_week
    assert day is not None  # checked by has_required_fields

    if pattern.pattern_type == "weekly":
        return list(_stepped(start, end, day, DAYS_PER_WEEK))
    if pattern.pattern_type == "bi_weekly":
        return list(_stepped(start, end, day, 2 * DAYS_PER_WEEK))
    if pattern.pattern_type == "monthly":
        assert pattern.week_of_month is not None
        return list(_monthly(start, end, day, pattern.week_of_month))

    assert pattern.interval_weeks is not None
    return list(_stepped(start, end, day, pattern.interval_weeks * DAYS_PER_WEEK))
