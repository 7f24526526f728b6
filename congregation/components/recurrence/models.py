"""
Recurrence component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Literal
from uuid import UUID

# --- Pattern Type ---


PatternType = Literal["weekly", "bi_weekly", "monthly", "custom"]

PATTERN_TYPES: tuple[str, ...] = ("weekly", "bi_weekly", "monthly", "custom")


# --- Pattern Model ---


@dataclass(frozen=True)
class RecurrencePattern:
    """
    Recurring service pattern.

    day_of_week follows the 0 = Sunday convention used by the admin UI.
    Which of day_of_week / week_of_month / interval_weeks are needed
    depends on pattern_type.
    """

    pattern_type: PatternType
    start_date: date
    day_of_week: int | None = None
    week_of_month: int | None = None
    interval_weeks: int | None = None
    end_date: date | None = None
    last_generated_date: date | None = None
    id: UUID | None = None
    template_id: UUID | None = None
    is_active: bool = True


# --- Validation Error ---


@dataclass(frozen=True)
class RecurrenceValidationError:
    """Recurrence validation error."""

    code: str
    message: str


# --- Input / Output Models ---


@dataclass(frozen=True)
class ComputeDatesInput:
    """Input for computing the dates a pattern implies within a window."""

    pattern: RecurrencePattern
    window_start: date
    window_end: date


@dataclass(frozen=True)
class ComputeDatesOutput:
    """Output for compute dates operation."""

    dates: tuple[date, ...]
    errors: list[RecurrenceValidationError] = field(default_factory=list)
    success: bool = True

    @property
    def date_strings(self) -> list[str]:
        return [d.isoformat() for d in self.dates]
