"""
Recurrence component - Dates implied by recurring service patterns.
"""

from ._impl import (
    compute_dates,
    effective_window,
    first_on_or_after,
    format_service_date,
    has_required_fields,
    js_weekday,
    nth_weekday_of_month,
)
from .component import run, run_compute_dates
from .models import (
    PATTERN_TYPES,
    ComputeDatesInput,
    ComputeDatesOutput,
    PatternType,
    RecurrencePattern,
    RecurrenceValidationError,
)

__all__ = [
    # Entry points
    "run",
    "run_compute_dates",
    # Functional core
    "compute_dates",
    "effective_window",
    "first_on_or_after",
    "format_service_date",
    "has_required_fields",
    "js_weekday",
    "nth_weekday_of_month",
    # Models
    "ComputeDatesInput",
    "ComputeDatesOutput",
    "PATTERN_TYPES",
    "PatternType",
    "RecurrencePattern",
    "RecurrenceValidationError",
]
