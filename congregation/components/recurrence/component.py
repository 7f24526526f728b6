"""
Recurrence component - Dates implied by recurring service patterns.

Invariants:
- Every generated date falls on the pattern's weekday
- Monthly dates stay inside the month they were computed for
- Calling again with an advanced last_generated_date yields only new dates
"""

from __future__ import annotations

from ._impl import compute_dates
from .models import ComputeDatesInput, ComputeDatesOutput, RecurrenceValidationError


def run_compute_dates(inp: ComputeDatesInput) -> ComputeDatesOutput:
    """
    Compute the service dates for a pattern.

    An incomplete pattern is not an error; it yields no dates. Only an
    inverted window is reported.

    Args:
        inp: Pattern and requested window.

    Returns:
        ComputeDatesOutput with the ascending dates.
    """
    if inp.window_start > inp.window_end:
        return ComputeDatesOutput(
            dates=(),
            errors=[
                RecurrenceValidationError(
                    code="invalid_window",
                    message="Start date must be before end date",
                )
            ],
            success=False,
        )

    return ComputeDatesOutput(
        dates=tuple(compute_dates(inp.pattern, inp.window_start, inp.window_end)),
    )


def run(inp: ComputeDatesInput) -> ComputeDatesOutput:
    """Main entry point for the recurrence component."""
    if isinstance(inp, ComputeDatesInput):
        return run_compute_dates(inp)
    raise ValueError(f"Unknown input type: {type(inp)}")
