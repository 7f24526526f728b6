"""
Service generation component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID

# --- Configuration ---


@dataclass(frozen=True)
class GenerationConfig:
    """Generation windows from rules."""

    default_window_days: int = 90
    cron_horizon_days: int = 30
    max_window_days: int = 366


DEFAULT_CONFIG = GenerationConfig()


# --- Error ---


@dataclass(frozen=True)
class GenerationError:
    """Service generation error."""

    code: str
    message: str
    pattern_id: UUID | None = None


# --- Entities ---


@dataclass(frozen=True)
class ServiceTemplate:
    """Template a service is materialized from."""

    id: UUID
    name: str
    default_time: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class Service:
    """A concrete service on a calendar date."""

    id: UUID
    date: str
    name: str
    time: str | None = None


# --- Intermediate Results ---


@dataclass(frozen=True)
class DateCheckResult:
    """Candidate dates partitioned against existing services."""

    to_create: tuple[str, ...]
    skipped: tuple[Service, ...]


@dataclass(frozen=True)
class MaterializeResult:
    """Outcome of inserting services for confirmed-absent dates."""

    created_ids: tuple[UUID, ...]
    collisions: tuple[str, ...] = ()


# --- Input Models ---


@dataclass(frozen=True)
class GenerateServicesInput:
    """Input for generating services from a template (and optional pattern)."""

    template_id: UUID
    pattern_id: UUID | None = None
    start_date: date | None = None
    end_date: date | None = None


@dataclass(frozen=True)
class GenerateDueInput:
    """Input for generating services from every due active pattern."""

    horizon_days: int | None = None


# --- Output Models ---


@dataclass(frozen=True)
class GenerateServicesOutput:
    """Output for generate operation."""

    services: list[Service] = field(default_factory=list)
    skipped: list[Service] = field(default_factory=list)
    message: str = ""
    errors: list[GenerationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class PatternRunResult:
    """Per-pattern outcome of a due-pattern run."""

    pattern_id: UUID
    pattern_name: str
    generated: int
    error: str | None = None


@dataclass(frozen=True)
class GenerateDueOutput:
    """Output for generate due patterns operation."""

    results: tuple[PatternRunResult, ...] = ()
    total_generated: int = 0
    message: str = ""
    errors: list[GenerationError] = field(default_factory=list)
    success: bool = True
