"""
Service generation component port definitions.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import date
from typing import Protocol
from uuid import UUID

from congregation.components.recurrence import RecurrencePattern

from .models import Service, ServiceTemplate


class ServiceRepoPort(Protocol):
    """Repository interface for services."""

    def list_by_dates(self, dates: list[str]) -> list[Service]:
        """List services whose date is in the given set."""
        ...

    def list_by_ids(self, service_ids: list[UUID]) -> list[Service]:
        """List services by ID."""
        ...

    def create(self, service_date: str, name: str, time: str | None) -> Service | None:
        """Insert a service. Returns None if the date is already taken."""
        ...


class PatternRepoPort(Protocol):
    """Repository interface for recurring patterns."""

    def get_by_id(self, pattern_id: UUID) -> RecurrencePattern | None:
        """Get pattern by ID."""
        ...

    def list_due(self, today: date) -> list[RecurrencePattern]:
        """List active patterns whose watermark is unset or before today."""
        ...

    def update_watermark(self, pattern_id: UUID, last_generated_date: date) -> None:
        """Persist the last generated date."""
        ...


class TemplateRepoPort(Protocol):
    """Repository interface for service templates."""

    def get_by_id(self, template_id: UUID) -> ServiceTemplate | None:
        """Get template by ID."""
        ...


class ClockPort(Protocol):
    """Clock used for default windows."""

    def today(self) -> date:
        """Current local date."""
        ...


class LockPort(Protocol):
    """Advisory locks serializing check-then-act sequences."""

    def hold(self, key: str) -> AbstractContextManager[None]:
        """Hold the lock for key for the duration of the with block."""
        ...
