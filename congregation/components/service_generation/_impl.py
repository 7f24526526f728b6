"""
GenerationService - Materialize services from templates and recurring patterns.

Handles duplicate detection against existing services, insertion of new
services, and advancing pattern watermarks.

Key behaviors:
- Candidate dates are matched against existing services by exact date string
- Materialization only inserts dates already confirmed absent
- A UNIQUE date collision during insert is a soft skip, not a failure
- Check and insert run under a lock keyed by template
- The pattern watermark only moves after services were written
"""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass, field
from datetime import date, timedelta
from uuid import UUID

from congregation.components.recurrence import (
    RecurrencePattern,
    compute_dates,
    format_service_date,
)

from .models import (
    DEFAULT_CONFIG,
    DateCheckResult,
    GenerationConfig,
    GenerationError,
    MaterializeResult,
    PatternRunResult,
    Service,
    ServiceTemplate,
)
from .ports import ClockPort, LockPort, PatternRepoPort, ServiceRepoPort, TemplateRepoPort

logger = logging.getLogger(__name__)


# --- Report ---


@dataclass
class GenerationReport:
    """What a generation run created and skipped."""

    services: list[Service] = field(default_factory=list)
    skipped: list[Service] = field(default_factory=list)
    message: str = ""


# --- Duplicate Detection ---


def check_for_existing_services(
    dates: list[str],
    services: ServiceRepoPort,
) -> DateCheckResult:
    """
    Partition candidate dates into those needing a service and those taken.

    Args:
        dates: Candidate dates (YYYY-MM-DD).
        services: Service repository.

    Returns:
        DateCheckResult with dates to create and the existing services.
    """
    if not dates:
        return DateCheckResult(to_create=(), skipped=())

    existing = {s.date: s for s in services.list_by_dates(list(dates))}
    to_create = tuple(d for d in dates if d not in existing)
    skipped = tuple(existing[d] for d in dict.fromkeys(dates) if d in existing)
    return DateCheckResult(to_create=to_create, skipped=skipped)


# --- Materialization ---


def generate_services_from_template(
    template: ServiceTemplate,
    dates: list[str] | tuple[str, ...],
    services: ServiceRepoPort,
) -> MaterializeResult:
    """
    Create one service per date from the template.

    Performs no re-check; callers pass dates from check_for_existing_services
    while holding the template lock.
    """
    created: list[UUID] = []
    collisions: list[str] = []

    for service_date in dates:
        service = services.create(service_date, template.name, template.default_time)
        if service is None:
            logger.info("Service already exists on %s, skipping", service_date)
            collisions.append(service_date)
            continue
        created.append(service.id)

    return MaterializeResult(created_ids=tuple(created), collisions=tuple(collisions))


def daily_dates(start: date, end: date) -> list[date]:
    """Every calendar day from start to end inclusive."""
    days = (end - start).days
    return [start + timedelta(days=offset) for offset in range(days + 1)]


# --- Generation Service ---


class GenerationService:
    """
    Service generation (rota).

    Turns templates and recurring patterns into concrete services.
    """

    def __init__(
        self,
        services: ServiceRepoPort,
        patterns: PatternRepoPort,
        templates: TemplateRepoPort,
        clock: ClockPort | None = None,
        locks: LockPort | None = None,
        config: GenerationConfig = DEFAULT_CONFIG,
    ) -> None:
        self._services = services
        self._patterns = patterns
        self._templates = templates
        self._clock = clock
        self._locks = locks
        self._config = config

    def _today(self) -> date:
        if self._clock is not None:
            return self._clock.today()
        return date.today()

    def _hold(self, key: str) -> AbstractContextManager[None]:
        if self._locks is None:
            return nullcontext()
        return self._locks.hold(key)

    def _materialize(
        self,
        template: ServiceTemplate,
        dates: list[str],
    ) -> GenerationReport:
        """Check then insert under the template lock."""
        with self._hold(f"services:template:{template.id}"):
            check = check_for_existing_services(dates, self._services)
            skipped = list(check.skipped)

            if not check.to_create:
                return GenerationReport(
                    skipped=skipped,
                    message="All dates already have services",
                )

            result = generate_services_from_template(template, check.to_create, self._services)

        created = self._services.list_by_ids(list(result.created_ids))
        if result.collisions:
            skipped.extend(self._services.list_by_dates(list(result.collisions)))

        return GenerationReport(
            services=created,
            skipped=skipped,
            message=f"Generated {len(result.created_ids)} service(s)",
        )

    def generate(
        self,
        template_id: UUID,
        pattern_id: UUID | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> tuple[GenerationReport | None, list[GenerationError]]:
        """
        Generate services for a template over a window.

        With a pattern, dates come from the pattern; without one every day
        in the window is a candidate.

        Returns:
            Tuple of (report, errors). Report is None when errors occur.
        """
        start = start_date or self._today()
        end = end_date or start + timedelta(days=self._config.default_window_days)

        if start > end:
            return None, [
                GenerationError(
                    code="invalid_window",
                    message="Start date must be before end date",
                )
            ]

        if (end - start).days > self._config.max_window_days:
            return None, [
                GenerationError(
                    code="window_too_large",
                    message=f"Window must be at most {self._config.max_window_days} days",
                )
            ]

        template = self._templates.get_by_id(template_id)
        if template is None:
            return None, [
                GenerationError(
                    code="template_not_found",
                    message=f"Template not found: {template_id}",
                )
            ]

        pattern: RecurrencePattern | None = None
        if pattern_id is not None:
            pattern = self._patterns.get_by_id(pattern_id)
            if pattern is None or not pattern.is_active:
                return None, [
                    GenerationError(
                        code="pattern_not_found",
                        message="Pattern not found or inactive",
                        pattern_id=pattern_id,
                    )
                ]
            if pattern.template_id != template_id:
                return None, [
                    GenerationError(
                        code="pattern_template_mismatch",
                        message="Pattern does not match template",
                        pattern_id=pattern_id,
                    )
                ]
            dates = compute_dates(pattern, start, end)
        else:
            dates = daily_dates(start, end)

        if not dates:
            return GenerationReport(message="No dates to generate"), []

        report = self._materialize(template, [format_service_date(d) for d in dates])

        if pattern is not None and pattern.id is not None:
            self._patterns.update_watermark(pattern.id, dates[-1])

        logger.info(
            "Generated %d service(s) for template %s (%d skipped)",
            len(report.services),
            template_id,
            len(report.skipped),
        )
        return report, []

    def generate_due(self, horizon_days: int | None = None) -> list[PatternRunResult]:
        """
        Generate services for every active pattern that is behind.

        A failure on one pattern is logged and reported in its result; the
        remaining patterns still run.
        """
        today = self._today()
        horizon = horizon_days if horizon_days is not None else self._config.cron_horizon_days
        end = today + timedelta(days=horizon)

        results: list[PatternRunResult] = []
        for pattern in self._patterns.list_due(today):
            if pattern.id is None:
                continue
            results.append(self._generate_for_pattern(pattern, today, end))

        return results

    def _generate_for_pattern(
        self,
        pattern: RecurrencePattern,
        today: date,
        end: date,
    ) -> PatternRunResult:
        assert pattern.id is not None
        template: ServiceTemplate | None = None
        try:
            if pattern.template_id is not None:
                template = self._templates.get_by_id(pattern.template_id)
            if template is None:
                return PatternRunResult(
                    pattern_id=pattern.id,
                    pattern_name="Unknown",
                    generated=0,
                    error="Template not found",
                )

            dates = compute_dates(pattern, today, end)
            if not dates:
                self._patterns.update_watermark(pattern.id, today)
                return PatternRunResult(pattern_id=pattern.id, pattern_name=template.name, generated=0)

            report = self._materialize(template, [format_service_date(d) for d in dates])
            self._patterns.update_watermark(pattern.id, dates[-1])

            return PatternRunResult(
                pattern_id=pattern.id,
                pattern_name=template.name,
                generated=len(report.services),
            )
        except Exception as e:
            logger.exception("Error processing pattern %s", pattern.id)
            return PatternRunResult(
                pattern_id=pattern.id,
                pattern_name=template.name if template else "Unknown",
                generated=0,
                error=str(e),
            )
