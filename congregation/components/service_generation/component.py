"""
Service generation component - Materialize rota services.

Handles the admin "generate services" action and the daily run over
active recurring patterns.

Invariants:
- A date that already has a service is never given a second one
- Check-then-insert is serialized per template
- The watermark advances only after a successful run
"""

from __future__ import annotations

from ._impl import GenerationService
from .models import (
    DEFAULT_CONFIG,
    GenerateDueInput,
    GenerateDueOutput,
    GenerateServicesInput,
    GenerateServicesOutput,
    GenerationConfig,
)
from .ports import ClockPort, LockPort, PatternRepoPort, ServiceRepoPort, TemplateRepoPort


def _create_service(
    services: ServiceRepoPort,
    patterns: PatternRepoPort,
    templates: TemplateRepoPort,
    clock: ClockPort | None,
    locks: LockPort | None,
    config: GenerationConfig | None,
) -> GenerationService:
    return GenerationService(
        services=services,
        patterns=patterns,
        templates=templates,
        clock=clock,
        locks=locks,
        config=config or DEFAULT_CONFIG,
    )


# --- Component Entry Points ---


def run_generate(
    inp: GenerateServicesInput,
    *,
    services: ServiceRepoPort,
    patterns: PatternRepoPort,
    templates: TemplateRepoPort,
    clock: ClockPort | None = None,
    locks: LockPort | None = None,
    config: GenerationConfig | None = None,
) -> GenerateServicesOutput:
    """
    Generate services from a template, optionally driven by a pattern.

    Args:
        inp: Template, optional pattern and window.
        services: Service repository port.
        patterns: Recurring pattern repository port.
        templates: Service template repository port.
        clock: Optional clock for the default window.
        locks: Optional lock port serializing generation per template.
        config: Optional generation windows.

    Returns:
        GenerateServicesOutput with created and skipped services or errors.
    """
    service = _create_service(services, patterns, templates, clock, locks, config)

    report, errors = service.generate(
        template_id=inp.template_id,
        pattern_id=inp.pattern_id,
        start_date=inp.start_date,
        end_date=inp.end_date,
    )

    if report is None:
        return GenerateServicesOutput(errors=errors, success=False)

    return GenerateServicesOutput(
        services=report.services,
        skipped=report.skipped,
        message=report.message,
    )


def run_generate_due_patterns(
    inp: GenerateDueInput,
    *,
    services: ServiceRepoPort,
    patterns: PatternRepoPort,
    templates: TemplateRepoPort,
    clock: ClockPort | None = None,
    locks: LockPort | None = None,
    config: GenerationConfig | None = None,
) -> GenerateDueOutput:
    """
    Generate upcoming services for every active pattern that is behind.

    Args:
        inp: Optional horizon override in days.
        services: Service repository port.
        patterns: Recurring pattern repository port.
        templates: Service template repository port.
        clock: Optional clock for "today".
        locks: Optional lock port serializing generation per template.
        config: Optional generation windows.

    Returns:
        GenerateDueOutput with one result per processed pattern.
    """
    service = _create_service(services, patterns, templates, clock, locks, config)

    results = service.generate_due(horizon_days=inp.horizon_days)
    if not results:
        return GenerateDueOutput(
            message="No active patterns found or all patterns are up to date",
        )

    total = sum(r.generated for r in results)
    return GenerateDueOutput(
        results=tuple(results),
        total_generated=total,
        message=f"Generated {total} service(s) from {len(results)} pattern(s)",
    )


def run(
    inp: GenerateServicesInput | GenerateDueInput,
    *,
    services: ServiceRepoPort,
    patterns: PatternRepoPort,
    templates: TemplateRepoPort,
    clock: ClockPort | None = None,
    locks: LockPort | None = None,
    config: GenerationConfig | None = None,
) -> GenerateServicesOutput | GenerateDueOutput:
    """
    Main entry point for the service generation component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, GenerateServicesInput):
        return run_generate(
            inp,
            services=services,
            patterns=patterns,
            templates=templates,
            clock=clock,
            locks=locks,
            config=config,
        )
    elif isinstance(inp, GenerateDueInput):
        return run_generate_due_patterns(
            inp,
            services=services,
            patterns=patterns,
            templates=templates,
            clock=clock,
            locks=locks,
            config=config,
        )
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
