"""
Service generation component - Materialize rota services from templates.
"""

from ._impl import (
    GenerationReport,
    GenerationService,
    check_for_existing_services,
    daily_dates,
    generate_services_from_template,
)
from .component import run, run_generate, run_generate_due_patterns
from .models import (
    DEFAULT_CONFIG,
    DateCheckResult,
    GenerateDueInput,
    GenerateDueOutput,
    GenerateServicesInput,
    GenerateServicesOutput,
    GenerationConfig,
    GenerationError,
    MaterializeResult,
    PatternRunResult,
    Service,
    ServiceTemplate,
)
from .ports import ClockPort, LockPort, PatternRepoPort, ServiceRepoPort, TemplateRepoPort

__all__ = [
    # Entry points
    "run",
    "run_generate",
    "run_generate_due_patterns",
    # Functional core
    "check_for_existing_services",
    "daily_dates",
    "generate_services_from_template",
    "GenerationReport",
    "GenerationService",
    # Models
    "DEFAULT_CONFIG",
    "DateCheckResult",
    "GenerateDueInput",
    "GenerateDueOutput",
    "GenerateServicesInput",
    "GenerateServicesOutput",
    "GenerationConfig",
    "GenerationError",
    "MaterializeResult",
    "PatternRunResult",
    "Service",
    "ServiceTemplate",
    # Ports
    "ClockPort",
    "LockPort",
    "PatternRepoPort",
    "ServiceRepoPort",
    "TemplateRepoPort",
]
