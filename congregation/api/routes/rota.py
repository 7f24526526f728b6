import logging

from fastapi import APIRouter, Depends, HTTPException

from congregation.api.deps import RotaPorts, get_rota_ports, require_admin
from congregation.api.schemas import (
    GenerateServicesRequest,
    GenerateServicesResponse,
    ServiceResponse,
)
from congregation.components.service_generation import (
    GenerateServicesInput,
    GenerationError,
    Service,
    run_generate,
)

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND_CODES = {"template_not_found", "pattern_not_found"}


def _error_status(errors: list[GenerationError]) -> int:
    if any(e.code in NOT_FOUND_CODES for e in errors):
        return 404
    return 400


def _to_response(service: Service) -> ServiceResponse:
    return ServiceResponse(id=service.id, date=service.date, name=service.name, time=service.time)


@router.post("/generate", response_model=GenerateServicesResponse)
def generate_services(
    req: GenerateServicesRequest,
    _role: str = Depends(require_admin),
    ports: RotaPorts = Depends(get_rota_ports),
) -> GenerateServicesResponse:
    """Generate services from a template (admin only)."""
    inp = GenerateServicesInput(
        template_id=req.template_id,
        pattern_id=req.pattern_id,
        start_date=req.start_date,
        end_date=req.end_date,
    )
    result = run_generate(
        inp,
        services=ports.services,
        patterns=ports.patterns,
        templates=ports.templates,
        clock=ports.clock,
        locks=ports.locks,
        config=ports.config,
    )

    if not result.success:
        raise HTTPException(
            status_code=_error_status(result.errors),
            detail={
                "errors": [{"code": e.code, "message": e.message} for e in result.errors],
            },
        )

    logger.info("Admin generation for template %s: %s", req.template_id, result.message)
    return GenerateServicesResponse(
        services=[_to_response(s) for s in result.services],
        skipped=[_to_response(s) for s in result.skipped],
        message=result.message,
    )
