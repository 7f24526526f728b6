import logging

from fastapi import APIRouter, Depends, HTTPException

from congregation.api.deps import RotaPorts, get_rota_ports, verify_cron_secret
from congregation.api.schemas import GenerateDueResponse, PatternRunResponse
from congregation.components.service_generation import (
    GenerateDueInput,
    run_generate_due_patterns,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/generate-services",
    response_model=GenerateDueResponse,
    dependencies=[Depends(verify_cron_secret)],
)
def generate_due_services(ports: RotaPorts = Depends(get_rota_ports)) -> GenerateDueResponse:
    """Daily run: top up services for every active recurring pattern."""
    result = run_generate_due_patterns(
        GenerateDueInput(),
        services=ports.services,
        patterns=ports.patterns,
        templates=ports.templates,
        clock=ports.clock,
        locks=ports.locks,
        config=ports.config,
    )

    if not result.success:
        raise HTTPException(
            status_code=500,
            detail={"errors": [{"code": e.code, "message": e.message} for e in result.errors]},
        )

    logger.info("Cron generation: %s", result.message)
    return GenerateDueResponse(
        message=result.message,
        total_generated=result.total_generated,
        results=[
            PatternRunResponse(
                pattern_id=r.pattern_id,
                pattern_name=r.pattern_name,
                generated=r.generated,
                error=r.error,
            )
            for r in result.results
        ],
    )
