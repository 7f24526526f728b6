from typing import Any, NoReturn

from fastapi import APIRouter, Body, Depends, HTTPException

from congregation.api.deps import FormPorts, get_form_ports
from congregation.api.schemas import FormConfigResponse, FormResponse, SubmitFormResponse
from congregation.components.forms import (
    FormError,
    GetFormInput,
    SubmitFormInput,
    group_fields_by_section,
    run_get_form,
    run_submit,
)

router = APIRouter()

ERROR_STATUS = {
    "form_config_not_found": 404,
    "validation_failed": 400,
    "missing_lookup_value": 400,
    "invalid_form_config": 500,
}


def _raise_for(errors: list[FormError]) -> NoReturn:
    status_code = max(ERROR_STATUS.get(e.code, 400) for e in errors)
    raise HTTPException(
        status_code=status_code,
        detail={
            "errors": [{"code": e.code, "message": e.message, "field": e.field} for e in errors],
        },
    )


def _check_form_type(form_type: str, ports: FormPorts) -> None:
    if form_type not in ports.form_types:
        raise HTTPException(status_code=404, detail=f"Unknown form type: {form_type}")


@router.get("/{form_type}", response_model=FormResponse)
def get_form(form_type: str, ports: FormPorts = Depends(get_form_ports)) -> FormResponse:
    """Load the active configuration for a form."""
    _check_form_type(form_type, ports)
    result = run_get_form(GetFormInput(form_type=form_type), source=ports.source)
    if not result.success or result.form is None:
        _raise_for(result.errors)

    form = result.form
    sections = group_fields_by_section(form.fields)
    return FormResponse(
        config=FormConfigResponse(
            id=form.config.id,
            form_type=form.config.form_type,
            name=form.config.name,
            version=form.config.version,
            status=form.config.status,
        ),
        fields=[f.model_dump() for f in form.fields],
        sections={name: [f.field_key for f in items] for name, items in sections.items()},
        static_content={s.content_key: s.content or "" for s in form.static_content},
    )


@router.post("/{form_type}/submit", response_model=SubmitFormResponse)
def submit_form(
    form_type: str,
    form_data: dict[str, Any] = Body(...),
    ports: FormPorts = Depends(get_form_ports),
) -> SubmitFormResponse:
    """Submit form data through the configured pipeline."""
    _check_form_type(form_type, ports)
    result = run_submit(
        SubmitFormInput(form_type=form_type, form_data=form_data),
        source=ports.source,
        store=ports.store,
        locks=ports.locks,
        config=ports.config,
    )
    if not result.success or result.result is None:
        _raise_for(result.errors)

    return SubmitFormResponse(
        status=result.result.status,
        record_id=result.result.record_id,
        is_new_record=result.result.is_new_record,
    )
