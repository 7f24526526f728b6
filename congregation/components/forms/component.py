"""
Forms component - Dynamic form loading and submission.

Invariants:
- Fields are transformed in definition order, rules run in priority order
- merge never clears a previously stored value the submission omitted
- replace resets every column the submission did not produce
- Lookup-then-write is serialized per lookup key
- Record store errors propagate to the caller
"""

from __future__ import annotations

import logging

from ._impl import FormSubmissionPipeline
from .loader import load_form_config, load_rules
from .models import (
    DEFAULT_PIPELINE_CONFIG,
    FormConfigError,
    FormConfigNotFoundError,
    FormError,
    GetFormInput,
    GetFormOutput,
    MissingLookupValueError,
    PipelineConfig,
    SubmitFormInput,
    SubmitFormOutput,
)
from .ports import FormConfigSourcePort, LockPort, RecordStorePort
from .validator import validate_form_data, validate_rule_requirements

logger = logging.getLogger(__name__)


def _not_found(form_type: str) -> FormError:
    err = FormConfigNotFoundError(form_type)
    return FormError(code="form_config_not_found", message=str(err))


# --- Component Entry Points ---


def run_get_form(
    inp: GetFormInput,
    *,
    source: FormConfigSourcePort,
) -> GetFormOutput:
    """
    Load a form configuration for display.

    Args:
        inp: Input containing the form type.
        source: Form configuration source port.

    Returns:
        GetFormOutput with the loaded form or errors.
    """
    try:
        form = load_form_config(inp.form_type, source)
    except FormConfigError as e:
        return GetFormOutput(
            form=None,
            errors=[FormError(code="invalid_form_config", message=str(e))],
            success=False,
        )

    if form is None:
        return GetFormOutput(form=None, errors=[_not_found(inp.form_type)], success=False)

    return GetFormOutput(form=form)


def run_submit(
    inp: SubmitFormInput,
    *,
    source: FormConfigSourcePort,
    store: RecordStorePort,
    locks: LockPort | None = None,
    config: PipelineConfig | None = None,
) -> SubmitFormOutput:
    """
    Submit form data through the configured mappings and rules.

    Args:
        inp: Input containing form type and raw submitted data.
        source: Form configuration source port.
        store: Record store port.
        locks: Optional lock port serializing lookup-then-write.
        config: Optional pipeline defaults.

    Returns:
        SubmitFormOutput with the created/updated record id or errors.
    """
    try:
        form = load_form_config(inp.form_type, source)
        if form is None:
            return SubmitFormOutput(result=None, errors=[_not_found(inp.form_type)], success=False)
        rules = load_rules(form.config.id, source)
    except FormConfigError as e:
        logger.error("Form config for %s is invalid: %s", inp.form_type, e)
        return SubmitFormOutput(
            result=None,
            errors=[FormError(code="invalid_form_config", message=str(e))],
            success=False,
        )

    validation = validate_form_data(inp.form_data, form.fields)
    rule_validation = validate_rule_requirements(inp.form_data, rules)
    field_errors = validation.errors + rule_validation.errors
    if field_errors:
        return SubmitFormOutput(
            result=None,
            errors=[
                FormError(code="validation_failed", message=e.message, field=e.field)
                for e in field_errors
            ],
            success=False,
        )

    pipeline = FormSubmissionPipeline(
        store=store,
        locks=locks,
        config=config or DEFAULT_PIPELINE_CONFIG,
    )

    try:
        result = pipeline.submit(inp.form_data, form.fields, rules)
    except MissingLookupValueError as e:
        return SubmitFormOutput(
            result=None,
            errors=[FormError(code="missing_lookup_value", message=str(e), field=e.lookup_field)],
            success=False,
        )

    return SubmitFormOutput(result=result)


def run(
    inp: SubmitFormInput | GetFormInput,
    *,
    source: FormConfigSourcePort,
    store: RecordStorePort | None = None,
    locks: LockPort | None = None,
    config: PipelineConfig | None = None,
) -> SubmitFormOutput | GetFormOutput:
    """
    Main entry point for the forms component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, SubmitFormInput):
        if store is None:
            raise ValueError("RecordStorePort is required for submit operations")
        return run_submit(inp, source=source, store=store, locks=locks, config=config)
    elif isinstance(inp, GetFormInput):
        return run_get_form(inp, source=source)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
