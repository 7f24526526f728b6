"""
Submitted value checks against field definitions.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from ._rules import AnyRule
from ._transform import AnyField, is_empty
from .models import FieldValidationError, ValidationResult, ValidationRule

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[\d\s\-+()]+$")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int | float):
        return True
    try:
        float(str(value).strip())
    except ValueError:
        return False
    return True


def _length_limit(rules: dict[str, Any], *keys: str) -> int | None:
    """Integer length limit from validation rules; unusable values are ignored."""
    raw = next((rules[k] for k in keys if rules.get(k)), None)
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid length limit in validation rules: %r", raw)
        return None


def _check_field(definition: AnyField, value: Any) -> list[FieldValidationError]:
    errors: list[FieldValidationError] = []
    key, label = definition.field_key, definition.label or definition.field_key
    rules = definition.validation_rules

    if definition.field_type == "email" and isinstance(value, str) and not EMAIL_RE.match(value):
        errors.append(FieldValidationError(key, f"{label} must be a valid email address"))

    if definition.field_type == "tel" and isinstance(value, str) and not PHONE_RE.match(value):
        errors.append(FieldValidationError(key, f"{label} must be a valid phone number"))

    if definition.field_type == "number" and not _is_number(value):
        errors.append(FieldValidationError(key, f"{label} must be a number"))

    if not isinstance(value, str):
        return errors

    min_length = _length_limit(rules, "min_length", "minLength")
    if min_length is not None and len(value) < min_length:
        errors.append(
            FieldValidationError(key, f"{label} must be at least {min_length} characters")
        )

    max_length = _length_limit(rules, "max_length", "maxLength")
    if max_length is not None and len(value) > max_length:
        errors.append(
            FieldValidationError(key, f"{label} must be no more than {max_length} characters")
        )

    pattern = rules.get("pattern")
    if pattern:
        try:
            matched = re.search(pattern, value) is not None
        except (re.error, TypeError):
            logger.warning("Invalid regex pattern in validation rules: %s", pattern)
        else:
            if not matched:
                message = rules.get("pattern_message") or rules.get("patternMessage")
                errors.append(FieldValidationError(key, message or f"{label} format is invalid"))

    return errors


def validate_form_data(form_data: dict[str, Any], fields: list[AnyField]) -> ValidationResult:
    """
    Validate submitted values against their field definitions.

    Required fields must be non-empty; type checks and length/pattern rules
    only run on fields that were submitted.
    """
    errors: list[FieldValidationError] = []

    for definition in fields:
        value = form_data.get(definition.field_key)
        if is_empty(value):
            if definition.is_required:
                label = definition.label or definition.field_key
                errors.append(FieldValidationError(definition.field_key, f"{label} is required"))
            continue
        errors.extend(_check_field(definition, value))

    return ValidationResult(is_valid=not errors, errors=errors)


def validate_rule_requirements(
    form_data: dict[str, Any],
    rules: list[AnyRule],
) -> ValidationResult:
    """Enforce required_fields declared by validation rules."""
    errors: list[FieldValidationError] = []
    seen: set[str] = set()

    for rule in rules:
        if not isinstance(rule, ValidationRule):
            continue
        for key in rule.rule_config.required_fields:
            if key in seen:
                continue
            seen.add(key)
            if is_empty(form_data.get(key)):
                errors.append(FieldValidationError(key, f"{key} is required"))

    return ValidationResult(is_valid=not errors, errors=errors)
