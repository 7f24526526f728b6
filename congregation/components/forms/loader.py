"""
Form configuration loading.

Rows from the configuration source are validated into field and rule
variants here, so a malformed definition fails at load time rather than
mid-submission.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from ._rules import AnyRule, sort_rules
from ._transform import AnyField
from .models import (
    FieldDefinition,
    FormConfig,
    FormConfigError,
    LoadedForm,
    StaticContent,
    SubmissionRule,
)
from .ports import FormConfigSourcePort

logger = logging.getLogger(__name__)

_FIELD_ADAPTER: TypeAdapter[AnyField] = TypeAdapter(FieldDefinition)
_RULE_ADAPTER: TypeAdapter[AnyRule] = TypeAdapter(SubmissionRule)

DEFAULT_SECTION = "General"


def parse_field_definition(row: dict[str, Any]) -> AnyField:
    """
    Validate one field row.

    A missing transformation_type is a direct mapping.
    """
    data = dict(row)
    if data.get("transformation_type") is None:
        data["transformation_type"] = "direct"
    try:
        return _FIELD_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise FormConfigError([f"field {row.get('field_key')!r}: {e}"]) from e


def parse_submission_rule(row: dict[str, Any]) -> AnyRule:
    """Validate one rule row against its rule_type's config shape."""
    data = dict(row)
    if data.get("rule_config") is None:
        data.pop("rule_config", None)
    try:
        return _RULE_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise FormConfigError([f"rule {row.get('id') or row.get('rule_type')!r}: {e}"]) from e


def parse_fields(rows: list[dict[str, Any]]) -> list[AnyField]:
    """Validate every field row, reporting all failures together."""
    fields: list[AnyField] = []
    errors: list[str] = []
    for row in rows:
        try:
            fields.append(parse_field_definition(row))
        except FormConfigError as e:
            errors.extend(e.errors)
    if errors:
        raise FormConfigError(errors)
    return fields


def parse_rules(rows: list[dict[str, Any]]) -> list[AnyRule]:
    """Validate every rule row and order by ascending priority."""
    rules: list[AnyRule] = []
    errors: list[str] = []
    for row in rows:
        try:
            rules.append(parse_submission_rule(row))
        except FormConfigError as e:
            errors.extend(e.errors)
    if errors:
        raise FormConfigError(errors)
    return sort_rules(rules)


def load_form_config(form_type: str, source: FormConfigSourcePort) -> LoadedForm | None:
    """
    Load the form configuration for a form type.

    The published version wins; otherwise the highest-version active one.

    Returns:
        LoadedForm, or None when no usable version exists.

    Raises:
        FormConfigError: A stored field definition is malformed.
    """
    row = source.get_published(form_type)
    if row is None:
        row = source.get_latest_active(form_type)
    if row is None:
        logger.warning("No published or active form config for %s", form_type)
        return None

    config = FormConfig.model_validate(row)
    fields = parse_fields(source.list_field_rows(config.id))
    static_content = [
        StaticContent.model_validate(r) for r in source.list_static_content_rows(config.id)
    ]

    return LoadedForm(config=config, fields=fields, static_content=static_content)


def load_rules(config_id: str, source: FormConfigSourcePort) -> list[AnyRule]:
    """Load and validate the submission rules of a configuration."""
    return parse_rules(source.list_rule_rows(config_id))


def get_static_content(static_content: list[StaticContent], key: str) -> str | None:
    """Get static content text by key."""
    for item in static_content:
        if item.content_key == key:
            return item.content or None
    return None


def group_fields_by_section(fields: list[AnyField]) -> dict[str, list[AnyField]]:
    """Group fields by section, preserving field order."""
    grouped: dict[str, list[AnyField]] = {}
    for definition in fields:
        grouped.setdefault(definition.section or DEFAULT_SECTION, []).append(definition)
    return grouped
