"""
Starter form templates with pre-configured mappings and rules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ._rules import AnyRule
from ._transform import AnyField
from .loader import parse_fields, parse_rules


@dataclass(frozen=True)
class FormTemplate:
    name: str
    description: str
    fields: list[dict[str, Any]] = field(default_factory=list)
    rules: list[dict[str, Any]] = field(default_factory=list)


def _name_fields() -> list[dict[str, Any]]:
    combine = {"fields": ["first_name", "surname"], "separator": " "}
    return [
        {
            "field_key": "first_name",
            "field_type": "text",
            "label": "First Name",
            "is_required": True,
            "db_column": "full_name",
            "transformation_type": "combine",
            "transformation_config": combine,
        },
        {
            "field_key": "surname",
            "field_type": "text",
            "label": "Surname",
            "is_required": True,
            "db_column": "full_name",
            "transformation_type": "combine",
            "transformation_config": combine,
        },
        {
            "field_key": "email",
            "field_type": "email",
            "label": "Email Address",
            "is_required": True,
            "db_column": "email",
            "transformation_type": "direct",
        },
        {
            "field_key": "phone",
            "field_type": "tel",
            "label": "Phone Number",
            "db_column": "phone",
            "transformation_type": "direct",
        },
    ]


def _yes_no_note(key: str, label: str, notes_format: str) -> dict[str, Any]:
    return {
        "field_key": key,
        "field_type": "select",
        "label": label,
        "transformation_type": "notes",
        "is_notes_field": True,
        "notes_format": notes_format,
        "options": [{"label": "Yes", "value": "Yes"}, {"label": "No", "value": "No"}],
    }


FORM_TEMPLATES: dict[str, FormTemplate] = {
    "welcome": FormTemplate(
        name="Welcome Form Template",
        description="First-time visitor card",
        fields=[
            *_name_fields(),
            {
                "field_key": "marital_status",
                "field_type": "select",
                "label": "Marital Status",
                "db_column": "marital_status",
                "transformation_type": "direct",
                "options": [
                    {"label": "Single", "value": "single"},
                    {"label": "Married", "value": "married"},
                    {"label": "Divorced", "value": "divorced"},
                    {"label": "Widowed", "value": "widowed"},
                ],
            },
            {
                "field_key": "address",
                "field_type": "textarea",
                "label": "Address",
                "db_column": "address",
                "transformation_type": "direct",
            },
            _yes_no_note("joining_us", "Are you joining us?", "Joining us: {value}"),
            _yes_no_note("can_visit", "Can we visit you?", "Can visit: {value}"),
            _yes_no_note("whatsapp_group", "Join WhatsApp Group?", "WhatsApp Group: {value}"),
        ],
        rules=[
            {
                "rule_type": "status_progression",
                "rule_config": {
                    "trigger_field": "joining_us",
                    "trigger_value": "Yes",
                    "conditions": [
                        {"current_status": "First Timer", "new_status": "Contacted"},
                        {"current_status": "New", "new_status": "Contacted"},
                        {"current_status": "Contacted", "new_status": "Engaged"},
                    ],
                    "default": "First Timer",
                },
                "priority": 0,
            },
            {
                "rule_type": "conditional_save",
                "rule_config": {"lookup_field": "email", "merge_strategy": "merge"},
                "priority": 1,
            },
        ],
    ),
    "membership": FormTemplate(
        name="Membership Form Template",
        description="Membership and workforce sign-up",
        fields=[
            *_name_fields(),
            {
                "field_key": "gender",
                "field_type": "select",
                "label": "Gender",
                "db_column": "gender",
                "transformation_type": "direct",
            },
            {
                "field_key": "departments",
                "field_type": "select",
                "label": "Department Interests",
                "db_column": "department_interest",
                "transformation_type": "array",
            },
        ],
        rules=[
            {
                "rule_type": "status_progression",
                "rule_config": {
                    "trigger_field": "join_workforce",
                    "trigger_value": "true",
                    "conditions": [
                        {"current_status": "First Timer", "new_status": "Contacted"},
                        {"current_status": "New", "new_status": "Contacted"},
                        {"current_status": "Contacted", "new_status": "Engaged"},
                        {"current_status": "Engaged", "new_status": "Member"},
                    ],
                    "default": "New",
                },
                "priority": 0,
            },
            {
                "rule_type": "conditional_save",
                "rule_config": {"lookup_field": "email", "merge_strategy": "merge"},
                "priority": 1,
            },
        ],
    ),
    "newcomer": FormTemplate(
        name="Newcomer Form Template",
        description="Newcomer registration, one record per submission",
        fields=[
            {
                "field_key": "full_name",
                "field_type": "text",
                "label": "Full Name",
                "is_required": True,
                "db_column": "full_name",
                "transformation_type": "direct",
            },
            {
                "field_key": "email",
                "field_type": "email",
                "label": "Email Address",
                "is_required": True,
                "db_column": "email",
                "transformation_type": "direct",
            },
            {
                "field_key": "phone",
                "field_type": "tel",
                "label": "Phone Number",
                "db_column": "phone",
                "transformation_type": "direct",
            },
            {
                "field_key": "service_time",
                "field_type": "select",
                "label": "Service Time",
                "db_column": "service_time",
                "transformation_type": "direct",
            },
            {
                "field_key": "interest_areas",
                "field_type": "select",
                "label": "Interest Areas",
                "db_column": "interest_areas",
                "transformation_type": "array",
            },
        ],
        rules=[
            {
                "rule_type": "conditional_save",
                "rule_config": {"lookup_field": "email", "merge_strategy": "insert_only"},
                "priority": 0,
            },
        ],
    ),
}


def get_template(name: str) -> FormTemplate | None:
    return FORM_TEMPLATES.get(name)


def template_fields(name: str) -> list[AnyField]:
    """Validated field definitions of a template."""
    template = FORM_TEMPLATES[name]
    rows = [{"display_order": i, **row} for i, row in enumerate(template.fields)]
    return parse_fields(rows)


def template_rules(name: str) -> list[AnyRule]:
    """Validated submission rules of a template."""
    return parse_rules(FORM_TEMPLATES[name].rules)
