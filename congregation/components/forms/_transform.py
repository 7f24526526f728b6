"""
Field transformation pass.

Functional Core - maps raw submitted values onto record columns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, assert_never

from .models import ArrayField, CombineField, DirectField, NotesField

AnyField = DirectField | CombineField | NotesField | ArrayField


@dataclass
class TransformResult:
    """Record columns produced by a submission, plus pending notes."""

    record: dict[str, Any] = field(default_factory=dict)
    notes_parts: list[str] = field(default_factory=list)


def is_empty(value: Any) -> bool:
    """None and the empty string are treated as "not submitted"."""
    return value is None or value == ""


def as_text(value: Any) -> str:
    """Render a submitted value as a trimmed string."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list | tuple):
        return ",".join(as_text(v) for v in value)
    return str(value).strip()


def combine_values(form_data: dict[str, Any], keys: list[str], separator: str) -> str:
    """Join the non-empty trimmed values of keys, in list order."""
    parts = [as_text(form_data.get(key)) if form_data.get(key) else "" for key in keys]
    return separator.join(p for p in parts if p)


def render_note(notes_format: str | None, value: Any) -> str:
    """Substitute the first {value} placeholder."""
    return (notes_format or "{value}").replace("{value}", as_text(value), 1)


def transform_fields(fields: list[AnyField], form_data: dict[str, Any]) -> TransformResult:
    """
    Apply every field's transformation in definition order.

    A combine target is evaluated once per distinct (column, fields,
    separator), at its first constituent with a submitted value.
    """
    result = TransformResult()
    combined: set[tuple[str, tuple[str, ...], str]] = set()

    for definition in fields:
        value = form_data.get(definition.field_key)
        if is_empty(value):
            continue

        if isinstance(definition, DirectField):
            if definition.db_column:
                if definition.field_type == "array" or isinstance(value, list):
                    result.record[definition.db_column] = value
                else:
                    result.record[definition.db_column] = as_text(value)

        elif isinstance(definition, CombineField):
            cfg = definition.transformation_config
            if not definition.db_column:
                continue
            key = (definition.db_column, tuple(cfg.fields), cfg.separator)
            if key in combined:
                continue
            combined.add(key)
            joined = combine_values(form_data, cfg.fields, cfg.separator)
            if joined:
                result.record[definition.db_column] = joined

        elif isinstance(definition, NotesField):
            if definition.is_notes_field:
                result.notes_parts.append(render_note(definition.notes_format, value))

        elif isinstance(definition, ArrayField):
            if definition.db_column:
                items = value if isinstance(value, list | tuple) else [value]
                result.record[definition.db_column] = [as_text(v) for v in items]

        else:
            assert_never(definition)

    return result


def aggregate_notes(result: TransformResult, separator: str = " | ") -> dict[str, Any]:
    """
    Fold notes parts into the record's notes column.

    A notes value mapped directly from the form stays in front.
    """
    record = dict(result.record)
    if not result.notes_parts:
        return record

    new_notes = separator.join(result.notes_parts)
    existing = as_text(record["notes"]) if record.get("notes") else ""
    record["notes"] = f"{existing}{separator}{new_notes}" if existing else new_notes
    return record
