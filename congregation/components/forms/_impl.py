"""
FormSubmissionPipeline - Turn raw form data into a persisted record.

Processing order:
1. Field transformation pass (definition order)
2. Notes aggregation
3. Rule evaluation (ascending priority)
4. Lookup of an existing record by the trimmed lookup value
5. Persist by merge / replace / insert_only

Record store errors propagate unchanged and nothing is rolled back; the
caller owns transactionality.
"""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager, nullcontext
from typing import Any

from ._rules import AnyRule, evaluate_rules
from ._transform import AnyField, aggregate_notes, as_text, is_empty, transform_fields
from .models import (
    DEFAULT_PIPELINE_CONFIG,
    MissingLookupValueError,
    PipelineConfig,
    SubmissionResult,
)
from .ports import LockPort, RecordStorePort

logger = logging.getLogger(__name__)

# Columns a replace never resets.
PRESERVED_COLUMNS = ("id", "created_at")


def build_record(
    form_data: dict[str, Any],
    fields: list[AnyField],
    rules: list[AnyRule],
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> tuple[dict[str, Any], str, Any]:
    """
    Run steps 1-3.

    Returns:
        Tuple of (record, lookup_field, merge_strategy); record includes
        the final status.
    """
    transformed = transform_fields(fields, form_data)
    record = aggregate_notes(transformed, config.notes_separator)

    initial_status = record.get("status") or config.default_status
    outcome = evaluate_rules(
        rules,
        form_data,
        initial_status=initial_status,
        default_lookup_field=config.default_lookup_field,
        default_merge_strategy=config.default_merge_strategy,
    )
    record["status"] = outcome.status
    return record, outcome.lookup_field, outcome.merge_strategy


def merge_record(existing: dict[str, Any], record: dict[str, Any]) -> dict[str, Any]:
    """
    Overlay submitted non-empty values on the existing record.

    Status is always taken from the submission.
    """
    merged = dict(existing)
    for column, value in record.items():
        if not is_empty(value):
            merged[column] = value
    merged["status"] = record.get("status")
    return {k: v for k, v in merged.items() if k != "id"}


def replace_record(existing: dict[str, Any], record: dict[str, Any]) -> dict[str, Any]:
    """Reset every column the submission did not produce to null."""
    patch: dict[str, Any] = {k: None for k in existing if k not in PRESERVED_COLUMNS}
    patch.update(record)
    return patch


def lookup_value_for(form_data: dict[str, Any], lookup_field: str) -> str:
    """The trimmed submitted lookup value, or MissingLookupValueError."""
    value = form_data.get(lookup_field)
    if not value:
        raise MissingLookupValueError(lookup_field)
    text = as_text(value)
    if not text:
        raise MissingLookupValueError(lookup_field)
    return text


class FormSubmissionPipeline:
    """
    Form submission pipeline.

    Persists a submission into the configured table of a record store.
    """

    def __init__(
        self,
        store: RecordStorePort,
        locks: LockPort | None = None,
        config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
    ) -> None:
        self._store = store
        self._locks = locks
        self._config = config

    def _hold(self, key: str) -> AbstractContextManager[None]:
        if self._locks is None:
            return nullcontext()
        return self._locks.hold(key)

    def submit(
        self,
        form_data: dict[str, Any],
        fields: list[AnyField],
        rules: list[AnyRule],
    ) -> SubmissionResult:
        """
        Transform, evaluate and persist one submission.

        Raises:
            MissingLookupValueError: The lookup field was not submitted.
        """
        table = self._config.table
        record, lookup_field, strategy = build_record(form_data, fields, rules, self._config)
        lookup_value = lookup_value_for(form_data, lookup_field)

        with self._hold(f"{table}:{lookup_field}:{lookup_value}"):
            if strategy == "insert_only":
                return self._insert(table, record)

            existing = self._store.fetch_by_key(table, lookup_field, lookup_value)
            if existing is None:
                return self._insert(table, record)

            if strategy == "merge":
                patch = merge_record(existing, record)
            else:
                patch = replace_record(existing, record)

            self._store.update(table, existing["id"], patch)

        logger.info(
            "Updated %s record %s (%s on %s)", table, existing["id"], strategy, lookup_field
        )
        return SubmissionResult(status="updated", record_id=str(existing["id"]))

    def _insert(self, table: str, record: dict[str, Any]) -> SubmissionResult:
        created = self._store.insert(table, record)
        logger.info("Created %s record %s", table, created["id"])
        return SubmissionResult(status="created", record_id=str(created["id"]))
