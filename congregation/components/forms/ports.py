"""
Forms component port definitions.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Protocol


class FormConfigSourcePort(Protocol):
    """Source of form configurations, fields, static content and rules."""

    def get_published(self, form_type: str) -> dict[str, Any] | None:
        """Get the published configuration row for a form type."""
        ...

    def get_latest_active(self, form_type: str) -> dict[str, Any] | None:
        """Get the highest-version active configuration row."""
        ...

    def list_field_rows(self, config_id: str) -> list[dict[str, Any]]:
        """List field definition rows ordered by display_order."""
        ...

    def list_static_content_rows(self, config_id: str) -> list[dict[str, Any]]:
        """List static content rows."""
        ...

    def list_rule_rows(self, config_id: str) -> list[dict[str, Any]]:
        """List submission rule rows ordered by priority."""
        ...


class RecordStorePort(Protocol):
    """Keyed record store the pipeline persists into."""

    def fetch_by_key(self, table: str, key: str, value: Any) -> dict[str, Any] | None:
        """Fetch one record where key equals value."""
        ...

    def insert(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        """Insert a record and return it with its id."""
        ...

    def update(self, table: str, record_id: Any, patch: dict[str, Any]) -> dict[str, Any]:
        """Apply patch to the record and return the stored record."""
        ...


class LockPort(Protocol):
    """Advisory locks serializing lookup-then-write."""

    def hold(self, key: str) -> AbstractContextManager[None]:
        """Hold the lock for key for the duration of the with block."""
        ...
