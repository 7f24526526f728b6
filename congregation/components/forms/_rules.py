"""
Submission rule evaluation.

Functional Core - status progression and save-strategy selection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .models import (
    ConditionalSaveRule,
    MergeStrategy,
    StatusProgressionConfig,
    StatusProgressionRule,
    ValidationRule,
)

AnyRule = StatusProgressionRule | ConditionalSaveRule | ValidationRule


@dataclass(frozen=True)
class RuleOutcome:
    """Status and persistence settings after all rules ran."""

    status: str
    lookup_field: str
    merge_strategy: MergeStrategy


def progress_status(cfg: StatusProgressionConfig, form_data: dict[str, Any], status: str) -> str:
    """
    Advance status when the trigger field holds exactly the trigger value.

    First condition matching the running status wins; otherwise the
    configured default applies. An unfired trigger leaves status alone.
    """
    submitted = form_data.get(cfg.trigger_field)
    if not isinstance(submitted, str) or submitted != cfg.trigger_value:
        return status

    for condition in cfg.conditions:
        if condition.current_status == status:
            return condition.new_status
    return cfg.default


def sort_rules(rules: list[AnyRule]) -> list[AnyRule]:
    """Ascending priority, keeping load order for ties."""
    return sorted(rules, key=lambda r: r.priority)


def evaluate_rules(
    rules: list[AnyRule],
    form_data: dict[str, Any],
    initial_status: str,
    default_lookup_field: str = "email",
    default_merge_strategy: MergeStrategy = "merge",
) -> RuleOutcome:
    """Run every rule in priority order."""
    status = initial_status
    lookup_field = default_lookup_field
    merge_strategy = default_merge_strategy

    for rule in sort_rules(rules):
        if isinstance(rule, StatusProgressionRule):
            status = progress_status(rule.rule_config, form_data, status)
        elif isinstance(rule, ConditionalSaveRule):
            # last one wins
            lookup_field = rule.rule_config.lookup_field
            merge_strategy = rule.rule_config.merge_strategy

    return RuleOutcome(status=status, lookup_field=lookup_field, merge_strategy=merge_strategy)
