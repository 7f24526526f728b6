"""
Forms component - Dynamic form configuration and submission pipeline.
"""

from ._impl import (
    FormSubmissionPipeline,
    build_record,
    lookup_value_for,
    merge_record,
    replace_record,
)
from ._rules import RuleOutcome, evaluate_rules, progress_status, sort_rules
from ._transform import (
    TransformResult,
    aggregate_notes,
    as_text,
    combine_values,
    is_empty,
    render_note,
    transform_fields,
)
from .component import run, run_get_form, run_submit
from .loader import (
    get_static_content,
    group_fields_by_section,
    load_form_config,
    load_rules,
    parse_field_definition,
    parse_fields,
    parse_rules,
    parse_submission_rule,
)
from .models import (
    DEFAULT_PIPELINE_CONFIG,
    ArrayField,
    CombineConfig,
    CombineField,
    ConditionalSaveConfig,
    ConditionalSaveRule,
    DirectField,
    FieldDefinition,
    FieldValidationError,
    FormConfig,
    FormConfigError,
    FormConfigNotFoundError,
    FormError,
    GetFormInput,
    GetFormOutput,
    LoadedForm,
    MergeStrategy,
    MissingLookupValueError,
    NotesField,
    PipelineConfig,
    StaticContent,
    StatusCondition,
    StatusProgressionConfig,
    StatusProgressionRule,
    SubmissionResult,
    SubmissionRule,
    SubmitFormInput,
    SubmitFormOutput,
    ValidationConfig,
    ValidationResult,
    ValidationRule,
)
from .ports import FormConfigSourcePort, LockPort, RecordStorePort
from .templates import FORM_TEMPLATES, FormTemplate, get_template, template_fields, template_rules
from .validator import validate_form_data, validate_rule_requirements

__all__ = [
    # Entry points
    "run",
    "run_get_form",
    "run_submit",
    # Pipeline
    "FormSubmissionPipeline",
    "build_record",
    "lookup_value_for",
    "merge_record",
    "replace_record",
    # Transformations and rules
    "TransformResult",
    "aggregate_notes",
    "as_text",
    "combine_values",
    "is_empty",
    "render_note",
    "transform_fields",
    "RuleOutcome",
    "evaluate_rules",
    "progress_status",
    "sort_rules",
    # Loading
    "get_static_content",
    "group_fields_by_section",
    "load_form_config",
    "load_rules",
    "parse_field_definition",
    "parse_fields",
    "parse_rules",
    "parse_submission_rule",
    # Validation
    "validate_form_data",
    "validate_rule_requirements",
    # Templates
    "FORM_TEMPLATES",
    "FormTemplate",
    "get_template",
    "template_fields",
    "template_rules",
    # Models
    "DEFAULT_PIPELINE_CONFIG",
    "ArrayField",
    "CombineConfig",
    "CombineField",
    "ConditionalSaveConfig",
    "ConditionalSaveRule",
    "DirectField",
    "FieldDefinition",
    "FieldValidationError",
    "FormConfig",
    "FormConfigError",
    "FormConfigNotFoundError",
    "FormError",
    "GetFormInput",
    "GetFormOutput",
    "LoadedForm",
    "MergeStrategy",
    "MissingLookupValueError",
    "NotesField",
    "PipelineConfig",
    "StaticContent",
    "StatusCondition",
    "StatusProgressionConfig",
    "StatusProgressionRule",
    "SubmissionResult",
    "SubmissionRule",
    "SubmitFormInput",
    "SubmitFormOutput",
    "ValidationConfig",
    "ValidationResult",
    "ValidationRule",
    # Ports
    "FormConfigSourcePort",
    "LockPort",
    "RecordStorePort",
]
