"""
Forms component models.

Field definitions and submission rules are closed sets of variants,
validated when a form configuration is loaded. Input/output envelopes are
frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# --- Errors ---


class FormConfigNotFoundError(Exception):
    """No published or active configuration exists for a form type."""

    def __init__(self, form_type: str) -> None:
        self.form_type = form_type
        super().__init__(f"Form configuration not found: {form_type}")


class FormConfigError(Exception):
    """A stored field definition or rule is malformed."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(f"Invalid form configuration: {'; '.join(errors)}")


class MissingLookupValueError(Exception):
    """The submission lacks the value used to find an existing record."""

    def __init__(self, lookup_field: str) -> None:
        self.lookup_field = lookup_field
        super().__init__(f"Lookup field {lookup_field} is required")


@dataclass(frozen=True)
class FormError:
    """Form submission error."""

    code: str
    message: str
    field: str | None = None


# --- Form Configuration ---


FormStatus = Literal["draft", "published", "archived"]


class FormConfig(BaseModel):
    """A versioned form configuration."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    form_type: str
    name: str = ""
    version: int = 1
    status: FormStatus = "draft"
    is_active: bool = False


class StaticContent(BaseModel):
    """Static copy shown alongside a form (headings, consent text)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    content_key: str
    content: str | None = None


# --- Field Definitions ---


class _FieldBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    field_key: str
    field_type: str = "text"
    label: str = ""
    db_column: str | None = None
    is_required: bool = False
    is_notes_field: bool = False
    notes_format: str | None = None
    section: str | None = None
    display_order: int = 0
    validation_rules: dict[str, Any] = Field(default_factory=dict)
    options: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("validation_rules", mode="before")
    @classmethod
    def _none_to_empty_dict(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("options", mode="before")
    @classmethod
    def _none_to_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v


class DirectField(_FieldBase):
    """Copy the trimmed value (or the raw list) to db_column."""

    transformation_type: Literal["direct"] = "direct"


class CombineConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    fields: list[str] = Field(default_factory=list)
    separator: str = " "


class CombineField(_FieldBase):
    """Join several submitted values into one db_column."""

    transformation_type: Literal["combine"] = "combine"
    transformation_config: CombineConfig = Field(default_factory=CombineConfig)

    @field_validator("transformation_config", mode="before")
    @classmethod
    def _none_to_default(cls, v: Any) -> Any:
        return {} if v is None else v

    @model_validator(mode="after")
    def _lists_itself(self) -> CombineField:
        if self.field_key not in self.transformation_config.fields:
            raise ValueError(
                f"combine field {self.field_key} must be listed in transformation_config.fields"
            )
        return self


class NotesField(_FieldBase):
    """Render notes_format and add it to the aggregated notes."""

    transformation_type: Literal["notes"] = "notes"


class ArrayField(_FieldBase):
    """Coerce to a list of trimmed strings in db_column."""

    transformation_type: Literal["array"] = "array"


FieldDefinition = Annotated[
    DirectField | CombineField | NotesField | ArrayField,
    Field(discriminator="transformation_type"),
]


# --- Submission Rules ---


MergeStrategy = Literal["merge", "replace", "insert_only"]


class StatusCondition(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    current_status: str
    new_status: str


class StatusProgressionConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    trigger_field: str
    trigger_value: str
    conditions: list[StatusCondition] = Field(default_factory=list)
    default: str = "New"


class ConditionalSaveConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    lookup_field: str = "email"
    merge_strategy: MergeStrategy = "merge"


class ValidationConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    required_fields: list[str] = Field(default_factory=list)


class _RuleBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    priority: int = 0


class StatusProgressionRule(_RuleBase):
    rule_type: Literal["status_progression"] = "status_progression"
    rule_config: StatusProgressionConfig


class ConditionalSaveRule(_RuleBase):
    rule_type: Literal["conditional_save"] = "conditional_save"
    rule_config: ConditionalSaveConfig = Field(default_factory=ConditionalSaveConfig)


class ValidationRule(_RuleBase):
    rule_type: Literal["validation"] = "validation"
    rule_config: ValidationConfig = Field(default_factory=ValidationConfig)


SubmissionRule = Annotated[
    StatusProgressionRule | ConditionalSaveRule | ValidationRule,
    Field(discriminator="rule_type"),
]


# --- Pipeline Configuration ---


@dataclass(frozen=True)
class PipelineConfig:
    """Submission defaults from rules."""

    table: str = "newcomers"
    default_status: str = "New"
    default_lookup_field: str = "email"
    default_merge_strategy: MergeStrategy = "merge"
    notes_separator: str = " | "


DEFAULT_PIPELINE_CONFIG = PipelineConfig()


# --- Loaded Form ---


@dataclass(frozen=True)
class LoadedForm:
    """A form configuration with its fields and static content."""

    config: FormConfig
    fields: list[DirectField | CombineField | NotesField | ArrayField]
    static_content: list[StaticContent] = field(default_factory=list)


# --- Validation ---


@dataclass(frozen=True)
class FieldValidationError:
    """A submitted value failed a field check."""

    field: str
    message: str


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: list[FieldValidationError] = field(default_factory=list)


# --- Input / Output Models ---


@dataclass(frozen=True)
class SubmissionResult:
    """Where a submission was written."""

    status: Literal["created", "updated"]
    record_id: str

    @property
    def is_new_record(self) -> bool:
        return self.status == "created"


@dataclass(frozen=True)
class SubmitFormInput:
    """Input for submitting form data."""

    form_type: str
    form_data: dict[str, Any]


@dataclass(frozen=True)
class SubmitFormOutput:
    """Output for submit operation."""

    result: SubmissionResult | None
    errors: list[FormError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class GetFormInput:
    """Input for loading a form for display."""

    form_type: str


@dataclass(frozen=True)
class GetFormOutput:
    """Output for get form operation."""

    form: LoadedForm | None
    errors: list[FormError] = field(default_factory=list)
    success: bool = True
