"""Template engine domain models.

Pydantic models for the placeholder schema, generated form configuration
and rendering results. Configuration checks that belong to a single
placeholder are expressed as validators here so that one
``model_validate`` call collects every problem of that placeholder.
"""

import enum
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from app.interfaces.template import FieldError

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Default value that resolves to the current date for date fields
TODAY_SENTINEL = "today"


class PlaceholderType(str, enum.Enum):
    """Closed set of placeholder kinds."""

    STRING = "string"
    TEXT = "text"
    TEXTAREA = "textarea"
    DATE = "date"
    NUMBER = "number"
    PHONE = "phone"
    EMAIL = "email"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"


TEXT_TYPES = frozenset({PlaceholderType.STRING, PlaceholderType.TEXT, PlaceholderType.TEXTAREA})
CHOICE_TYPES = frozenset({PlaceholderType.SELECT, PlaceholderType.RADIO})
SANITIZED_TYPES = TEXT_TYPES | {PlaceholderType.EMAIL}


class FormFieldType(str, enum.Enum):
    """Widget types understood by the form renderer."""

    TEXT = "text"
    TEXTAREA = "textarea"
    DATE = "date"
    NUMBER = "number"
    PHONE = "phone"
    EMAIL = "email"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"


# =============================================================================
# Placeholder Schema
# =============================================================================


class ValidationRules(BaseModel):
    """Optional bounds applied to submitted values."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=1)
    min_value: float | None = None
    max_value: float | None = None
    pattern: str | None = None

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str | None) -> str | None:
        """Reject patterns that do not compile."""
        if v is None:
            return v
        try:
            re.compile(v)
        except re.error as exc:
            raise PydanticCustomError(
                "invalid_pattern",
                "has invalid regex pattern: {pattern} ({reason})",
                {"pattern": v, "reason": str(exc)},
            ) from exc
        return v

    @model_validator(mode="after")
    def validate_bounds(self) -> "ValidationRules":
        """Reject min/max pairs that cannot be satisfied."""
        if (
            self.min_length is not None
            and self.max_length is not None
            and self.min_length > self.max_length
        ):
            raise PydanticCustomError(
                "length_bounds", "min_length cannot be greater than max_length"
            )
        if (
            self.min_value is not None
            and self.max_value is not None
            and self.min_value > self.max_value
        ):
            raise PydanticCustomError(
                "value_bounds", "min_value cannot be greater than max_value"
            )
        return self

    @property
    def compiled_pattern(self) -> re.Pattern[str] | None:
        return re.compile(self.pattern) if self.pattern is not None else None


class PlaceholderConfig(BaseModel):
    """Declared configuration of one placeholder."""

    model_config = ConfigDict(frozen=True, extra="forbid", use_enum_values=False)

    type: PlaceholderType
    label: str
    required: bool = Field(default=False, strict=True)
    validation: ValidationRules | None = None
    default_value: Any = None
    options: list[str] | None = None
    order: int = Field(ge=0, strict=True)

    @field_validator("label")
    @classmethod
    def validate_label(cls, v: str) -> str:
        """Require a non-blank label."""
        if not v.strip():
            raise PydanticCustomError("empty_label", "must have a label")
        return v

    @model_validator(mode="after")
    def validate_options(self) -> "PlaceholderConfig":
        """Choice placeholders need a non-empty options list."""
        if self.type in CHOICE_TYPES and not self.options:
            raise PydanticCustomError(
                "missing_options",
                "of type '{kind}' must have a non-empty options list",
                {"kind": self.type.value},
            )
        return self


# =============================================================================
# Validation Results
# =============================================================================


class StructureValidationResult(BaseModel):
    """Outcome of cross-checking a body against its placeholder schema."""

    model_config = ConfigDict(frozen=True)

    errors: tuple[FieldError, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors


class DataValidationResult(BaseModel):
    """Outcome of checking submitted values against a placeholder schema."""

    model_config = ConfigDict(frozen=True)

    errors: tuple[FieldError, ...] = ()
    skipped: tuple[str, ...] = Field(
        default=(), description="Optional placeholders with no submitted value"
    )

    @property
    def is_valid(self) -> bool:
        return not self.errors


# =============================================================================
# Form Configuration
# =============================================================================


class FormOption(BaseModel):
    """One selectable option of a select/radio field."""

    value: str
    label: str
    order: int


class FormField(BaseModel):
    """UI-facing descriptor of one placeholder."""

    key: str
    type: FormFieldType
    label: str
    required: bool
    order: int
    validation: ValidationRules | None = None
    default_value: Any = None
    options: list[FormOption] | None = None


class FormConfig(BaseModel):
    """Ordered form description for a template."""

    template_id: str
    title: str
    fields: list[FormField]


# =============================================================================
# Rendering Results
# =============================================================================


class InjectionMetadata(BaseModel):
    """Bookkeeping produced while rendering a template."""

    placeholders_processed: int = 0
    placeholders_skipped: list[str] = Field(default_factory=list)
    sanitized_fields: list[str] = Field(default_factory=list)
    formatted_fields: dict[str, str] = Field(default_factory=dict)
    unresolved_placeholders: list[str] = Field(
        default_factory=list,
        description="Tokens left in the body that match no skipped placeholder",
    )


class ProcessedTemplate(BaseModel):
    """A rendered template body. Created per request, never persisted."""

    template_id: str
    processed_body: str
    injection_metadata: InjectionMetadata


class PreviewResult(BaseModel):
    """Rendered preview plus warnings a creator or buyer should see."""

    preview: str
    warnings: list[str] = Field(default_factory=list)
    errors: list[FieldError] = Field(default_factory=list)
