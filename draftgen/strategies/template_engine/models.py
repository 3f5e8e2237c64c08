"""Template engine domain models.

Declarative description of a template's form fields plus the transient
result types produced while validating submitted values. These models live
here to avoid circular imports with the API and database layers.
"""

import enum
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class VariableType(str, enum.Enum):
    """Closed set of supported form field types."""

    STRING = "STRING"
    TEXT = "TEXT"
    DATE = "DATE"
    NUMBER = "NUMBER"
    CURRENCY = "CURRENCY"
    SELECT = "SELECT"
    MULTISELECT = "MULTISELECT"
    PHONE = "PHONE"
    EMAIL = "EMAIL"


class SelectOption(BaseModel):
    """One allowed value of a SELECT or MULTISELECT field."""

    value: str
    label: str


class VariableDefinition(BaseModel):
    """One form field declared by a template.

    ``type`` keeps unknown type strings as-is so that a template carrying an
    unsupported type still loads; the validator reports it per field.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(min_length=1, description="Merge placeholder and input key")
    label: str = Field(default="", description="Human-readable label")
    type: VariableType | str = Field(union_mode="left_to_right", description="Declared field type")
    required: bool = Field(default=False)
    min_length: int = Field(default=0, ge=0, description="0 means no limit")
    max_length: int = Field(default=0, ge=0, description="0 means no limit")
    pattern: str = Field(default="", description="Optional regular expression")
    options: list[SelectOption] = Field(default_factory=list)
    order: int = Field(default=0)

    # Presentation-only fields, carried through untouched
    placeholder: str = Field(default="")
    help_text: str = Field(default="")
    section: str = Field(default="")
    default_value: Any = Field(default=None)

    @property
    def option_values(self) -> set[str]:
        """Return the set of allowed option values."""
        return {option.value for option in self.options}


class TemplateSchema(BaseModel):
    """A template's complete variable list.

    Enforces that variable names are unique, since validation and merge
    both index values by name.
    """

    variables: list[VariableDefinition] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_names(self) -> "TemplateSchema":
        """Reject duplicate variable names."""
        seen: set[str] = set()
        duplicates: list[str] = []
        for variable in self.variables:
            if variable.name in seen:
                duplicates.append(variable.name)
            seen.add(variable.name)
        if duplicates:
            raise ValueError(f"Duplicate variable names: {', '.join(sorted(set(duplicates)))}")
        return self


@dataclass(frozen=True)
class FieldError:
    """A single field-addressable validation problem.

    Attributes:
        field: Name of the offending variable.
        code: Machine-readable error code (e.g. REQUIRED).
        message: Human-readable message.
    """

    field: str
    code: str
    message: str

    def to_dict(self) -> dict[str, str]:
        """Return the wire representation."""
        return {"field": self.field, "code": self.code, "message": self.message}


@dataclass
class ValidationResult:
    """Outcome of validating one submission.

    ``sanitized`` may be non-empty even when ``valid`` is False: it holds
    every field that passed on its own. Callers must only rely on it when
    ``valid`` is True.
    """

    valid: bool
    errors: list[FieldError] = field(default_factory=list)
    sanitized: dict[str, Any] = field(default_factory=dict)

    def error_dicts(self) -> list[dict[str, str]]:
        """Return errors in their wire representation."""
        return [error.to_dict() for error in self.errors]
