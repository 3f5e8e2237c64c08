"""Template engine strategies.

Variable schema models plus the formatting used when merging values into
Word templates. The docxtpl renderer lives in
``draftgen.strategies.template_engine.renderer``.
"""

from draftgen.strategies.template_engine.formatters import format_value, format_variables
from draftgen.strategies.template_engine.models import (
    FieldError,
    SelectOption,
    TemplateSchema,
    ValidationResult,
    VariableDefinition,
    VariableType,
)

__all__ = [
    "FieldError",
    "SelectOption",
    "TemplateSchema",
    "ValidationResult",
    "VariableDefinition",
    "VariableType",
    "format_value",
    "format_variables",
]
