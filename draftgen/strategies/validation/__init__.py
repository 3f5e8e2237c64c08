"""Validation strategies for submitted template variables."""

from draftgen.strategies.validation.variable_validator import ErrorCode, validate_variables

__all__ = [
    "ErrorCode",
    "validate_variables",
]
