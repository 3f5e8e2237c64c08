"""Variable validation strategy.

Turns an untrusted map of submitted form values into a sanitized map keyed
by variable name, or a list of field-addressable errors. Every declared
field is checked independently so a single pass reports every problem.

Validation is pure and never raises: malformed patterns and unsupported
types are reported as field errors.
"""

import html
import logging
import math
import numbers
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from draftgen.strategies.template_engine.coercion import coerce_datetime, parse_number_prefix
from draftgen.strategies.template_engine.models import (
    FieldError,
    ValidationResult,
    VariableDefinition,
    VariableType,
)

logger = logging.getLogger(__name__)


class ErrorCode:
    """Machine-readable validation error codes."""

    REQUIRED = "REQUIRED"
    INVALID_TYPE = "INVALID_TYPE"
    MIN_LENGTH = "MIN_LENGTH"
    MAX_LENGTH = "MAX_LENGTH"
    PATTERN = "PATTERN"
    INVALID_DATE = "INVALID_DATE"
    INVALID_NUMBER = "INVALID_NUMBER"
    INVALID_OPTION = "INVALID_OPTION"
    INVALID_PHONE = "INVALID_PHONE"
    INVALID_EMAIL = "INVALID_EMAIL"


NO_LENGTH_LIMIT = 0

# Indian mobile numbers: ten ASCII digits, first digit 6-9
PHONE_REGEX = re.compile(r"[6-9][0-9]{9}")
EMAIL_REGEX = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


@dataclass
class FieldResult:
    """Outcome of validating a single field.

    Attributes:
        value: Sanitized value, or None when nothing should be stored.
        errors: Errors found for the field.
    """

    value: Any = None
    errors: list[FieldError] = field(default_factory=list)

    def fail(self, definition: VariableDefinition, code: str, message: str) -> "FieldResult":
        """Record an error for the field and return self."""
        self.errors.append(FieldError(field=definition.name, code=code, message=message))
        return self


FieldValidator = Callable[[VariableDefinition, Any], FieldResult]


# =============================================================================
# Helpers
# =============================================================================


def escape_html(value: str) -> str:
    """Escape ``& < > " '`` so the value can be merged verbatim.

    Args:
        value: Raw text.

    Returns:
        The escaped text, with apostrophes rendered as ``&#39;``.
    """
    return html.escape(value, quote=True).replace("&#x27;", "&#39;")


def _missing(definition: VariableDefinition, result: FieldResult) -> FieldResult:
    if definition.required:
        result.fail(definition, ErrorCode.REQUIRED, "Value is required")
    return result


def _required_text(
    definition: VariableDefinition, raw_value: Any, result: FieldResult
) -> str | None:
    """Shared presence and type check for text-like fields.

    Returns the trimmed string, or None after recording REQUIRED or
    INVALID_TYPE as appropriate.
    """
    if raw_value is None:
        _missing(definition, result)
        return None

    if not isinstance(raw_value, str):
        result.fail(definition, ErrorCode.INVALID_TYPE, "Value must be a string")
        return None

    trimmed = raw_value.strip()
    if not trimmed:
        _missing(definition, result)
        return None

    return trimmed



# =============================================================================
# Per-type validators
# =============================================================================


def validate_text(definition: VariableDefinition, raw_value: Any) -> FieldResult:
    """Validate STRING and TEXT fields."""
    result = FieldResult()
    trimmed = _required_text(definition, raw_value, result)
    if trimmed is None:
        return result

    if definition.min_length > NO_LENGTH_LIMIT and len(trimmed) < definition.min_length:
        result.fail(definition, ErrorCode.MIN_LENGTH, "Value is too short")

    if definition.max_length > NO_LENGTH_LIMIT and len(trimmed) > definition.max_length:
        result.fail(definition, ErrorCode.MAX_LENGTH, "Value is too long")

    pattern = (definition.pattern or "").strip()
    if pattern:
        try:
            if re.search(pattern, trimmed) is None:
                result.fail(definition, ErrorCode.PATTERN, "Value does not match pattern")
        except re.error:
            logger.warning(f"Malformed pattern on variable '{definition.name}': {pattern!r}")
            result.fail(definition, ErrorCode.PATTERN, "Invalid pattern")

    if not result.errors:
        result.value = escape_html(trimmed)
    return result


def validate_date(definition: VariableDefinition, raw_value: Any) -> FieldResult:
    """Validate DATE fields."""
    result = FieldResult()
    if raw_value is None or (isinstance(raw_value, str) and not raw_value.strip()):
        return _missing(definition, result)

    try:
        parsed = coerce_datetime(raw_value)
    except TypeError:
        return result.fail(definition, ErrorCode.INVALID_TYPE, "Value must be a date")

    if parsed is None:
        return result.fail(definition, ErrorCode.INVALID_DATE, "Invalid date")

    result.value = parsed
    return result


def validate_number(definition: VariableDefinition, raw_value: Any) -> FieldResult:
    """Validate NUMBER and CURRENCY fields."""
    result = FieldResult()
    if raw_value is None:
        return _missing(definition, result)

    if isinstance(raw_value, str):
        trimmed = raw_value.strip()
        if not trimmed:
            return _missing(definition, result)
        number = parse_number_prefix(trimmed)
    elif isinstance(raw_value, numbers.Real) and not isinstance(raw_value, bool):
        number = raw_value
    else:
        return result.fail(definition, ErrorCode.INVALID_TYPE, "Value must be a number")

    try:
        finite = math.isfinite(number)
    except (OverflowError, TypeError):
        finite = False
    if not finite:
        return result.fail(definition, ErrorCode.INVALID_NUMBER, "Invalid number")

    if isinstance(number, float) and number.is_integer() and isinstance(raw_value, str):
        number = int(number)
    result.value = number
    return result


def validate_select(definition: VariableDefinition, raw_value: Any) -> FieldResult:
    """Validate SELECT fields."""
    result = FieldResult()
    trimmed = _required_text(definition, raw_value, result)
    if trimmed is None:
        return result

    if trimmed not in definition.option_values:
        return result.fail(definition, ErrorCode.INVALID_OPTION, "Invalid option")

    result.value = trimmed
    return result


def validate_multiselect(definition: VariableDefinition, raw_value: Any) -> FieldResult:
    """Validate MULTISELECT fields.

    The first bad element fails the whole field.
    """
    result = FieldResult()
    if raw_value is None:
        return _missing(definition, result)

    if not isinstance(raw_value, (list, tuple)):
        return result.fail(definition, ErrorCode.INVALID_TYPE, "Value must be an array")

    if not raw_value:
        return _missing(definition, result)

    allowed = definition.option_values
    selected: list[str] = []
    for item in raw_value:
        trimmed = item.strip() if isinstance(item, str) else ""
        if not trimmed or trimmed not in allowed:
            return result.fail(definition, ErrorCode.INVALID_OPTION, "Invalid option")
        selected.append(trimmed)

    result.value = selected
    return result


def validate_phone(definition: VariableDefinition, raw_value: Any) -> FieldResult:
    """Validate PHONE fields (10-digit Indian mobile numbers)."""
    result = FieldResult()
    trimmed = _required_text(definition, raw_value, result)
    if trimmed is None:
        return result

    if PHONE_REGEX.fullmatch(trimmed) is None:
        return result.fail(definition, ErrorCode.INVALID_PHONE, "Invalid phone number")

    result.value = trimmed
    return result


def validate_email(definition: VariableDefinition, raw_value: Any) -> FieldResult:
    """Validate EMAIL fields."""
    result = FieldResult()
    trimmed = _required_text(definition, raw_value, result)
    if trimmed is None:
        return result

    if EMAIL_REGEX.fullmatch(trimmed) is None:
        return result.fail(definition, ErrorCode.INVALID_EMAIL, "Invalid email")

    result.value = trimmed
    return result


def validate_unsupported(definition: VariableDefinition, raw_value: Any) -> FieldResult:
    """Report a variable whose declared type is not supported."""
    return FieldResult().fail(definition, ErrorCode.INVALID_TYPE, "Unsupported variable type")


VALIDATORS: dict[VariableType, FieldValidator] = {
    VariableType.STRING: validate_text,
    VariableType.TEXT: validate_text,
    VariableType.DATE: validate_date,
    VariableType.NUMBER: validate_number,
    VariableType.CURRENCY: validate_number,
    VariableType.SELECT: validate_select,
    VariableType.MULTISELECT: validate_multiselect,
    VariableType.PHONE: validate_phone,
    VariableType.EMAIL: validate_email,
}


# =============================================================================
# Entry point
# =============================================================================


def validate_variables(
    schema: Sequence[VariableDefinition],
    values: Mapping[str, Any] | None,
) -> ValidationResult:
    """Validate submitted values against a template's variable schema.

    Args:
        schema: The template's variable definitions.
        values: Untrusted submitted values keyed by variable name. Keys that
            are not declared in ``schema`` are ignored.

    Returns:
        ValidationResult with every error found and the sanitized values of
        every field that passed.
    """
    values = values if isinstance(values, Mapping) else {}
    errors: list[FieldError] = []
    sanitized: dict[str, Any] = {}

    for definition in schema:
        validator = VALIDATORS.get(definition.type, validate_unsupported)
        try:
            result = validator(definition, values.get(definition.name))
        except Exception as e:
            logger.error(f"Validator crashed on variable '{definition.name}': {e}", exc_info=True)
            result = FieldResult().fail(definition, ErrorCode.INVALID_TYPE, "Value could not be validated")

        errors.extend(result.errors)
        if not result.errors and result.value is not None:
            sanitized[definition.name] = result.value

    if errors:
        logger.debug(f"Validation failed with {len(errors)} error(s): {[e.code for e in errors]}")

    return ValidationResult(valid=not errors, errors=errors, sanitized=sanitized)
