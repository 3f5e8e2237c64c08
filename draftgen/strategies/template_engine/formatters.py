"""Presentation formatting for merged values.

Turns sanitized values into the strings printed in a generated document,
following Indian conventions: ``DD/MM/YYYY`` dates, lakh/crore digit
grouping, rupee amounts and ``+91`` phone numbers.
"""

import math
import numbers
import re
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

from draftgen.strategies.template_engine.coercion import coerce_datetime, parse_number_prefix
from draftgen.strategies.template_engine.models import VariableDefinition, VariableType

RUPEE_SYMBOL = "₹"
PHONE_COUNTRY_CODE = "+91"
PHONE_DIGITS = 10
PHONE_SPLIT = 5
MULTISELECT_SEPARATOR = ", "
NUMBER_FRACTION_DIGITS = 2
CURRENCY_FRACTION_DIGITS = 0


def group_indian(digits: str) -> str:
    """Insert Indian digit-grouping separators.

    The last three digits form one group; the rest are grouped in pairs,
    e.g. ``"10000000"`` becomes ``"1,00,00,000"``.

    Args:
        digits: Unsigned integer digits.

    Returns:
        The grouped string.
    """
    if len(digits) <= 3:
        return digits

    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def _format_grouped(value: float | int | Decimal, max_fraction_digits: int) -> str:
    """Round half away from zero to at most ``max_fraction_digits`` and group the integer part."""
    with localcontext() as ctx:
        # floats reach ~1.8e308; keep every integer digit
        ctx.prec = 400
        quantum = Decimal(1).scaleb(-max_fraction_digits)
        rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
        sign = "-" if rounded < 0 else ""
        integer_part, _, fraction_part = f"{abs(rounded):f}".partition(".")

    fraction_part = fraction_part.rstrip("0")

    grouped = group_indian(integer_part)
    if fraction_part:
        grouped = f"{grouped}.{fraction_part}"
    if grouped == "0":
        sign = ""
    return f"{sign}{grouped}"


def format_indian_date(value: datetime) -> str:
    """Format a datetime as ``DD/MM/YYYY`` using its UTC calendar date."""
    return f"{value.day:02d}/{value.month:02d}/{value.year:04d}"


def format_indian_number(value: float | int | Decimal) -> str:
    """Format a number with Indian grouping and up to two fraction digits."""
    return _format_grouped(value, NUMBER_FRACTION_DIGITS)


def format_indian_currency(value: float | int | Decimal) -> str:
    """Format a rupee amount with no fraction digits, e.g. ``₹1,00,000``."""
    formatted = _format_grouped(value, CURRENCY_FRACTION_DIGITS)
    if formatted.startswith("-"):
        return f"-{RUPEE_SYMBOL}{formatted[1:]}"
    return f"{RUPEE_SYMBOL}{formatted}"


def format_phone(value: str) -> str:
    """Format a ten-digit number as ``+91 XXXXX XXXXX``.

    Values that do not contain exactly ten digits are returned unchanged.
    """
    digits = re.sub(r"[^0-9]", "", value)
    if len(digits) != PHONE_DIGITS:
        return value
    return f"{PHONE_COUNTRY_CODE} {digits[:PHONE_SPLIT]} {digits[PHONE_SPLIT:]}"


def _as_number(value: Any) -> float | int | Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        number = value
    elif isinstance(value, str) and value.strip():
        number = parse_number_prefix(value.strip())
    else:
        return None
    try:
        return number if math.isfinite(number) else None
    except (OverflowError, TypeError, ValueError, InvalidOperation):
        return None


def _format_date_value(value: Any) -> Any:
    try:
        parsed = coerce_datetime(value)
    except TypeError:
        return value
    return value if parsed is None else format_indian_date(parsed)


def _format_currency_value(value: Any) -> Any:
    number = _as_number(value)
    return value if number is None else format_indian_currency(number)


def _format_number_value(value: Any) -> Any:
    number = _as_number(value)
    return value if number is None else format_indian_number(number)


def _format_phone_value(value: Any) -> Any:
    return format_phone(value) if isinstance(value, str) else value


def _format_multiselect_value(value: Any) -> Any:
    if not isinstance(value, (list, tuple)):
        return value
    return MULTISELECT_SEPARATOR.join(str(item) for item in value)


FORMATTERS: dict[VariableType, Callable[[Any], Any]] = {
    VariableType.DATE: _format_date_value,
    VariableType.CURRENCY: _format_currency_value,
    VariableType.NUMBER: _format_number_value,
    VariableType.PHONE: _format_phone_value,
    VariableType.MULTISELECT: _format_multiselect_value,
}


def format_value(variable_type: VariableType | str, value: Any) -> Any:
    """Format one value for its declared type.

    Types without a formatter, and values that cannot be interpreted for
    their type, pass through unchanged.
    """
    formatter = FORMATTERS.get(variable_type)
    return value if formatter is None else formatter(value)


def format_variables(
    schema: Sequence[VariableDefinition],
    values: Mapping[str, Any],
) -> dict[str, Any]:
    """Build the merge map for a document.

    Only variables declared in ``schema`` and present (non-None) in
    ``values`` are included.

    Args:
        schema: The template's variable definitions.
        values: Sanitized values keyed by variable name.

    Returns:
        Formatted values keyed by variable name.
    """
    formatted: dict[str, Any] = {}
    for definition in schema:
        raw_value = values.get(definition.name)
        if raw_value is None:
            continue
        formatted[definition.name] = format_value(definition.type, raw_value)
    return formatted
