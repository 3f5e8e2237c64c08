"""Lenient parsing of form values shared by validation and formatting."""

import math
import numbers
import re
from datetime import date, datetime, timezone
from typing import Any

# Leading numeric prefix, mirroring how browsers parse form numbers
NUMERIC_PREFIX_REGEX = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def parse_number_prefix(text: str) -> float:
    """Parse the leading numeric part of a string.

    Args:
        text: Trimmed input such as ``"25000"`` or ``"42.5kg"``.

    Returns:
        The parsed float, or NaN when no numeric prefix exists.
    """
    match = NUMERIC_PREFIX_REGEX.match(text)
    if match is None:
        return math.nan
    try:
        return float(match.group(0))
    except (OverflowError, ValueError):
        return math.nan


def coerce_datetime(raw_value: Any) -> datetime | None:
    """Interpret a date-like value as an aware UTC datetime.

    Accepts ``datetime``/``date`` objects, ISO 8601 strings and epoch
    milliseconds. Naive values are taken as UTC.

    Args:
        raw_value: The value to interpret.

    Returns:
        The datetime, or None if the value does not denote a valid date.

    Raises:
        TypeError: If the value is of an unsupported type.
    """
    if isinstance(raw_value, datetime):
        parsed = raw_value
    elif isinstance(raw_value, date):
        parsed = datetime(raw_value.year, raw_value.month, raw_value.day)
    elif isinstance(raw_value, str):
        try:
            parsed = datetime.fromisoformat(raw_value.strip())
        except ValueError:
            return None
    elif isinstance(raw_value, numbers.Real) and not isinstance(raw_value, bool):
        try:
            milliseconds = float(raw_value)
            if not math.isfinite(milliseconds):
                return None
            return datetime.fromtimestamp(milliseconds / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        raise TypeError(f"Unsupported date value: {type(raw_value).__name__}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        # Offsets can push dates at the calendar edges out of range
        return None
