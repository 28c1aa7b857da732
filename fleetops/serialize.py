"""Conversion of exact-decimal and date values into transport-safe form.

This is the only place where ``Decimal`` becomes ``float``. Everything
upstream (storage, cost arithmetic) keeps exact values.
"""

import math
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any


def to_num(value: Any) -> float | None:
    """Convert a decimal-like value to ``float``.

    Args:
        value: ``Decimal``, int, float, numeric string, or ``None``.

    Returns:
        Finite float, or ``None`` for absent, non-finite, or unparsable input.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return float(value) if value.is_finite() else None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_iso(value: date | str | None) -> str | None:
    """Render a date, datetime, or ISO string as ISO-8601.

    Returns ``None`` for empty or unparsable input.
    """
    if not value:
        return None
    if isinstance(value, date):
        return value.isoformat()
    try:
        return datetime.fromisoformat(value.strip()).isoformat()
    except ValueError:
        return None


def format_ymd(value: date | str | None) -> str:
    """Format as ``YYYY-MM-DD`` for display, ``-`` when missing."""
    iso = to_iso(value)
    if iso is None:
        return "-"
    return iso[:10]


def strip_decimals_deep(value: Any) -> Any:
    """Return a plain copy of ``value`` with decimals and dates flattened.

    Mappings keep their key order, lists and tuples keep their type, every
    ``Decimal`` becomes a float and every date becomes an ISO string. The
    input is never mutated and applying the function twice is the same as
    applying it once.
    """
    if isinstance(value, Decimal):
        return to_num(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {key: strip_decimals_deep(item) for key, item in value.items()}
    if isinstance(value, list):
        return [strip_decimals_deep(item) for item in value]
    if isinstance(value, tuple):
        return tuple(strip_decimals_deep(item) for item in value)
    return value
