"""Utility functions for the amortization engine.

Helpers for turning user input into ``Decimal`` values and for rounding
results. Rounding is half away from zero (``ROUND_HALF_UP``), not the banker's
rounding ``Decimal`` uses by default.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

CENT = Decimal("0.01")
RATE_QUANTUM = Decimal("0.001")


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and surrounding whitespace. It raises
    ``ValueError`` if conversion fails or the value is not finite.
    """
    try:
        cleaned = value.replace(",", "").strip()
        result = Decimal(cleaned)
    except (InvalidOperation, AttributeError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result


def to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    """Return ``value`` as a finite ``Decimal``.

    Floats go through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value!r}")
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Invalid numeric value: {value}")
        return value
    if isinstance(value, (int, float)):
        return decimal_from_str(str(value))
    if isinstance(value, str):
        return decimal_from_str(value)
    raise ValueError(f"Invalid numeric value: {value!r}")


def round_money(value: Decimal) -> Decimal:
    return _quantize(value, CENT)


def round_rate(value: Decimal) -> Decimal:
    return _quantize(value, RATE_QUANTUM)


def _quantize(value: Decimal, quantum: Decimal) -> Decimal:
    result = value.quantize(quantum, rounding=ROUND_HALF_UP)
    # Noise such as -1E-25 must not come out as "-0.00".
    return abs(result) if result.is_zero() else result
