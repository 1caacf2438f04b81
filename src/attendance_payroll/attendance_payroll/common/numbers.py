"""Decimal helpers for currency amounts and leave day counts."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[int, float, str, Decimal]

ZERO = Decimal("0")
HALF = Decimal("0.5")
CENT = Decimal("0.01")
UNIT = Decimal("1")


def to_decimal(value: Number | None) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    # str() keeps 0.1 as 0.1 instead of its binary expansion
    return Decimal(str(value))


def round_half_up(value: Decimal, quantum: Decimal = UNIT) -> Decimal:
    return value.quantize(quantum, rounding=ROUND_HALF_UP)


def to_hours(seconds: float) -> Decimal:
    return round_half_up(Decimal(str(seconds)) / Decimal(3600), CENT)
