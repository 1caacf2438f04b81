from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def require_non_negative(value: Decimal, field_name: str) -> Decimal:
    if value < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return value


def require_positive(value: Decimal, field_name: str) -> Decimal:
    if value <= 0:
        raise ValidationError(f"{field_name} must be greater than zero")
    return value
