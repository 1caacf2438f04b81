from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.numbers import ZERO, to_decimal
from ..common.validators import require_non_empty
from ..core.enums import DaySession, LeaveStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class LeaveType:
    leave_type_id: int
    name: str
    code: str
    color: str = "#6b7280"
    default_days: Decimal = ZERO
    is_paid: bool = True
    carry_forward: bool = False
    max_carry_forward: Decimal = ZERO
    is_active: bool = True

    def __post_init__(self):
        object.__setattr__(self, "name", require_non_empty(self.name, "Leave type name"))
        object.__setattr__(self, "code", require_non_empty(self.code, "Leave type code").upper())
        object.__setattr__(self, "default_days", to_decimal(self.default_days))
        object.__setattr__(self, "max_carry_forward", to_decimal(self.max_carry_forward))
        if self.default_days < 0 or self.max_carry_forward < 0:
            raise ValidationError("Leave allotments must not be negative")

    def to_dict(self) -> dict:
        return {
            "id": self.leave_type_id,
            "name": self.name,
            "code": self.code,
            "color": self.color,
            "is_paid": self.is_paid,
        }


@dataclass(frozen=True)
class BalanceKey:
    employee_id: int
    leave_type_id: int
    year: int


@dataclass(frozen=True)
class LeaveBalance:
    """Ledger row. ``available`` is stored, and must equal total - used - pending.

    The constructor does not enforce the identity so that a corrupted row can
    be detected by the ledger instead of being silently recomputed.
    """

    employee_id: int
    leave_type_id: int
    year: int
    total: Decimal
    used: Decimal = ZERO
    pending: Decimal = ZERO
    available: Optional[Decimal] = None
    version: int = 0
    balance_id: Optional[int] = None

    def __post_init__(self):
        for name in ("total", "used", "pending"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))
        if self.available is None:
            object.__setattr__(self, "available", self.total - self.used - self.pending)
        else:
            object.__setattr__(self, "available", to_decimal(self.available))

    @property
    def key(self) -> BalanceKey:
        return BalanceKey(employee_id=self.employee_id, leave_type_id=self.leave_type_id, year=self.year)

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "total": str(self.total),
            "used": str(self.used),
            "pending": str(self.pending),
            "available": str(self.available),
        }


@dataclass(frozen=True)
class LeaveRequest:
    employee_id: int
    leave_type_id: int
    start_date: date
    end_date: date
    days: Decimal
    duration: DaySession = DaySession.FULL
    status: LeaveStatus = LeaveStatus.PENDING
    reason: Optional[str] = None
    rejection_reason: Optional[str] = None
    approver_id: Optional[int] = None
    created_at: Optional[datetime] = None
    decided_at: Optional[datetime] = None
    request_id: Optional[int] = None

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValidationError("Start date cannot be after end date")
        object.__setattr__(self, "days", to_decimal(self.days))
        if self.days < 0:
            raise ValidationError("Leave days must not be negative")

    @property
    def balance_year(self) -> int:
        return self.start_date.year

    def to_dict(self) -> dict:
        return {
            "id": self.request_id,
            "employee_id": self.employee_id,
            "leave_type_id": self.leave_type_id,
            "start_date": self.start_date.strftime("%Y-%m-%d"),
            "end_date": self.end_date.strftime("%Y-%m-%d"),
            "duration": self.duration.value,
            "days": str(self.days),
            "status": self.status.value,
            "reason": self.reason,
            "rejection_reason": self.rejection_reason,
            "approver_id": self.approver_id,
        }
