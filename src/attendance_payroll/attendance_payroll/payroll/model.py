from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Optional

from ..common.numbers import ZERO, to_decimal
from ..common.validators import require_non_negative
from ..core.constants import (
    ABSENT_DEDUCTION_PER_DAY,
    LATE_DEDUCTION_PER_INSTANCE,
    OVERTIME_MULTIPLIER,
    STANDARD_HOURS_PER_DAY,
    WORKING_DAYS_PER_MONTH,
)
from ..core.exceptions import ValidationError

EARNING_FIELDS = (
    "basic",
    "housing_allowance",
    "dearness_allowance",
    "conveyance",
    "medical",
    "special_allowance",
    "bonus",
    "overtime_pay",
    "other_earnings",
)

DEDUCTION_FIELDS = (
    "provident_fund",
    "employee_insurance",
    "professional_tax",
    "tax_deducted_at_source",
    "loan_deduction",
    "other_deductions",
)

DAY_FIELDS = ("working_days", "present_days", "lop_days")


def _coerce_decimals(obj, names) -> None:
    for name in names:
        value = to_decimal(getattr(obj, name))
        require_non_negative(value, name)
        object.__setattr__(obj, name, value)


@dataclass(frozen=True)
class SalaryStructure:
    """One employee's salary components for one payroll period (e.g. "2025-01")."""

    employee_id: int
    period: str

    basic: Decimal = ZERO
    housing_allowance: Decimal = ZERO
    dearness_allowance: Decimal = ZERO
    conveyance: Decimal = ZERO
    medical: Decimal = ZERO
    special_allowance: Decimal = ZERO
    bonus: Decimal = ZERO
    overtime_pay: Decimal = ZERO
    other_earnings: Decimal = ZERO

    provident_fund: Decimal = ZERO
    employee_insurance: Decimal = ZERO
    professional_tax: Decimal = ZERO
    tax_deducted_at_source: Decimal = ZERO
    loan_deduction: Decimal = ZERO
    other_deductions: Decimal = ZERO

    working_days: Decimal = ZERO
    present_days: Decimal = ZERO
    lop_days: Decimal = ZERO

    finalized: bool = False
    structure_id: Optional[int] = None

    def __post_init__(self):
        _coerce_decimals(self, EARNING_FIELDS + DEDUCTION_FIELDS + DAY_FIELDS)

    def earnings(self) -> dict[str, Decimal]:
        return {name: getattr(self, name) for name in EARNING_FIELDS}

    def deductions(self) -> dict[str, Decimal]:
        return {name: getattr(self, name) for name in DEDUCTION_FIELDS}

    @classmethod
    def from_dict(cls, data: dict) -> "SalaryStructure":
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})


@dataclass(frozen=True)
class PayrollBreakdown:
    employee_id: int
    period: str
    total_earnings: Decimal
    total_deductions: Decimal
    lop_deduction: Decimal
    net_salary: Decimal

    @property
    def is_negative(self) -> bool:
        return self.net_salary < 0

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "period": self.period,
            "total_earnings": str(self.total_earnings),
            "total_deductions": str(self.total_deductions),
            "lop_deduction": str(self.lop_deduction),
            "net_salary": str(self.net_salary),
            "is_negative": self.is_negative,
        }


@dataclass(frozen=True)
class PerInstanceConfig:
    working_days_per_month: int = WORKING_DAYS_PER_MONTH
    standard_hours_per_day: Decimal = Decimal(STANDARD_HOURS_PER_DAY)
    overtime_multiplier: Decimal = Decimal(OVERTIME_MULTIPLIER)
    late_deduction_per_instance: Decimal = Decimal(LATE_DEDUCTION_PER_INSTANCE)
    absent_deduction_per_day: Decimal = Decimal(ABSENT_DEDUCTION_PER_DAY)

    def __post_init__(self):
        _coerce_decimals(
            self,
            (
                "standard_hours_per_day",
                "overtime_multiplier",
                "late_deduction_per_instance",
                "absent_deduction_per_day",
            ),
        )
        if int(self.working_days_per_month) < 0:
            raise ValidationError("working_days_per_month must not be negative")


@dataclass(frozen=True)
class AttendanceSummary:
    """Per-instance payroll input, usually derived from PeriodStatistics."""

    employee_id: int
    present_days: int
    total_hours: Decimal
    late_instances: int
    hourly_rate: Decimal = ZERO
    working_days: Optional[int] = None

    def __post_init__(self):
        _coerce_decimals(self, ("total_hours", "hourly_rate"))


@dataclass(frozen=True)
class PerInstanceBreakdown:
    employee_id: int
    working_days: int
    regular_hours: Decimal
    overtime_hours: Decimal
    absent_days: int
    late_instances: int
    absent_deduction: Decimal
    late_deduction: Decimal
    total_deductions: Decimal
    overtime_pay: Decimal
    net_adjustment: Decimal

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "working_days": self.working_days,
            "regular_hours": str(self.regular_hours),
            "overtime_hours": str(self.overtime_hours),
            "absent_days": self.absent_days,
            "late_instances": self.late_instances,
            "absent_deduction": str(self.absent_deduction),
            "late_deduction": str(self.late_deduction),
            "total_deductions": str(self.total_deductions),
            "overtime_pay": str(self.overtime_pay),
            "net_adjustment": str(self.net_adjustment),
        }
