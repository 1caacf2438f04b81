from __future__ import annotations

from decimal import Decimal

from ...common.numbers import ZERO, round_half_up
from ...core.enums import PayrollMode
from ..model import PayrollBreakdown, SalaryStructure
from .base import PayrollCalculator


class StructuredPayrollCalculator(PayrollCalculator):
    """Component rule: earnings - deductions - loss-of-pay. Net may go negative."""

    mode = PayrollMode.STRUCTURED

    def total_earnings(self, structure: SalaryStructure) -> Decimal:
        return sum(structure.earnings().values(), ZERO)

    def total_deductions(self, structure: SalaryStructure) -> Decimal:
        return sum(structure.deductions().values(), ZERO)

    def lop_deduction(self, structure: SalaryStructure) -> Decimal:
        if structure.lop_days <= 0 or structure.working_days <= 0:
            return ZERO
        return round_half_up(structure.basic / structure.working_days * structure.lop_days)

    def net_salary(self, structure: SalaryStructure) -> Decimal:
        return self.total_earnings(structure) - self.total_deductions(structure) - self.lop_deduction(structure)

    def calculate(self, source: SalaryStructure) -> PayrollBreakdown:
        earnings = self.total_earnings(source)
        deductions = self.total_deductions(source)
        lop = self.lop_deduction(source)
        return PayrollBreakdown(
            employee_id=source.employee_id,
            period=source.period,
            total_earnings=earnings,
            total_deductions=deductions,
            lop_deduction=lop,
            net_salary=earnings - deductions - lop,
        )
