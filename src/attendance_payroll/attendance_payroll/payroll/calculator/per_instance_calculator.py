from __future__ import annotations

from typing import Optional

from ...common.numbers import ZERO
from ...core.enums import PayrollMode
from ..model import AttendanceSummary, PerInstanceBreakdown, PerInstanceConfig
from .base import PayrollCalculator


class PerInstancePayrollCalculator(PayrollCalculator):
    """Adjustment rule: overtime bonus minus per-absence and per-late penalties."""

    mode = PayrollMode.PER_INSTANCE

    def __init__(self, config: Optional[PerInstanceConfig] = None):
        self._config = config or PerInstanceConfig()

    @property
    def config(self) -> PerInstanceConfig:
        return self._config

    def calculate(self, source: AttendanceSummary) -> PerInstanceBreakdown:
        cfg = self._config
        working_days = source.working_days if source.working_days is not None else cfg.working_days_per_month

        expected_hours = cfg.standard_hours_per_day * working_days
        overtime_hours = max(ZERO, source.total_hours - expected_hours)
        regular_hours = min(source.total_hours, expected_hours)
        absent_days = max(0, int(working_days) - int(source.present_days))

        absent_deduction = absent_days * cfg.absent_deduction_per_day
        late_deduction = int(source.late_instances) * cfg.late_deduction_per_instance
        total_deductions = absent_deduction + late_deduction
        overtime_pay = overtime_hours * source.hourly_rate * cfg.overtime_multiplier

        return PerInstanceBreakdown(
            employee_id=source.employee_id,
            working_days=int(working_days),
            regular_hours=regular_hours,
            overtime_hours=overtime_hours,
            absent_days=absent_days,
            late_instances=int(source.late_instances),
            absent_deduction=absent_deduction,
            late_deduction=late_deduction,
            total_deductions=total_deductions,
            overtime_pay=overtime_pay,
            net_adjustment=overtime_pay - total_deductions,
        )
