from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..attendance.metrics import TimeMetricsCalculator
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_range
from ..common.numbers import Number, to_decimal
from ..core.actor import Actor
from ..core.enums import PayrollMode
from ..core.exceptions import AuthorizationError, InvalidStateError, NotFoundError, ValidationError
from .calculator.factory import PayrollCalculatorFactory
from .model import AttendanceSummary, PayrollBreakdown, PerInstanceBreakdown, SalaryStructure
from .repository import SalaryStructureRepository

logger = logging.getLogger(__name__)


class PayrollService:
    """Payroll use cases. Only admin/HR actors may run or edit payroll."""

    def __init__(
        self,
        salaries: SalaryStructureRepository,
        attendance: AttendanceRepository,
        *,
        factory: Optional[PayrollCalculatorFactory] = None,
        metrics: Optional[TimeMetricsCalculator] = None,
    ):
        self._salaries = salaries
        self._attendance = attendance
        self._factory = factory or PayrollCalculatorFactory()
        self._metrics = metrics or TimeMetricsCalculator()

    @staticmethod
    def _require_payroll_access(actor: Actor) -> None:
        if not actor.is_admin:
            raise AuthorizationError("Admin/HR access required")

    @staticmethod
    def _check_period(period: str) -> None:
        try:
            month_range(period)
        except ValueError:
            raise ValidationError("Period must be YYYY-MM")

    # -------- Structured mode --------
    def compute_payroll(self, actor: Actor, structure: SalaryStructure) -> PayrollBreakdown:
        self._require_payroll_access(actor)

        breakdown = self._factory.for_mode(PayrollMode.STRUCTURED).calculate(structure)
        if breakdown.is_negative:
            logger.warning(
                "Negative net salary %s for employee %s in %s",
                breakdown.net_salary,
                breakdown.employee_id,
                breakdown.period,
            )
        return breakdown

    def employee_payroll(self, actor: Actor, *, employee_id: int, period: str) -> PayrollBreakdown:
        self._require_payroll_access(actor)
        self._check_period(period)

        structure = self._salaries.read_salary_structure(int(employee_id), period)
        if not structure:
            raise NotFoundError("Salary structure not found")
        return self.compute_payroll(actor, structure)

    def save_salary_structure(self, actor: Actor, structure: SalaryStructure) -> int:
        self._require_payroll_access(actor)
        self._check_period(structure.period)

        current = self._salaries.read_salary_structure(structure.employee_id, structure.period)
        if current and current.finalized:
            raise InvalidStateError("Payroll for this period is finalized")
        return self._salaries.save_salary_structure(replace(structure, finalized=False))

    def finalize(self, actor: Actor, *, employee_id: int, period: str) -> PayrollBreakdown:
        breakdown = self.employee_payroll(actor, employee_id=employee_id, period=period)
        if not self._salaries.mark_finalized(int(employee_id), period):
            raise InvalidStateError("Payroll for this period is already finalized")
        logger.info("Payroll finalized for employee %s in %s by %s", employee_id, period, actor.user_id)
        return breakdown

    # -------- Per-instance mode --------
    def attendance_summary(
        self,
        *,
        employee_id: int,
        start: date,
        end: date,
        hourly_rate: Number = 0,
        working_days: Optional[int] = None,
    ) -> AttendanceSummary:
        records = self._attendance.list_attendance(int(employee_id), start, end)
        stats = self._metrics.period_statistics(records, start, end)
        return AttendanceSummary(
            employee_id=int(employee_id),
            present_days=stats.present_days,
            total_hours=stats.total_hours,
            late_instances=stats.late_days,
            hourly_rate=to_decimal(hourly_rate),
            working_days=working_days,
        )

    def compute_attendance_payroll(
        self,
        actor: Actor,
        *,
        employee_id: int,
        start: date,
        end: date,
        hourly_rate: Number = 0,
        working_days: Optional[int] = None,
    ) -> PerInstanceBreakdown:
        self._require_payroll_access(actor)
        if end < start:
            raise ValidationError("End date must be on or after start date")

        summary = self.attendance_summary(
            employee_id=employee_id,
            start=start,
            end=end,
            hourly_rate=hourly_rate,
            working_days=working_days,
        )
        return self._factory.for_mode(PayrollMode.PER_INSTANCE).calculate(summary)

    def build_period_report(
        self,
        actor: Actor,
        *,
        employee_ids: Sequence[int],
        start: date,
        end: date,
        hourly_rates: Optional[dict[int, Number]] = None,
    ) -> list[dict]:
        """Per-instance rows for several employees, highest net adjustment first."""

        rates = hourly_rates or {}
        rows = []
        for employee_id in employee_ids:
            breakdown = self.compute_attendance_payroll(
                actor,
                employee_id=employee_id,
                start=start,
                end=end,
                hourly_rate=rates.get(int(employee_id), 0),
            )
            rows.append(breakdown.to_dict())

        rows.sort(key=lambda x: Decimal(x["net_adjustment"]), reverse=True)
        return rows
