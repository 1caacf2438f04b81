from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.metrics import TimeMetricsCalculator
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import parse_clock
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .leave.ledger import LeaveBalanceLedger
from .leave.mysql_balance_repository import MySQLLeaveBalanceRepository
from .leave.mysql_leave_repository import MySQLLeaveRequestRepository, MySQLLeaveTypeRepository
from .leave.service import LeaveService
from .payroll.calculator.factory import PayrollCalculatorFactory
from .payroll.model import PerInstanceConfig
from .payroll.mysql_salary_repository import MySQLSalaryStructureRepository
from .payroll.service import PayrollService


@dataclass(frozen=True)
class Container:
    attendance_service: AttendanceService
    payroll_service: PayrollService
    leave_service: LeaveService


def build_metrics_calculator(settings: dict) -> TimeMetricsCalculator:
    return TimeMetricsCalculator(
        standard_hours_per_day=settings.get("STANDARD_HOURS_PER_DAY", constants.STANDARD_HOURS_PER_DAY),
        late_cutoff=parse_clock(settings["LATE_CUTOFF"]) if "LATE_CUTOFF" in settings else constants.LATE_CUTOFF,
        early_departure_cutoff=(
            parse_clock(settings["EARLY_DEPARTURE_CUTOFF"])
            if "EARLY_DEPARTURE_CUTOFF" in settings
            else constants.EARLY_DEPARTURE_CUTOFF
        ),
    )


def build_per_instance_config(settings: dict) -> PerInstanceConfig:
    return PerInstanceConfig(
        working_days_per_month=int(settings.get("WORKING_DAYS_PER_MONTH", constants.WORKING_DAYS_PER_MONTH)),
        standard_hours_per_day=settings.get("STANDARD_HOURS_PER_DAY", constants.STANDARD_HOURS_PER_DAY),
        overtime_multiplier=settings.get("OVERTIME_MULTIPLIER", constants.OVERTIME_MULTIPLIER),
        late_deduction_per_instance=settings.get("LATE_DEDUCTION_PER_INSTANCE", constants.LATE_DEDUCTION_PER_INSTANCE),
        absent_deduction_per_day=settings.get("ABSENT_DEDUCTION_PER_DAY", constants.ABSENT_DEDUCTION_PER_DAY),
    )


def build_container(*, db_config: dict, payroll_settings: Optional[dict] = None) -> Container:
    settings = payroll_settings or {}
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    attendance_repo = MySQLAttendanceRepository(conn)
    salary_repo = MySQLSalaryStructureRepository(conn)
    leave_types_repo = MySQLLeaveTypeRepository(conn)
    leave_requests_repo = MySQLLeaveRequestRepository(conn)
    balances_repo = MySQLLeaveBalanceRepository(conn)

    metrics = build_metrics_calculator(settings)
    ledger = LeaveBalanceLedger(
        balances_repo, max_retries=int(settings.get("LEDGER_MAX_RETRIES", constants.LEDGER_MAX_RETRIES))
    )

    return Container(
        attendance_service=AttendanceService(attendance_repo, calculator=metrics),
        payroll_service=PayrollService(
            salary_repo,
            attendance_repo,
            factory=PayrollCalculatorFactory(per_instance_config=build_per_instance_config(settings)),
            metrics=metrics,
        ),
        leave_service=LeaveService(leave_requests_repo, leave_types_repo, ledger),
    )
