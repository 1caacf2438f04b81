from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from src.attendance_payroll.attendance_payroll.attendance.model import AttendanceRecord
from src.attendance_payroll.attendance_payroll.core.actor import Actor
from src.attendance_payroll.attendance_payroll.core.enums import AttendanceStatus, Role
from src.attendance_payroll.attendance_payroll.core.exceptions import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from src.attendance_payroll.attendance_payroll.payroll.model import SalaryStructure
from src.attendance_payroll.attendance_payroll.payroll.service import PayrollService


class FakeSalaryRepo:
    def __init__(self):
        self._next_id = 1
        self.rows = {}

    def read_salary_structure(self, employee_id, period):
        return self.rows.get((int(employee_id), period))

    def save_salary_structure(self, structure):
        key = (structure.employee_id, structure.period)
        current = self.rows.get(key)
        if current and current.finalized:
            raise InvalidStateError("Payroll for this period is finalized")
        sid = current.structure_id if current else self._next_id
        if not current:
            self._next_id += 1
        self.rows[key] = replace(structure, structure_id=sid)
        return sid

    def mark_finalized(self, employee_id, period):
        current = self.rows.get((int(employee_id), period))
        if not current or current.finalized:
            return False
        self.rows[(int(employee_id), period)] = replace(current, finalized=True)
        return True


class FinalizedAfterReadRepo(FakeSalaryRepo):
    """Reads return the row as it was before another request finalized it."""

    def read_salary_structure(self, employee_id, period):
        current = super().read_salary_structure(employee_id, period)
        return replace(current, finalized=False) if current else None


class FakeAttendanceRepo:
    def __init__(self, records=()):
        self.records = list(records)

    def list_attendance(self, employee_id, start_date, end_date):
        return [r for r in self.records if r.employee_id == int(employee_id) and start_date <= r.work_date <= end_date]


HR = Actor(user_id=100, role=Role.HR)
EMPLOYEE = Actor(user_id=1, role=Role.EMPLOYEE)


def _day(employee_id, day, start_hour, end_hour):
    return AttendanceRecord(
        employee_id=employee_id,
        work_date=day,
        status=AttendanceStatus.OFFICE,
        punch_in=datetime.combine(day, datetime.min.time()).replace(hour=start_hour),
        punch_out=datetime.combine(day, datetime.min.time()).replace(hour=end_hour),
    )


def test_only_admin_or_hr_can_run_payroll():
    svc = PayrollService(FakeSalaryRepo(), FakeAttendanceRepo())
    with pytest.raises(AuthorizationError):
        svc.compute_payroll(EMPLOYEE, SalaryStructure(employee_id=1, period="2025-01", basic=1000))


def test_negative_net_is_returned_and_logged(caplog):
    svc = PayrollService(FakeSalaryRepo(), FakeAttendanceRepo())

    with caplog.at_level(logging.WARNING):
        b = svc.compute_payroll(HR, SalaryStructure(employee_id=1, period="2025-01", basic=1000, loan_deduction=3000))

    assert b.net_salary == Decimal("-2000")
    assert "Negative net salary" in caplog.text


def test_save_read_and_finalize():
    repo = FakeSalaryRepo()
    svc = PayrollService(repo, FakeAttendanceRepo())
    structure = SalaryStructure(employee_id=1, period="2025-01", basic=25000, working_days=26, lop_days=2)

    sid = svc.save_salary_structure(HR, structure)
    assert svc.save_salary_structure(HR, replace(structure, bonus=500)) == sid

    b = svc.employee_payroll(HR, employee_id=1, period="2025-01")
    assert b.net_salary == Decimal("25000") + Decimal("500") - Decimal("1923")

    svc.finalize(HR, employee_id=1, period="2025-01")
    with pytest.raises(InvalidStateError):
        svc.save_salary_structure(HR, structure)
    with pytest.raises(InvalidStateError):
        svc.finalize(HR, employee_id=1, period="2025-01")


def test_missing_structure_and_bad_period():
    svc = PayrollService(FakeSalaryRepo(), FakeAttendanceRepo())
    with pytest.raises(NotFoundError):
        svc.employee_payroll(HR, employee_id=1, period="2025-01")
    with pytest.raises(ValidationError):
        svc.employee_payroll(HR, employee_id=1, period="January")


def test_attendance_payroll_from_records():
    # 2025-01-06..10 is Monday..Friday
    records = [_day(1, date(2025, 1, d), 9, 18) for d in (6, 8, 9, 10)] + [_day(1, date(2025, 1, 7), 10, 19)]
    svc = PayrollService(FakeSalaryRepo(), FakeAttendanceRepo(records))

    b = svc.compute_attendance_payroll(
        HR, employee_id=1, start=date(2025, 1, 6), end=date(2025, 1, 10), hourly_rate=100, working_days=5
    )

    assert b.overtime_hours == Decimal("5")
    assert b.overtime_pay == Decimal("750")
    assert b.late_instances == 1
    assert b.absent_days == 0
    assert b.net_adjustment == Decimal("700")


def test_period_report_sorts_by_net_adjustment():
    records = [_day(1, date(2025, 1, d), 9, 18) for d in range(6, 11)]
    svc = PayrollService(FakeSalaryRepo(), FakeAttendanceRepo(records))

    rows = svc.build_period_report(
        HR, employee_ids=[2, 1], start=date(2025, 1, 6), end=date(2025, 1, 10), hourly_rates={1: 100}
    )

    assert [r["employee_id"] for r in rows] == [1, 2]
    # 22 configured working days, nobody present for employee 2
    assert rows[1]["absent_days"] == 22


def test_attendance_payroll_rejects_reversed_range():
    svc = PayrollService(FakeSalaryRepo(), FakeAttendanceRepo())
    with pytest.raises(ValidationError):
        svc.compute_attendance_payroll(HR, employee_id=1, start=date(2025, 1, 10), end=date(2025, 1, 6))


def test_edit_racing_a_finalize_is_refused():
    repo = FinalizedAfterReadRepo()
    svc = PayrollService(repo, FakeAttendanceRepo())
    structure = SalaryStructure(employee_id=1, period="2025-01", basic=25000)
    svc.save_salary_structure(HR, structure)
    assert repo.mark_finalized(1, "2025-01")

    with pytest.raises(InvalidStateError):
        svc.save_salary_structure(HR, replace(structure, basic=99999))

    stored = repo.rows[(1, "2025-01")]
    assert stored.finalized
    assert stored.basic == Decimal("25000")
