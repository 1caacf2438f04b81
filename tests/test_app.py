from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest

from src.attendance_payroll.attendance_payroll.attendance.model import AttendanceRecord
from src.attendance_payroll.attendance_payroll.attendance.service import AttendanceService
from src.attendance_payroll.attendance_payroll.container import Container
from src.attendance_payroll.attendance_payroll.core.enums import AttendanceStatus, LeaveStatus
from src.attendance_payroll.attendance_payroll.leave.ledger import LeaveBalanceLedger
from src.attendance_payroll.attendance_payroll.leave.model import BalanceKey, LeaveType
from src.attendance_payroll.attendance_payroll.leave.service import LeaveService
from src.attendance_payroll.attendance_payroll.main import create_app
from src.attendance_payroll.attendance_payroll.payroll.service import PayrollService


class MemoryAttendanceRepo:
    def __init__(self, records=()):
        self.rows = {i: replace(r, attendance_id=i) for i, r in enumerate(records, start=1)}

    def list_attendance(self, employee_id, start_date, end_date):
        return [r for r in self.rows.values() if r.employee_id == employee_id and start_date <= r.work_date <= end_date]

    def get_for_employee_and_date(self, employee_id, work_date):
        return next((r for r in self.rows.values() if r.employee_id == employee_id and r.work_date == work_date), None)

    def create(self, record):
        rid = len(self.rows) + 1
        self.rows[rid] = replace(record, attendance_id=rid)
        return rid

    def update_punch_out(self, *, attendance_id, punch_out, note=None):
        self.rows[attendance_id] = replace(self.rows[attendance_id], punch_out=punch_out)
        return True


class MemorySalaryRepo:
    def read_salary_structure(self, employee_id, period):
        return None

    def save_salary_structure(self, structure):
        return 1

    def mark_finalized(self, employee_id, period):
        return False


class MemoryLeaveTypeRepo:
    types = {1: LeaveType(leave_type_id=1, name="Casual Leave", code="CL", default_days=12)}

    def get(self, leave_type_id):
        return self.types.get(leave_type_id)

    def list_active(self):
        return list(self.types.values())


class MemoryLeaveRequestRepo:
    def __init__(self):
        self.rows = {}

    def create(self, request):
        rid = len(self.rows) + 1
        self.rows[rid] = replace(request, request_id=rid)
        return rid

    def get(self, request_id):
        return self.rows.get(request_id)

    def list_leave_requests(self, *, employee_ids=None, status=None, limit=200):
        return [
            r
            for r in self.rows.values()
            if (employee_ids is None or r.employee_id in employee_ids) and (status is None or r.status == status)
        ]

    def find_overlapping(self, *, employee_id, start_date, end_date):
        return None

    def decide(self, request):
        if self.rows[request.request_id].status != LeaveStatus.PENDING:
            return False
        self.rows[request.request_id] = request
        return True

    def reopen(self, request):
        if self.rows[request.request_id].status != request.status:
            return False
        self.rows[request.request_id] = replace(request, status=LeaveStatus.PENDING, approver_id=None, decided_at=None)
        return True


class MemoryBalanceRepo:
    def __init__(self):
        self.rows = {}

    def read_balance(self, employee_id, leave_type_id, year):
        return self.rows.get(BalanceKey(employee_id, leave_type_id, year))

    def create_balance(self, balance):
        return self.rows.setdefault(balance.key, balance)

    def write_balance(self, balance, *, expected_version):
        self.rows[balance.key] = replace(balance, version=expected_version + 1)


def _record(day, start, end):
    return AttendanceRecord(
        employee_id=1,
        work_date=day,
        status=AttendanceStatus.OFFICE,
        punch_in=datetime.combine(day, datetime.min.time()).replace(hour=start),
        punch_out=datetime.combine(day, datetime.min.time()).replace(hour=end),
    )


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    attendance_repo = MemoryAttendanceRepo([_record(date(2025, 1, 6), 9, 18), _record(date(2025, 1, 7), 10, 18)])
    container = Container(
        attendance_service=AttendanceService(attendance_repo),
        payroll_service=PayrollService(MemorySalaryRepo(), attendance_repo),
        leave_service=LeaveService(
            MemoryLeaveRequestRepo(), MemoryLeaveTypeRepo(), LeaveBalanceLedger(MemoryBalanceRepo())
        ),
    )
    app = create_app(container)
    return app.test_client()


def _login(client, user_id, role, managed=()):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role
        sess["managed_user_ids"] = list(managed)


def test_requires_login(client):
    assert client.get("/api/attendance/statistics").status_code == 401


def test_statistics(client):
    _login(client, 1, "employee")

    res = client.get("/api/attendance/statistics?start=2025-01-06&end=2025-01-12")

    assert res.status_code == 200
    data = res.get_json()
    assert data["working_days"] == 5
    assert data["present_days"] == 2
    assert data["late_days"] == 1
    assert data["total_hours"] == "17.00"


def test_statistics_of_other_employee_is_forbidden(client):
    _login(client, 2, "employee")
    res = client.get("/api/attendance/statistics?employee_id=1&start=2025-01-06&end=2025-01-12")
    assert res.status_code == 403


def test_bad_date_is_bad_request(client):
    _login(client, 1, "employee")
    assert client.get("/api/attendance/calendar?start=06/01/2025").status_code == 400


def test_punch_in_once_per_day(client):
    _login(client, 5, "employee")

    assert client.post("/api/attendance/punch-in", json={"status": "office"}).status_code == 201
    assert client.post("/api/attendance/punch-in", json={"status": "office"}).status_code == 400


def test_leave_lifecycle(client):
    _login(client, 1, "employee")
    res = client.post(
        "/api/leave/requests",
        json={"leave_type_id": 1, "start_date": "2025-03-03", "end_date": "2025-03-05", "reason": "trip"},
    )
    assert res.status_code == 201
    request_id = res.get_json()["request"]["id"]

    assert client.post(f"/api/leave/requests/{request_id}/approve").status_code == 403

    _login(client, 9, "manager", managed=[1])
    assert client.get("/api/leave/requests/pending").get_json()[0]["id"] == request_id
    res = client.post(f"/api/leave/requests/{request_id}/approve")
    assert res.status_code == 200
    assert res.get_json()["request"]["status"] == "approved"
    assert client.post(f"/api/leave/requests/{request_id}/reject").status_code == 400

    _login(client, 1, "employee")
    balances = client.get("/api/leave/balances?year=2025").get_json()
    assert balances[0]["used"] == "3"
    assert balances[0]["available"] == "9"


def test_insufficient_balance_is_bad_request(client):
    _login(client, 1, "employee")
    res = client.post(
        "/api/leave/requests",
        json={"leave_type_id": 1, "start_date": "2025-03-01", "end_date": "2025-03-31"},
    )
    assert res.status_code == 400
    assert "Insufficient" in res.get_json()["error"]


def test_payroll_requires_admin_or_hr(client):
    _login(client, 1, "employee")
    assert client.get("/api/payroll/per-instance?employee_id=1").status_code == 403

    _login(client, 100, "hr")
    res = client.get(
        "/api/payroll/per-instance?employee_id=1&start=2025-01-06&end=2025-01-10&hourly_rate=100&working_days=5"
    )
    assert res.status_code == 200
    data = res.get_json()
    assert data["absent_days"] == 3
    assert data["late_instances"] == 1


def test_missing_salary_structure_is_not_found(client):
    _login(client, 100, "hr")
    assert client.get("/api/payroll/structured?employee_id=1&period=2025-01").status_code == 404


@pytest.mark.parametrize("location", [{"latitude": "north"}, {"longitude": 1}, "here", [1, 2]])
def test_malformed_location_is_bad_request(client, location):
    _login(client, 5, "employee")
    res = client.post("/api/attendance/punch-in", json={"status": "office", "location": location})
    assert res.status_code == 400


def test_finalize_with_bad_employee_id_is_bad_request(client):
    _login(client, 100, "hr")
    res = client.post("/api/payroll/finalize", json={"employee_id": "abc", "period": "2025-01"})
    assert res.status_code == 400
