from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from src.attendance_payroll.attendance_payroll.core.actor import Actor
from src.attendance_payroll.attendance_payroll.core.enums import DaySession, LeaveAction, LeaveStatus, Role
from src.attendance_payroll.attendance_payroll.core.exceptions import (
    AuthorizationError,
    InvalidStateError,
    ValidationError,
)
from src.attendance_payroll.attendance_payroll.leave.model import LeaveRequest
from src.attendance_payroll.attendance_payroll.leave.workflow import (
    LEDGER_COMMIT,
    LEDGER_RELEASE,
    LeaveRequestWorkflow,
    count_leave_days,
)

REQUESTER = Actor(user_id=1, role=Role.EMPLOYEE)
MANAGER = Actor(user_id=9, role=Role.MANAGER, managed_user_ids=frozenset({1}))
OTHER_MANAGER = Actor(user_id=8, role=Role.MANAGER, managed_user_ids=frozenset({5}))
ADMIN = Actor(user_id=100, role=Role.ADMIN)
NOW = datetime(2025, 1, 2, 10, 0)


def _request(status=LeaveStatus.PENDING):
    return LeaveRequest(
        employee_id=1,
        leave_type_id=1,
        start_date=date(2025, 1, 6),
        end_date=date(2025, 1, 8),
        days=3,
        status=status,
        request_id=7,
    )


def test_count_leave_days():
    assert count_leave_days(date(2025, 1, 6), date(2025, 1, 8)) == 3
    assert count_leave_days(date(2025, 1, 6), date(2025, 1, 6), DaySession.FIRST_HALF) == Decimal("0.5")
    assert count_leave_days(date(2025, 1, 6), date(2025, 1, 8), DaySession.SECOND_HALF) == Decimal("1.5")
    with pytest.raises(ValidationError):
        count_leave_days(date(2025, 1, 8), date(2025, 1, 6))


def test_manager_approves_pending_request():
    decided = LeaveRequestWorkflow().apply(_request(), LeaveAction.APPROVE, MANAGER, now=NOW)

    assert decided.status == LeaveStatus.APPROVED
    assert decided.approver_id == 9
    assert decided.decided_at == NOW


def test_reject_records_reason():
    decided = LeaveRequestWorkflow().apply(_request(), "reject", ADMIN, rejection_reason="  busy week ", now=NOW)

    assert decided.status == LeaveStatus.REJECTED
    assert decided.rejection_reason == "busy week"


@pytest.mark.parametrize("status", [LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED])
def test_terminal_requests_cannot_transition(status):
    with pytest.raises(InvalidStateError):
        LeaveRequestWorkflow().apply(_request(status), LeaveAction.REJECT, MANAGER, now=NOW)


def test_only_the_requesters_manager_or_admin_may_decide():
    wf = LeaveRequestWorkflow()
    with pytest.raises(AuthorizationError):
        wf.apply(_request(), LeaveAction.APPROVE, REQUESTER, now=NOW)
    with pytest.raises(AuthorizationError):
        wf.apply(_request(), LeaveAction.APPROVE, OTHER_MANAGER, now=NOW)


def test_authorization_is_checked_before_state():
    with pytest.raises(AuthorizationError):
        LeaveRequestWorkflow().apply(_request(LeaveStatus.APPROVED), LeaveAction.APPROVE, OTHER_MANAGER, now=NOW)


def test_only_the_requester_may_cancel():
    wf = LeaveRequestWorkflow()
    with pytest.raises(AuthorizationError):
        wf.apply(_request(), LeaveAction.CANCEL, ADMIN, now=NOW)

    cancelled = wf.apply(_request(), LeaveAction.CANCEL, REQUESTER, now=NOW)
    assert cancelled.status == LeaveStatus.CANCELLED
    assert cancelled.approver_id is None


def test_unknown_action():
    with pytest.raises(InvalidStateError):
        LeaveRequestWorkflow().apply(_request(), "escalate", ADMIN, now=NOW)


def test_ledger_effects():
    assert LeaveRequestWorkflow.ledger_effect(LeaveAction.APPROVE) == LEDGER_COMMIT
    assert LeaveRequestWorkflow.ledger_effect("reject") == LEDGER_RELEASE
    assert LeaveRequestWorkflow.ledger_effect(LeaveAction.CANCEL) == LEDGER_RELEASE


def test_request_rejects_reversed_dates():
    with pytest.raises(ValidationError):
        replace(_request(), end_date=date(2025, 1, 1))
