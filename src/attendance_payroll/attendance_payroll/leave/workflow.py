from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.numbers import HALF
from ..common.validators import optional_text
from ..core.actor import Actor
from ..core.enums import DaySession, LeaveAction, LeaveStatus
from ..core.exceptions import AuthorizationError, InvalidStateError, ValidationError
from .model import LeaveRequest

_TARGET = {
    LeaveAction.APPROVE: LeaveStatus.APPROVED,
    LeaveAction.REJECT: LeaveStatus.REJECTED,
    LeaveAction.CANCEL: LeaveStatus.CANCELLED,
}

LEDGER_COMMIT = "commit"
LEDGER_RELEASE = "release"

_LEDGER_EFFECT = {
    LeaveAction.APPROVE: LEDGER_COMMIT,
    LeaveAction.REJECT: LEDGER_RELEASE,
    LeaveAction.CANCEL: LEDGER_RELEASE,
}


def count_leave_days(start_date: date, end_date: date, duration: DaySession = DaySession.FULL) -> Decimal:
    """Inclusive calendar-day count; half-day durations price every date at 0.5."""
    if end_date < start_date:
        raise ValidationError("Start date cannot be after end date")
    days = Decimal((end_date - start_date).days + 1)
    return days * HALF if duration.is_half else days


def parse_action(action: LeaveAction | str) -> LeaveAction:
    try:
        return LeaveAction(action)
    except ValueError:
        raise InvalidStateError(f"Unknown action: {action}")


class LeaveRequestWorkflow:
    """State machine: pending -> approved | rejected | cancelled (all terminal)."""

    def authorize(self, request: LeaveRequest, action: LeaveAction, actor: Actor) -> None:
        if action == LeaveAction.CANCEL:
            if actor.user_id != request.employee_id:
                raise AuthorizationError("Only the requester can cancel a leave request")
            return
        if not actor.can_approve_for(request.employee_id):
            raise AuthorizationError(f"Only managers can {action.value} leave requests")

    def apply(
        self,
        request: LeaveRequest,
        action: LeaveAction | str,
        actor: Actor,
        *,
        rejection_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        action = parse_action(action)
        self.authorize(request, action, actor)

        if request.status.is_terminal:
            raise InvalidStateError(f"Only pending requests can be {_TARGET[action].value}")

        changes = {"status": _TARGET[action], "decided_at": now or now_local()}
        if action != LeaveAction.CANCEL:
            changes["approver_id"] = actor.user_id
        if action == LeaveAction.REJECT:
            changes["rejection_reason"] = optional_text(rejection_reason)
        return replace(request, **changes)

    @staticmethod
    def ledger_effect(action: LeaveAction | str) -> str:
        return _LEDGER_EFFECT[parse_action(action)]
