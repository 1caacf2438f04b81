from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.numbers import Number
from ..common.validators import optional_text
from ..core.actor import Actor
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import DaySession, LeaveAction, LeaveStatus
from ..core.exceptions import AuthorizationError, InvalidStateError, NotFoundError, ValidationError
from .ledger import LeaveBalanceLedger, carry_forward_days
from .model import BalanceKey, LeaveBalance, LeaveRequest, LeaveType
from .repository import LeaveRequestRepository, LeaveTypeRepository
from .workflow import LEDGER_COMMIT, LeaveRequestWorkflow, count_leave_days, parse_action

logger = logging.getLogger(__name__)


class LeaveService:
    def __init__(
        self,
        requests: LeaveRequestRepository,
        leave_types: LeaveTypeRepository,
        ledger: LeaveBalanceLedger,
        *,
        workflow: Optional[LeaveRequestWorkflow] = None,
    ):
        self._requests = requests
        self._leave_types = leave_types
        self._ledger = ledger
        self._workflow = workflow or LeaveRequestWorkflow()

    def _get_leave_type(self, leave_type_id: int) -> LeaveType:
        leave_type = self._leave_types.get(int(leave_type_id))
        if not leave_type:
            raise NotFoundError("Leave type not found")
        return leave_type

    @staticmethod
    def _key(request: LeaveRequest) -> BalanceKey:
        return BalanceKey(employee_id=request.employee_id, leave_type_id=request.leave_type_id, year=request.balance_year)

    def submit_leave_request(
        self,
        actor: Actor,
        *,
        leave_type_id: int,
        start_date: date,
        end_date: date,
        duration: DaySession = DaySession.FULL,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        leave_type = self._get_leave_type(leave_type_id)
        if not leave_type.is_active:
            raise ValidationError("Leave type is not active")

        days = count_leave_days(start_date, end_date, duration)
        if days <= 0:
            raise ValidationError("No leave days in selected range")

        overlapping = self._requests.find_overlapping(
            employee_id=actor.user_id, start_date=start_date, end_date=end_date
        )
        if overlapping:
            raise ValidationError("You already have a leave request for these dates")

        request = LeaveRequest(
            employee_id=actor.user_id,
            leave_type_id=leave_type.leave_type_id,
            start_date=start_date,
            end_date=end_date,
            duration=duration,
            days=days,
            reason=optional_text(reason),
            created_at=now or now_local(),
        )

        key = self._key(request)
        if leave_type.is_paid:
            self._ledger.open_balance(key, leave_type.default_days)
            self._ledger.reserve(key, days)

        try:
            request_id = self._requests.create(request)
        except Exception:
            if leave_type.is_paid:
                self._ledger.release(key, days)
            raise

        logger.info(
            "Employee %s requested %s day(s) of %s (%s..%s)",
            actor.user_id,
            days,
            leave_type.code,
            start_date,
            end_date,
        )
        return replace(request, request_id=request_id)

    def transition_leave_request(
        self,
        request_id: int,
        action: LeaveAction | str,
        actor: Actor,
        *,
        rejection_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        request = self._requests.get(int(request_id))
        if not request:
            raise NotFoundError("Leave request not found")

        action = parse_action(action)
        decided = self._workflow.apply(request, action, actor, rejection_reason=rejection_reason, now=now)

        leave_type = self._get_leave_type(request.leave_type_id)
        key = self._key(request)
        effect = self._workflow.ledger_effect(action)

        # Claim the request first; only the winning decision moves the ledger.
        if not self._requests.decide(decided):
            raise InvalidStateError("Leave request was already processed")

        if leave_type.is_paid:
            try:
                if effect == LEDGER_COMMIT:
                    self._ledger.commit(key, request.days)
                else:
                    self._ledger.release(key, request.days)
            except Exception:
                if not self._requests.reopen(decided):
                    logger.error("Leave request %s could not be reopened after a ledger failure", request_id)
                raise

        logger.info("Leave request %s %s by %s", request_id, decided.status.value, actor.user_id)
        return decided

    def list_my_requests(self, actor: Actor, *, status: Optional[LeaveStatus] = None):
        return self._requests.list_leave_requests(
            employee_ids=[actor.user_id], status=status, limit=DEFAULT_LIST_LIMIT
        )

    def list_pending(self, actor: Actor):
        if actor.is_admin:
            return self._requests.list_leave_requests(status=LeaveStatus.PENDING, limit=DEFAULT_LIST_LIMIT)
        if not actor.managed_user_ids:
            raise AuthorizationError("Only managers can review leave requests")
        return self._requests.list_leave_requests(
            employee_ids=sorted(actor.managed_user_ids), status=LeaveStatus.PENDING, limit=DEFAULT_LIST_LIMIT
        )

    def balance_summary(self, actor: Actor, *, employee_id: int, year: int) -> list[dict]:
        if not actor.can_view(employee_id):
            raise AuthorizationError("You cannot view this employee's leave balance")

        out = []
        for leave_type in self._leave_types.list_active():
            key = BalanceKey(employee_id=int(employee_id), leave_type_id=leave_type.leave_type_id, year=int(year))
            balance = self._ledger.open_balance(key, leave_type.default_days)
            out.append({"leave_type": leave_type.to_dict(), **balance.to_dict()})
        return out

    def open_year(self, actor: Actor, *, employee_id: int, year: int) -> list[LeaveBalance]:
        """Open ``year`` balances, carrying unused days forward where the type allows."""

        if not actor.is_admin:
            raise AuthorizationError("Admin/HR access required")

        opened = []
        for leave_type in self._leave_types.list_active():
            previous = self._ledger.read(
                BalanceKey(employee_id=int(employee_id), leave_type_id=leave_type.leave_type_id, year=int(year) - 1)
            )
            carried = carry_forward_days(previous, leave_type)
            key = BalanceKey(employee_id=int(employee_id), leave_type_id=leave_type.leave_type_id, year=int(year))
            opened.append(self._ledger.open_balance(key, leave_type.default_days + carried))
        return opened

    def set_allotment(
        self, actor: Actor, *, employee_id: int, leave_type_id: int, year: int, total: Number
    ) -> LeaveBalance:
        if not actor.is_admin:
            raise AuthorizationError("Admin/HR access required")

        leave_type = self._get_leave_type(leave_type_id)
        key = BalanceKey(employee_id=int(employee_id), leave_type_id=leave_type.leave_type_id, year=int(year))
        self._ledger.open_balance(key, total)
        return self._ledger.adjust_total(key, total)
