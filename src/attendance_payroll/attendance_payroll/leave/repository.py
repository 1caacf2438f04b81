from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveBalance, LeaveRequest, LeaveType


class LeaveTypeRepository(Protocol):
    def get(self, leave_type_id: int) -> Optional[LeaveType]:
        raise NotImplementedError

    def list_active(self) -> Sequence[LeaveType]:
        raise NotImplementedError


class LeaveBalanceRepository(Protocol):
    def read_balance(self, employee_id: int, leave_type_id: int, year: int) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def create_balance(self, balance: LeaveBalance) -> LeaveBalance:
        """Insert if missing and return the stored row (existing row wins)."""

        raise NotImplementedError

    def write_balance(self, balance: LeaveBalance, *, expected_version: int) -> None:
        """Persist ``balance`` only if the stored version still equals
        ``expected_version``; raise ConcurrencyConflictError otherwise."""

        raise NotImplementedError


class LeaveRequestRepository(Protocol):
    def create(self, request: LeaveRequest) -> int:
        raise NotImplementedError

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_leave_requests(
        self,
        *,
        employee_ids: Optional[Iterable[int]] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        """``employee_ids=None`` means all employees."""

        raise NotImplementedError

    def find_overlapping(self, *, employee_id: int, start_date: date, end_date: date) -> Optional[LeaveRequest]:
        """First pending/approved request of the employee intersecting the range."""

        raise NotImplementedError

    def decide(self, request: LeaveRequest) -> bool:
        """Store the decided request only if the stored one is still pending."""

        raise NotImplementedError

    def reopen(self, request: LeaveRequest) -> bool:
        """Put a decided request back to pending, only if it still has ``request.status``."""

        raise NotImplementedError
