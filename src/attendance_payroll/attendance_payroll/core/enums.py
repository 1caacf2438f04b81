from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles used for capability checks."""

    ADMIN = "admin"
    HR = "hr"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Where/how the employee worked on a given date."""

    OFFICE = "office"
    FIELD = "field"
    WEEK_OFF = "week-off"
    HOLIDAY = "holiday"

    @property
    def is_working(self) -> bool:
        return self in (AttendanceStatus.OFFICE, AttendanceStatus.FIELD)


class DaySession(str, Enum):
    """Part of the day covered by an attendance record or a leave request."""

    FULL = "full"
    FIRST_HALF = "first-half"
    SECOND_HALF = "second-half"

    @property
    def is_half(self) -> bool:
        return self is not DaySession.FULL


class DayKind(str, Enum):
    WEEKEND = "weekend"
    ABSENT = "absent"
    PRESENT = "present"


class LeaveStatus(str, Enum):
    """Lifecycle of a leave request. Everything except PENDING is terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not LeaveStatus.PENDING


class LeaveAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"


class PayrollMode(str, Enum):
    """Payroll calculation strategies; they take different inputs."""

    STRUCTURED = "structured"
    PER_INSTANCE = "per-instance"
