from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Optional

from ..common.datetime_utils import now_local
from ..common.validators import optional_text
from ..core.actor import Actor
from ..core.enums import AttendanceStatus, DaySession
from ..core.exceptions import AuthorizationError, ValidationError
from .metrics import TimeMetricsCalculator
from .model import AttendanceRecord, DayClassification, GeoLocation, PeriodStatistics
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        calculator: Optional[TimeMetricsCalculator] = None,
    ):
        self._attendance = attendance
        self._calculator = calculator or TimeMetricsCalculator()

    @property
    def calculator(self) -> TimeMetricsCalculator:
        return self._calculator

    def punch_in(
        self,
        actor: Actor,
        *,
        status: AttendanceStatus,
        session: Optional[DaySession] = None,
        note: Optional[str] = None,
        location: Optional[GeoLocation] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()

        existing = self._attendance.get_for_employee_and_date(actor.user_id, today)
        if existing:
            raise ValidationError("Attendance already marked for today")

        record = AttendanceRecord(
            employee_id=actor.user_id,
            work_date=today,
            status=status,
            session=session or DaySession.FULL,
            punch_in=now if status.is_working else None,
            note=optional_text(note),
            location=location,
        )
        attendance_id = self._attendance.create(record)
        logger.info("Employee %s marked %s on %s", actor.user_id, status.value, today)
        return replace(record, attendance_id=attendance_id)

    def punch_out(self, actor: Actor, *, note: Optional[str] = None, now: Optional[datetime] = None) -> None:
        now = now or now_local()
        today = now.date()

        record = self._attendance.get_for_employee_and_date(actor.user_id, today)
        if not record or record.punch_in is None:
            raise ValidationError("You have not punched in today")
        if record.punch_out is not None:
            raise ValidationError("You have already punched out today")
        if now <= record.punch_in:
            raise ValidationError("Punch-out must be after punch-in")

        if not self._attendance.update_punch_out(
            attendance_id=int(record.attendance_id),
            punch_out=now,
            note=optional_text(note),
        ):
            raise ValidationError("Punch-out failed")

    def compute_period_statistics(
        self, records: Iterable[AttendanceRecord], range_start: date, range_end: date
    ) -> PeriodStatistics:
        return self._calculator.period_statistics(records, range_start, range_end)

    def period_statistics(self, actor: Actor, *, employee_id: int, start: date, end: date) -> PeriodStatistics:
        records = self._load(actor, employee_id=employee_id, start=start, end=end)
        return self._calculator.period_statistics(records, start, end)

    def calendar(self, actor: Actor, *, employee_id: int, start: date, end: date) -> list[DayClassification]:
        records = self._load(actor, employee_id=employee_id, start=start, end=end)
        return self._calculator.classify_range(records, start, end)

    def _load(self, actor: Actor, *, employee_id: int, start: date, end: date):
        if not actor.can_view(employee_id):
            raise AuthorizationError("You cannot view this employee's attendance")
        if end < start:
            raise ValidationError("End date must be on or after start date")
        return self._attendance.list_attendance(int(employee_id), start, end)
