from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import AttendanceStatus, DayKind, DaySession
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class GeoLocation:
    latitude: float
    longitude: float
    address: Optional[str] = None

    def __post_init__(self):
        if not -90 <= self.latitude <= 90 or not -180 <= self.longitude <= 180:
            raise ValidationError("Location is out of range")


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar date."""

    employee_id: int
    work_date: date
    status: AttendanceStatus
    session: Optional[DaySession] = None
    punch_in: Optional[datetime] = None
    punch_out: Optional[datetime] = None
    note: Optional[str] = None
    location: Optional[GeoLocation] = None
    attendance_id: Optional[int] = None

    def __post_init__(self):
        if self.punch_out is not None:
            if self.punch_in is None:
                raise ValidationError("Punch-out requires a punch-in")
            if self.punch_out <= self.punch_in:
                raise ValidationError("Punch-out must be after punch-in")

    @property
    def is_present(self) -> bool:
        return self.status.is_working


@dataclass(frozen=True)
class DayClassification:
    """Read-model for calendars/reports: what one date counted as."""

    work_date: date
    kind: DayKind
    status: Optional[AttendanceStatus] = None


@dataclass(frozen=True)
class PeriodStatistics:
    range_start: date
    range_end: date
    working_days: int
    present_days: int
    absent_days: int
    late_days: int
    early_departures: int
    total_hours: Decimal
    expected_hours: Decimal
    overtime_hours: Decimal
    deficit_hours: Decimal
    average_daily_hours: Decimal
    anomalies: tuple[date, ...] = ()

    def to_dict(self) -> dict:
        return {
            "range_start": self.range_start.strftime("%Y-%m-%d"),
            "range_end": self.range_end.strftime("%Y-%m-%d"),
            "working_days": self.working_days,
            "present_days": self.present_days,
            "absent_days": self.absent_days,
            "late_days": self.late_days,
            "early_departures": self.early_departures,
            "total_hours": str(self.total_hours),
            "expected_hours": str(self.expected_hours),
            "overtime_hours": str(self.overtime_hours),
            "deficit_hours": str(self.deficit_hours),
            "average_daily_hours": str(self.average_daily_hours),
            "anomalies": [d.strftime("%Y-%m-%d") for d in self.anomalies],
        }
