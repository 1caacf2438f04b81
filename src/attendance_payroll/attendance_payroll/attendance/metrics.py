from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import FrozenSet, Iterable, Optional

from ..common.datetime_utils import is_weekend, iter_dates
from ..common.numbers import CENT, ZERO, round_half_up, to_decimal, to_hours
from ..core.constants import (
    EARLY_DEPARTURE_CUTOFF,
    LATE_CUTOFF,
    MAX_PLAUSIBLE_SHIFT_HOURS,
    STANDARD_HOURS_PER_DAY,
    WEEKEND_DAYS,
)
from ..core.enums import DayKind
from .model import AttendanceRecord, DayClassification, PeriodStatistics

logger = logging.getLogger(__name__)


def hours_worked(punch_in: Optional[datetime], punch_out: Optional[datetime]) -> Decimal:
    """Duration in hours; 0 when a timestamp is missing or the interval is negative."""
    if punch_in is None or punch_out is None:
        return ZERO
    seconds = (punch_out - punch_in).total_seconds()
    if seconds <= 0:
        return ZERO
    return to_hours(seconds)


@dataclass(frozen=True)
class TimeMetricsCalculator:
    """Pure attendance metrics over a date range.

    Overnight punches (punch-out on a later date than punch-in) and intervals
    of 24h or more are not wrapped or trusted: the day still counts as present,
    contributes no hours and is reported in ``PeriodStatistics.anomalies``.
    """

    standard_hours_per_day: Decimal = Decimal(STANDARD_HOURS_PER_DAY)
    weekend_days: FrozenSet[int] = field(default=WEEKEND_DAYS)
    late_cutoff: time = LATE_CUTOFF
    early_departure_cutoff: time = EARLY_DEPARTURE_CUTOFF

    def __post_init__(self):
        object.__setattr__(self, "standard_hours_per_day", to_decimal(self.standard_hours_per_day))
        object.__setattr__(self, "weekend_days", frozenset(self.weekend_days))

    hours_worked = staticmethod(hours_worked)

    def is_anomalous(self, record: AttendanceRecord) -> bool:
        if record.punch_in is None or record.punch_out is None:
            return False
        if record.punch_out.date() != record.punch_in.date():
            return True
        return hours_worked(record.punch_in, record.punch_out) >= MAX_PLAUSIBLE_SHIFT_HOURS

    def is_late(self, record: AttendanceRecord) -> bool:
        return record.punch_in is not None and record.punch_in.time() > self.late_cutoff

    def is_early_departure(self, record: AttendanceRecord) -> bool:
        if record.punch_out is None or self.is_anomalous(record):
            return False
        return record.punch_out.time() < self.early_departure_cutoff

    def classify_day(self, day: date, record: Optional[AttendanceRecord]) -> DayClassification:
        if is_weekend(day, self.weekend_days):
            return DayClassification(work_date=day, kind=DayKind.WEEKEND, status=record.status if record else None)
        if record is None:
            return DayClassification(work_date=day, kind=DayKind.ABSENT)
        if not record.is_present:
            return DayClassification(work_date=day, kind=DayKind.ABSENT, status=record.status)
        return DayClassification(work_date=day, kind=DayKind.PRESENT, status=record.status)

    def classify_range(
        self, records: Iterable[AttendanceRecord], range_start: date, range_end: date
    ) -> list[DayClassification]:
        by_date = self._index(records, range_start, range_end)
        return [self.classify_day(d, by_date.get(d)) for d in iter_dates(range_start, range_end)]

    def period_statistics(
        self, records: Iterable[AttendanceRecord], range_start: date, range_end: date
    ) -> PeriodStatistics:
        by_date = self._index(records, range_start, range_end)

        working_days = 0
        present_days = 0
        late_days = 0
        early_departures = 0
        total_hours = ZERO
        anomalies: list[date] = []

        for day in iter_dates(range_start, range_end):
            record = by_date.get(day)
            cls = self.classify_day(day, record)
            if cls.kind == DayKind.WEEKEND:
                continue
            working_days += 1
            if cls.kind != DayKind.PRESENT:
                continue

            present_days += 1
            if self.is_late(record):
                late_days += 1
            if self.is_early_departure(record):
                early_departures += 1

            if self.is_anomalous(record):
                logger.warning(
                    "Implausible punch interval for employee %s on %s (%s -> %s)",
                    record.employee_id,
                    day,
                    record.punch_in,
                    record.punch_out,
                )
                anomalies.append(day)
                continue
            total_hours += hours_worked(record.punch_in, record.punch_out)

        expected_hours = self.standard_hours_per_day * working_days
        average = round_half_up(total_hours / present_days, CENT) if present_days else ZERO

        return PeriodStatistics(
            range_start=range_start,
            range_end=range_end,
            working_days=working_days,
            present_days=present_days,
            absent_days=working_days - present_days,
            late_days=late_days,
            early_departures=early_departures,
            total_hours=total_hours,
            expected_hours=expected_hours,
            overtime_hours=max(ZERO, total_hours - expected_hours),
            deficit_hours=max(ZERO, expected_hours - total_hours),
            average_daily_hours=average,
            anomalies=tuple(anomalies),
        )

    @staticmethod
    def _index(records: Iterable[AttendanceRecord], range_start: date, range_end: date) -> dict[date, AttendanceRecord]:
        by_date: dict[date, AttendanceRecord] = {}
        for r in records:
            if not range_start <= r.work_date <= range_end:
                continue
            if r.work_date in by_date:
                # Store does not enforce (employee, date) uniqueness; last one wins.
                logger.warning("Duplicate attendance for employee %s on %s", r.employee_id, r.work_date)
            by_date[r.work_date] = r
        return by_date
