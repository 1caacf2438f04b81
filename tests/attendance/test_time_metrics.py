from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.attendance_payroll.attendance_payroll.attendance.metrics import TimeMetricsCalculator, hours_worked
from src.attendance_payroll.attendance_payroll.attendance.model import AttendanceRecord
from src.attendance_payroll.attendance_payroll.core.enums import AttendanceStatus, DayKind
from src.attendance_payroll.attendance_payroll.core.exceptions import ValidationError

# 2025-01-06 is a Monday
MON, TUE, WED, THU, FRI, SAT, SUN = (date(2025, 1, d) for d in range(6, 13))


def _rec(day, start=None, end=None, status=AttendanceStatus.OFFICE, next_day_out=False):
    punch_in = datetime.combine(day, datetime.strptime(start, "%H:%M").time()) if start else None
    punch_out = None
    if end:
        out_day = date.fromordinal(day.toordinal() + 1) if next_day_out else day
        punch_out = datetime.combine(out_day, datetime.strptime(end, "%H:%M").time())
    return AttendanceRecord(employee_id=1, work_date=day, status=status, punch_in=punch_in, punch_out=punch_out)


def test_hours_worked_nine_to_six_is_nine_hours():
    assert hours_worked(datetime(2025, 1, 6, 9, 0), datetime(2025, 1, 6, 18, 0)) == Decimal("9")


def test_hours_worked_is_zero_for_reversed_or_missing_interval():
    assert hours_worked(datetime(2025, 1, 6, 18, 0), datetime(2025, 1, 6, 9, 0)) == 0
    assert hours_worked(datetime(2025, 1, 6, 9, 0), None) == 0
    assert hours_worked(None, None) == 0


def test_record_rejects_punch_out_before_punch_in():
    with pytest.raises(ValidationError):
        _rec(MON, "18:00", "09:00")


def test_record_rejects_punch_out_without_punch_in():
    with pytest.raises(ValidationError):
        AttendanceRecord(employee_id=1, work_date=MON, status=AttendanceStatus.OFFICE, punch_out=datetime(2025, 1, 6, 9))


def test_week_statistics():
    records = [
        _rec(MON, "09:00", "18:00"),
        _rec(TUE, "10:00", "18:00"),  # late
        _rec(WED, "09:00", "16:00"),  # early departure
        _rec(FRI, "09:00", "01:00", next_day_out=True),  # overnight
        _rec(SAT, "09:00", "12:00"),  # weekend work does not count
    ]

    stats = TimeMetricsCalculator().period_statistics(records, MON, SUN)

    assert stats.working_days == 5
    assert stats.present_days == 4
    assert stats.absent_days == 1
    assert stats.present_days + stats.absent_days == stats.working_days
    assert stats.late_days == 1
    assert stats.early_departures == 1
    assert stats.total_hours == Decimal("24")
    assert stats.expected_hours == Decimal("40")
    assert stats.overtime_hours == 0
    assert stats.deficit_hours == Decimal("16")
    assert stats.average_daily_hours == Decimal("6.00")
    assert stats.anomalies == (FRI,)


def test_overtime_and_deficit_are_never_both_positive():
    calc = TimeMetricsCalculator()

    long_day = calc.period_statistics([_rec(MON, "08:00", "20:00")], MON, MON)
    assert long_day.overtime_hours == Decimal("4")
    assert long_day.deficit_hours == 0

    short_day = calc.period_statistics([_rec(MON, "09:00", "13:00")], MON, MON)
    assert short_day.overtime_hours == 0
    assert short_day.deficit_hours == Decimal("4")


def test_range_without_working_days():
    stats = TimeMetricsCalculator().period_statistics([_rec(SAT, "09:00", "18:00")], SAT, SUN)

    assert stats.working_days == 0
    assert stats.present_days == 0
    assert stats.absent_days == 0
    assert stats.expected_hours == 0
    assert stats.average_daily_hours == 0


def test_non_working_status_on_weekday_counts_as_absent():
    records = [_rec(MON, status=AttendanceStatus.HOLIDAY), _rec(TUE, "09:00", "17:00", status=AttendanceStatus.FIELD)]

    stats = TimeMetricsCalculator().period_statistics(records, MON, TUE)

    assert stats.present_days == 1
    assert stats.absent_days == 1


def test_records_outside_range_are_ignored():
    stats = TimeMetricsCalculator().period_statistics([_rec(MON, "09:00", "18:00")], TUE, WED)
    assert stats.present_days == 0
    assert stats.total_hours == 0


def test_duplicate_records_last_one_wins():
    records = [_rec(MON, "09:00", "18:00"), _rec(MON, "09:00", "11:00")]

    stats = TimeMetricsCalculator().period_statistics(records, MON, MON)

    assert stats.present_days == 1
    assert stats.total_hours == Decimal("2")


def test_classify_range_marks_each_date():
    days = TimeMetricsCalculator().classify_range([_rec(MON, "09:00", "18:00")], MON, SUN)

    assert [d.kind for d in days] == [
        DayKind.PRESENT,
        DayKind.ABSENT,
        DayKind.ABSENT,
        DayKind.ABSENT,
        DayKind.ABSENT,
        DayKind.WEEKEND,
        DayKind.WEEKEND,
    ]
    assert days[0].status == AttendanceStatus.OFFICE


def test_custom_cutoffs_and_standard_hours():
    calc = TimeMetricsCalculator(
        standard_hours_per_day="7.5",
        late_cutoff=datetime.strptime("09:00", "%H:%M").time(),
    )
    stats = calc.period_statistics([_rec(MON, "09:15", "17:15")], MON, MON)

    assert stats.late_days == 1
    assert stats.expected_hours == Decimal("7.5")
    assert stats.overtime_hours == Decimal("0.5")
