from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus, DaySession
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, GeoLocation
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, status, session,
    punch_in, punch_out, note, latitude, longitude, address
"""


def _to_record(r: dict) -> AttendanceRecord:
    location = None
    if r.get("latitude") is not None and r.get("longitude") is not None:
        location = GeoLocation(
            latitude=float(r["latitude"]),
            longitude=float(r["longitude"]),
            address=r.get("address"),
        )
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        session=DaySession(r["session"]) if r.get("session") else None,
        punch_in=r.get("punch_in"),
        punch_out=r.get("punch_out"),
        note=r.get("note"),
        location=location,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_attendance(self, employee_id: int, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC
                """,
                (int(employee_id), start_date, end_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(self, record: AttendanceRecord) -> int:
        loc = record.location
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    employee_id, work_date, status, session, punch_in, punch_out,
                    note, latitude, longitude, address
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(record.employee_id),
                    record.work_date,
                    record.status.value,
                    record.session.value if record.session else None,
                    record.punch_in,
                    record.punch_out,
                    record.note,
                    loc.latitude if loc else None,
                    loc.longitude if loc else None,
                    loc.address if loc else None,
                ),
            )
            return int(cur.lastrowid)

    def update_punch_out(self, *, attendance_id: int, punch_out: datetime, note: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET punch_out=%s, note=COALESCE(%s, note)
                WHERE attendance_id=%s AND punch_out IS NULL
                """,
                (punch_out, note, int(attendance_id)),
            )
            return cur.rowcount > 0
