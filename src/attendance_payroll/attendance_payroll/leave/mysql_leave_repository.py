from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.enums import DaySession, LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveRequest, LeaveType
from .repository import LeaveRequestRepository, LeaveTypeRepository

_REQUEST_COLUMNS = """
    request_id, employee_id, leave_type_id, start_date, end_date, duration, days,
    status, reason, rejection_reason, approver_id, created_at, decided_at
"""


def _to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        leave_type_id=int(r["leave_type_id"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        duration=DaySession(r["duration"]),
        days=r["days"],
        status=LeaveStatus(r["status"]),
        reason=r.get("reason"),
        rejection_reason=r.get("rejection_reason"),
        approver_id=int(r["approver_id"]) if r.get("approver_id") is not None else None,
        created_at=r.get("created_at"),
        decided_at=r.get("decided_at"),
    )


def _to_leave_type(r: dict) -> LeaveType:
    return LeaveType(
        leave_type_id=int(r["leave_type_id"]),
        name=r["name"],
        code=r["code"],
        color=r.get("color") or "#6b7280",
        default_days=r["default_days"],
        is_paid=bool(r["is_paid"]),
        carry_forward=bool(r["carry_forward"]),
        max_carry_forward=r.get("max_carry_forward") or 0,
        is_active=bool(r["is_active"]),
    )


class MySQLLeaveTypeRepository(LeaveTypeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, leave_type_id: int) -> Optional[LeaveType]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM leave_types WHERE leave_type_id=%s", (int(leave_type_id),))
            r = fetchone(cur)
            return _to_leave_type(r) if r else None

    def list_active(self) -> Sequence[LeaveType]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM leave_types WHERE is_active=1 ORDER BY name ASC")
            return [_to_leave_type(r) for r in fetchall(cur)]


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, request: LeaveRequest) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, leave_type_id, start_date, end_date, duration, days, status, reason, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(request.employee_id),
                    int(request.leave_type_id),
                    request.start_date,
                    request.end_date,
                    request.duration.value,
                    request.days,
                    request.status.value,
                    request.reason,
                    request.created_at,
                ),
            )
            return int(cur.lastrowid)

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_REQUEST_COLUMNS} FROM leave_requests WHERE request_id=%s",
                (int(request_id),),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list_leave_requests(
        self,
        *,
        employee_ids: Optional[Iterable[int]] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if employee_ids is not None:
            ids = [int(i) for i in employee_ids]
            if not ids:
                return []
            clauses.append(f"employee_id IN ({','.join(['%s'] * len(ids))})")
            params.extend(ids)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_REQUEST_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY created_at DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def find_overlapping(self, *, employee_id: int, start_date: date, end_date: date) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_REQUEST_COLUMNS}
                FROM leave_requests
                WHERE employee_id=%s
                  AND status IN (%s, %s)
                  AND start_date <= %s AND end_date >= %s
                LIMIT 1
                """,
                (
                    int(employee_id),
                    LeaveStatus.PENDING.value,
                    LeaveStatus.APPROVED.value,
                    end_date,
                    start_date,
                ),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def decide(self, request: LeaveRequest) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approver_id=%s, rejection_reason=%s, decided_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    request.status.value,
                    request.approver_id,
                    request.rejection_reason,
                    request.decided_at,
                    int(request.request_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def reopen(self, request: LeaveRequest) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approver_id=NULL, rejection_reason=NULL, decided_at=NULL
                WHERE request_id=%s AND status=%s
                """,
                (
                    LeaveStatus.PENDING.value,
                    int(request.request_id),
                    request.status.value,
                ),
            )
            return cur.rowcount > 0
