from __future__ import annotations

from typing import Optional

from ..core.exceptions import ConcurrencyConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import LeaveBalance
from .repository import LeaveBalanceRepository


def _to_balance(r: dict) -> LeaveBalance:
    return LeaveBalance(
        balance_id=int(r["balance_id"]),
        employee_id=int(r["employee_id"]),
        leave_type_id=int(r["leave_type_id"]),
        year=int(r["year"]),
        total=r["total"],
        used=r["used"],
        pending=r["pending"],
        available=r["available"],
        version=int(r["version"]),
    )


class MySQLLeaveBalanceRepository(LeaveBalanceRepository):
    """Optimistic concurrency: every write bumps ``version`` and is
    conditional on the version the caller read."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def read_balance(self, employee_id: int, leave_type_id: int, year: int) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT balance_id, employee_id, leave_type_id, year, total, used, pending, available, version
                FROM leave_balances
                WHERE employee_id=%s AND leave_type_id=%s AND year=%s
                """,
                (int(employee_id), int(leave_type_id), int(year)),
            )
            r = fetchone(cur)
            return _to_balance(r) if r else None

    def create_balance(self, balance: LeaveBalance) -> LeaveBalance:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO leave_balances(
                    employee_id, leave_type_id, year, total, used, pending, available, version
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,0)
                """,
                (
                    int(balance.employee_id),
                    int(balance.leave_type_id),
                    int(balance.year),
                    balance.total,
                    balance.used,
                    balance.pending,
                    balance.available,
                ),
            )
        stored = self.read_balance(balance.employee_id, balance.leave_type_id, balance.year)
        if stored is None:
            raise RuntimeError(f"Leave balance {balance.key} was not stored")
        return stored

    def write_balance(self, balance: LeaveBalance, *, expected_version: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_balances
                SET total=%s, used=%s, pending=%s, available=%s, version=version+1
                WHERE employee_id=%s AND leave_type_id=%s AND year=%s AND version=%s
                """,
                (
                    balance.total,
                    balance.used,
                    balance.pending,
                    balance.available,
                    int(balance.employee_id),
                    int(balance.leave_type_id),
                    int(balance.year),
                    int(expected_version),
                ),
            )
            if cur.rowcount == 0:
                raise ConcurrencyConflictError(f"Leave balance {balance.key} changed since version {expected_version}")
