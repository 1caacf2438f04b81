from __future__ import annotations

from typing import Optional

from ..core.exceptions import InvalidStateError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import DAY_FIELDS, DEDUCTION_FIELDS, EARNING_FIELDS, SalaryStructure
from .repository import SalaryStructureRepository

_AMOUNT_COLUMNS = EARNING_FIELDS + DEDUCTION_FIELDS + DAY_FIELDS


class MySQLSalaryStructureRepository(SalaryStructureRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def read_salary_structure(self, employee_id: int, period: str) -> Optional[SalaryStructure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT structure_id, employee_id, period, finalized, {", ".join(_AMOUNT_COLUMNS)}
                FROM salary_structures
                WHERE employee_id=%s AND period=%s
                """,
                (int(employee_id), period),
            )
            r = fetchone(cur)
            if not r:
                return None
            return SalaryStructure(
                structure_id=int(r["structure_id"]),
                employee_id=int(r["employee_id"]),
                period=r["period"],
                finalized=bool(r["finalized"]),
                **{name: r[name] for name in _AMOUNT_COLUMNS},
            )

    def save_salary_structure(self, structure: SalaryStructure) -> int:
        columns = ", ".join(_AMOUNT_COLUMNS)
        placeholders = ",".join(["%s"] * len(_AMOUNT_COLUMNS))
        # A finalized row keeps its amounts; the re-read below refuses the edit.
        updates = ", ".join(f"{name}=IF(finalized, {name}, VALUES({name}))" for name in _AMOUNT_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO salary_structures(employee_id, period, {columns})
                VALUES(%s,%s,{placeholders})
                ON DUPLICATE KEY UPDATE {updates}
                """,
                (
                    int(structure.employee_id),
                    structure.period,
                    *(getattr(structure, name) for name in _AMOUNT_COLUMNS),
                ),
            )
            cur.execute(
                """
                SELECT structure_id, finalized
                FROM salary_structures
                WHERE employee_id=%s AND period=%s
                FOR UPDATE
                """,
                (int(structure.employee_id), structure.period),
            )
            r = fetchone(cur)
            if r["finalized"]:
                raise InvalidStateError("Payroll for this period is finalized")
            return int(r["structure_id"])

    def mark_finalized(self, employee_id: int, period: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE salary_structures
                SET finalized=1
                WHERE employee_id=%s AND period=%s AND finalized=0
                """,
                (int(employee_id), period),
            )
            return cur.rowcount > 0
