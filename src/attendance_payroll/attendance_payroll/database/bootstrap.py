from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

DEFAULT_LEAVE_TYPES = (
    # name, code, color, default_days, carry_forward, max_carry_forward, is_paid
    ("Casual Leave", "CL", "#3b82f6", 12, False, 0, True),
    ("Sick Leave", "SL", "#ef4444", 12, False, 0, True),
    ("Earned Leave", "EL", "#10b981", 15, True, 30, True),
    ("Work From Home", "WFH", "#8b5cf6", 24, False, 0, True),
    ("Compensatory Off", "COMP", "#f59e0b", 0, False, 0, True),
    ("Loss of Pay", "LOP", "#6b7280", 0, False, 0, False),
    ("Maternity Leave", "ML", "#ec4899", 180, False, 0, True),
    ("Paternity Leave", "PL", "#06b6d4", 15, False, 0, True),
)


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def seed_leave_types(db_config: dict) -> int:
    """Insert the default leave catalogue; existing codes are left untouched."""

    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        inserted = 0
        for name, code, color, days, carry, max_carry, paid in DEFAULT_LEAVE_TYPES:
            cur.execute(
                """
                INSERT IGNORE INTO leave_types(
                    name, code, color, default_days, carry_forward, max_carry_forward, is_paid, is_active
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, 1)
                """,
                (name, code, color, days, int(carry), max_carry, int(paid)),
            )
            inserted += cur.rowcount
        conn.commit()
        logger.info("Seeded %s leave type(s)", inserted)
        return inserted
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
