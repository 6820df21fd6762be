from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, iso, unique_guard
from .model import AttendanceRecord
from .repository import AttendanceRepository

_SELECT = "SELECT attendance_id, student_id, date, status, notes FROM attendance"
_DUPLICATE = "Attendance already recorded for this student on this date"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        date=iso(r["date"]),
        status=AttendanceStatus(r["status"]),
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE attendance_id=%s", (int(attendance_id),))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def get_for_student_on(self, student_id: int, date: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE student_id=%s AND date=%s", (int(student_id), date))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def list_records(
        self, *, student_ids: Optional[Iterable[int]], date: Optional[str] = None
    ) -> Sequence[AttendanceRecord]:
        where: list[str] = []
        params: list[Any] = []
        if student_ids is not None:
            ids = [int(s) for s in student_ids]
            if not ids:
                return []
            where.append(f"student_id IN ({in_clause(ids)})")
            params.extend(ids)
        if date is not None:
            where.append("date=%s")
            params.append(date)

        sql = _SELECT
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY date DESC, student_id"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

    def create_record(
        self, *, student_id: int, date: str, status: AttendanceStatus, notes: Optional[str]
    ) -> AttendanceRecord:
        with unique_guard(_DUPLICATE), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO attendance(student_id, date, status, notes) VALUES(%s,%s,%s,%s)",
                (int(student_id), date, status.value, notes),
            )
            return AttendanceRecord(
                id=int(cur.lastrowid), student_id=int(student_id), date=date, status=status, notes=notes
            )

    def update_record(self, attendance_id: int, changes: Mapping[str, Any]) -> Optional[AttendanceRecord]:
        sets = [(k, v.value if isinstance(v, Enum) else v) for k, v in changes.items() if k in ("status", "notes")]
        with db_cursor(self._conn_factory) as (_, cur):
            if sets:
                cur.execute(
                    f"UPDATE attendance SET {', '.join(f'{col}=%s' for col, _ in sets)} WHERE attendance_id=%s",
                    tuple(v for _, v in sets) + (int(attendance_id),),
                )
            cur.execute(_SELECT + " WHERE attendance_id=%s", (int(attendance_id),))
            row = fetchone(cur)
            return _to_record(row) if row else None
