from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..core.enums import Mood
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    dump_json,
    fetchall,
    fetchone,
    in_clause,
    iso,
    load_json,
    unique_guard,
)
from .model import Report
from .repository import ReportRepository

_SELECT = """
    SELECT report_id, student_id, teacher_id, date, mood, activities, notes, achievements
    FROM reports
"""
_DUPLICATE = "A report already exists for this student on this date"
_JSON_COLUMNS = {"activities", "achievements"}
_UPDATABLE = {"date", "mood", "activities", "notes", "achievements"}


def _to_report(r: dict) -> Report:
    return Report(
        id=int(r["report_id"]),
        student_id=int(r["student_id"]),
        teacher_id=int(r["teacher_id"]),
        date=iso(r["date"]),
        mood=Mood(r["mood"]),
        activities=tuple(load_json(r.get("activities"), [])),
        notes=r.get("notes"),
        achievements=tuple(load_json(r.get("achievements"), [])),
    )


def _db_value(column: str, value: Any) -> Any:
    if column in _JSON_COLUMNS:
        return dump_json(list(value or []))
    if isinstance(value, Enum):
        return value.value
    return value


class MySQLReportRepository(ReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, report_id: int) -> Optional[Report]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE report_id=%s", (int(report_id),))
            row = fetchone(cur)
            return _to_report(row) if row else None

    def get_for_student_on(self, student_id: int, date: str) -> Optional[Report]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE student_id=%s AND date=%s", (int(student_id), date))
            row = fetchone(cur)
            return _to_report(row) if row else None

    def list_reports(self, *, student_ids: Optional[Iterable[int]]) -> Sequence[Report]:
        with db_cursor(self._conn_factory) as (_, cur):
            if student_ids is None:
                cur.execute(_SELECT + " ORDER BY date DESC, report_id DESC")
            else:
                ids = [int(s) for s in student_ids]
                if not ids:
                    return []
                cur.execute(
                    _SELECT + f" WHERE student_id IN ({in_clause(ids)}) ORDER BY date DESC, report_id DESC",
                    tuple(ids),
                )
            return [_to_report(r) for r in fetchall(cur)]

    def create_report(
        self,
        *,
        student_id: int,
        teacher_id: int,
        date: str,
        mood: Mood,
        activities: Sequence[str],
        notes: Optional[str],
        achievements: Sequence[str],
    ) -> Report:
        with unique_guard(_DUPLICATE), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO reports(student_id, teacher_id, date, mood, activities, notes, achievements)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(student_id),
                    int(teacher_id),
                    date,
                    mood.value,
                    dump_json(list(activities)),
                    notes,
                    dump_json(list(achievements)),
                ),
            )
            return Report(
                id=int(cur.lastrowid),
                student_id=int(student_id),
                teacher_id=int(teacher_id),
                date=date,
                mood=mood,
                activities=tuple(activities),
                notes=notes,
                achievements=tuple(achievements),
            )

    def update_report(self, report_id: int, changes: Mapping[str, Any]) -> Optional[Report]:
        sets = [(k, _db_value(k, v)) for k, v in changes.items() if k in _UPDATABLE]
        with unique_guard(_DUPLICATE), db_cursor(self._conn_factory) as (_, cur):
            if sets:
                cur.execute(
                    f"UPDATE reports SET {', '.join(f'{col}=%s' for col, _ in sets)} WHERE report_id=%s",
                    tuple(v for _, v in sets) + (int(report_id),),
                )
            cur.execute(_SELECT + " WHERE report_id=%s", (int(report_id),))
            row = fetchone(cur)
            return _to_report(row) if row else None

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM reports")
            return int(fetchone(cur)["n"])

    def mood_counts_between(self, start: str, end: str) -> dict[Mood, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT mood, COUNT(*) AS n FROM reports WHERE date BETWEEN %s AND %s GROUP BY mood",
                (start, end),
            )
            counts = {mood: 0 for mood in Mood}
            for r in fetchall(cur):
                counts[Mood(r["mood"])] = int(r["n"])
            return counts
