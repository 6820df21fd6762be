from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import SchoolClass
from .repository import ClassRepository


def _to_class(r: dict) -> SchoolClass:
    return SchoolClass(
        id=int(r["class_id"]),
        name=r["name"],
        teacher_id=int(r["teacher_id"]) if r.get("teacher_id") is not None else None,
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id, name, teacher_id FROM classes WHERE class_id=%s", (int(class_id),))
            row = fetchone(cur)
            return _to_class(row) if row else None

    def list_by_teacher(self, teacher_id: int) -> Sequence[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT class_id, name, teacher_id FROM classes WHERE teacher_id=%s ORDER BY name",
                (int(teacher_id),),
            )
            return [_to_class(r) for r in fetchall(cur)]

    def list_by_ids(self, class_ids: Iterable[int]) -> Sequence[SchoolClass]:
        ids = [int(c) for c in class_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT class_id, name, teacher_id FROM classes WHERE class_id IN ({in_clause(ids)}) ORDER BY name",
                tuple(ids),
            )
            return [_to_class(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id, name, teacher_id FROM classes ORDER BY name")
            return [_to_class(r) for r in fetchall(cur)]

    def create_class(self, *, name: str, teacher_id: Optional[int]) -> SchoolClass:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO classes(name, teacher_id) VALUES(%s,%s)", (name, teacher_id))
            return SchoolClass(id=int(cur.lastrowid), name=name, teacher_id=teacher_id)

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM classes")
            return int(fetchone(cur)["n"])
