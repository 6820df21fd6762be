from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, iso
from .model import Student
from .repository import StudentRepository

_SELECT = """
    SELECT student_id, first_name, last_name, date_of_birth, profile_image, parent_id, class_id
    FROM students
"""

_UPDATABLE = {
    "first_name": "first_name",
    "last_name": "last_name",
    "date_of_birth": "date_of_birth",
    "profile_image": "profile_image",
    "parent_id": "parent_id",
    "class_id": "class_id",
}


def _to_student(r: dict) -> Student:
    return Student(
        id=int(r["student_id"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        date_of_birth=iso(r["date_of_birth"]),
        profile_image=r.get("profile_image"),
        parent_id=int(r["parent_id"]) if r.get("parent_id") is not None else None,
        class_id=int(r["class_id"]) if r.get("class_id") is not None else None,
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE student_id=%s", (int(student_id),))
            row = fetchone(cur)
            return _to_student(row) if row else None

    def list_by_parent(self, parent_id: int) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE parent_id=%s ORDER BY last_name, first_name", (int(parent_id),))
            return [_to_student(r) for r in fetchall(cur)]

    def list_by_classes(self, class_ids: Iterable[int]) -> Sequence[Student]:
        ids = [int(c) for c in class_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE class_id IN ({in_clause(ids)}) ORDER BY last_name, first_name",
                tuple(ids),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def list_by_ids(self, student_ids: Optional[Iterable[int]]) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            if student_ids is None:
                cur.execute(_SELECT + " ORDER BY last_name, first_name")
            else:
                ids = [int(s) for s in student_ids]
                if not ids:
                    return []
                cur.execute(
                    _SELECT + f" WHERE student_id IN ({in_clause(ids)}) ORDER BY last_name, first_name",
                    tuple(ids),
                )
            return [_to_student(r) for r in fetchall(cur)]

    def create_student(
        self,
        *,
        first_name: str,
        last_name: str,
        date_of_birth: str,
        profile_image: Optional[str],
        parent_id: Optional[int],
        class_id: Optional[int],
    ) -> Student:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(first_name, last_name, date_of_birth, profile_image, parent_id, class_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (first_name, last_name, date_of_birth, profile_image, parent_id, class_id),
            )
            return Student(
                id=int(cur.lastrowid),
                first_name=first_name,
                last_name=last_name,
                date_of_birth=date_of_birth,
                profile_image=profile_image,
                parent_id=parent_id,
                class_id=class_id,
            )

    def update_student(self, student_id: int, changes: Mapping[str, Any]) -> Optional[Student]:
        sets = [(_UPDATABLE[k], v) for k, v in changes.items() if k in _UPDATABLE]
        with db_cursor(self._conn_factory) as (_, cur):
            if sets:
                cur.execute(
                    f"UPDATE students SET {', '.join(f'{col}=%s' for col, _ in sets)} WHERE student_id=%s",
                    tuple(v for _, v in sets) + (int(student_id),),
                )
            cur.execute(_SELECT + " WHERE student_id=%s", (int(student_id),))
            row = fetchone(cur)
            return _to_student(row) if row else None

    def delete_student(self, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_id=%s", (int(student_id),))
            return cur.rowcount > 0

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM students")
            return int(fetchone(cur)["n"])
