from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..core.enums import MilestoneCategory
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, iso
from .model import Milestone
from .repository import MilestoneRepository

_SELECT = """
    SELECT milestone_id, student_id, title, description, date, category, completed, teacher_id
    FROM milestones
"""
_UPDATABLE = {"title", "description", "date", "category", "completed"}


def _to_milestone(r: dict) -> Milestone:
    return Milestone(
        id=int(r["milestone_id"]),
        student_id=int(r["student_id"]),
        title=r["title"],
        description=r.get("description"),
        date=iso(r["date"]),
        category=MilestoneCategory(r["category"]),
        completed=bool(r["completed"]),
        teacher_id=int(r["teacher_id"]),
    )


def _db_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    return value


class MySQLMilestoneRepository(MilestoneRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, milestone_id: int) -> Optional[Milestone]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE milestone_id=%s", (int(milestone_id),))
            row = fetchone(cur)
            return _to_milestone(row) if row else None

    def list_milestones(self, *, student_ids: Optional[Iterable[int]]) -> Sequence[Milestone]:
        with db_cursor(self._conn_factory) as (_, cur):
            if student_ids is None:
                cur.execute(_SELECT + " ORDER BY date DESC, milestone_id DESC")
            else:
                ids = [int(s) for s in student_ids]
                if not ids:
                    return []
                cur.execute(
                    _SELECT + f" WHERE student_id IN ({in_clause(ids)}) ORDER BY date DESC, milestone_id DESC",
                    tuple(ids),
                )
            return [_to_milestone(r) for r in fetchall(cur)]

    def create_milestone(
        self,
        *,
        student_id: int,
        title: str,
        description: Optional[str],
        date: str,
        category: MilestoneCategory,
        completed: bool,
        teacher_id: int,
    ) -> Milestone:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO milestones(student_id, title, description, date, category, completed, teacher_id)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(student_id), title, description, date, category.value, int(completed), int(teacher_id)),
            )
            return Milestone(
                id=int(cur.lastrowid),
                student_id=int(student_id),
                title=title,
                description=description,
                date=date,
                category=category,
                completed=completed,
                teacher_id=int(teacher_id),
            )

    def update_milestone(self, milestone_id: int, changes: Mapping[str, Any]) -> Optional[Milestone]:
        sets = [(k, _db_value(v)) for k, v in changes.items() if k in _UPDATABLE]
        with db_cursor(self._conn_factory) as (_, cur):
            if sets:
                cur.execute(
                    f"UPDATE milestones SET {', '.join(f'{col}=%s' for col, _ in sets)} WHERE milestone_id=%s",
                    tuple(v for _, v in sets) + (int(milestone_id),),
                )
            cur.execute(_SELECT + " WHERE milestone_id=%s", (int(milestone_id),))
            row = fetchone(cur)
            return _to_milestone(row) if row else None
